from fastapi import APIRouter
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from ..deps import LoginRequest
from ...core.config import settings
from ...services import auth
from ...services.auth import SESSION_COOKIE

router = APIRouter(tags=["auth"])

LOGIN_PAGE = """
<html>
    <head><title>InvoiceVault - Sign in</title></head>
    <body style="font-family: Arial; text-align: center; padding: 50px;">
        <h2>InvoiceVault</h2>
        <form id="login">
            <p><input name="username" placeholder="Username" autocomplete="username"></p>
            <p><input name="password" type="password" placeholder="Password" autocomplete="current-password"></p>
            <p><button type="submit">Sign in</button></p>
            <p id="error" style="color: red;"></p>
        </form>
        <script>
            document.getElementById("login").addEventListener("submit", async (e) => {
                e.preventDefault();
                const form = new FormData(e.target);
                const r = await fetch("/api/login", {
                    method: "POST",
                    headers: {"Content-Type": "application/json"},
                    body: JSON.stringify({username: form.get("username"), password: form.get("password")})
                });
                if (r.ok) { window.location = "/"; }
                else { document.getElementById("error").textContent = (await r.json()).error; }
            });
        </script>
    </body>
</html>
"""


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    return LOGIN_PAGE


@router.post("/api/login")
async def login(req: LoginRequest):
    """Check the admin credentials and set the session cookie"""
    token = auth.login(req.username, req.password, settings)
    response = JSONResponse({"ok": True})
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=auth.session_max_age(settings),
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "prod",
    )
    return response


@router.get("/api/logout")
async def logout():
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(SESSION_COOKIE)
    return response
