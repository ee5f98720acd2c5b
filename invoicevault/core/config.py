from pydantic import Field
from pydantic_settings import BaseSettings

# Defaults below are for local development only. Override them in any
# deployment (see Settings.insecure_defaults).
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "changeme"
DEFAULT_SESSION_SECRET = "invoicevault-dev-secret"
DEFAULT_MONGODB_URI = "mongodb://localhost:27017"


class Settings(BaseSettings):
    app_name: str = Field("invoicevault", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")

    # Storage backend: "json" (single file on disk) or "mongo"
    storage_backend: str = Field("json", alias="STORAGE_BACKEND")

    # JSON file backend
    data_dir: str | None = Field(default=None, alias="DATA_DIR")
    data_file_name: str = Field("invoices.json", alias="DATA_FILE_NAME")

    # MongoDB backend
    mongodb_uri: str = Field(DEFAULT_MONGODB_URI, alias="MONGODB_URI")
    mongodb_database: str = Field("invoicevault", alias="MONGODB_DATABASE")
    mongodb_collection: str = Field("invoices", alias="MONGODB_COLLECTION")
    mongodb_timeout_ms: int = Field(5000, alias="MONGODB_TIMEOUT_MS")

    # Login gate (unset = enabled for the mongo backend only)
    auth_enabled: bool | None = Field(default=None, alias="AUTH_ENABLED")
    admin_username: str = Field(DEFAULT_ADMIN_USERNAME, alias="ADMIN_USERNAME")
    admin_password: str = Field(DEFAULT_ADMIN_PASSWORD, alias="ADMIN_PASSWORD")
    session_secret: str = Field(DEFAULT_SESSION_SECRET, alias="SESSION_SECRET")
    session_max_age_days: int = Field(7, alias="SESSION_MAX_AGE_DAYS")

    # Export
    export_format: str = Field("xlsx", alias="EXPORT_FORMAT")

    # CORS allowed origins (comma-separated list)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}

    @property
    def login_required(self) -> bool:
        """Whether the cookie login gate guards the API."""
        if self.auth_enabled is not None:
            return self.auth_enabled
        return self.storage_backend == "mongo"

    def insecure_defaults(self) -> list[str]:
        """Names of settings still carrying their development defaults."""
        insecure = []
        if self.admin_username == DEFAULT_ADMIN_USERNAME:
            insecure.append("ADMIN_USERNAME")
        if self.admin_password == DEFAULT_ADMIN_PASSWORD:
            insecure.append("ADMIN_PASSWORD")
        if self.session_secret == DEFAULT_SESSION_SECRET:
            insecure.append("SESSION_SECRET")
        if self.storage_backend == "mongo" and self.mongodb_uri == DEFAULT_MONGODB_URI:
            insecure.append("MONGODB_URI")
        return insecure

settings = Settings()
