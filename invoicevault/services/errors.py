"""
Error taxonomy shared by the storage, export and auth services.

The API layer maps each class to an HTTP status (see ``status_code``) and a
``{"error": message}`` body.
"""


class InvoiceVaultError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InvoiceVaultError):
    """A required field is missing or malformed (e.g. no invoice id)."""

    status_code = 400


class NotFoundError(InvoiceVaultError):
    """The operation targets an invoice id that does not exist."""

    status_code = 404


class StorageUnavailable(InvoiceVaultError):
    """The backing store could not be read or written."""

    status_code = 500


class AuthError(InvoiceVaultError):
    """Bad credentials or missing/invalid session."""

    status_code = 401
