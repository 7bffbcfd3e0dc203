# ------------------------------------------------------------
# Error types
# ------------------------------------------------------------

# Every error carries the HTTP status it maps to, app.py turns them into
# {"detail": message} JSON responses


class InventoryAppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InventoryAppError):
    status_code = 422
    default_message = "Invalid request"


class AuthError(InventoryAppError):
    status_code = 401
    default_message = "Invalid credentials"


class ConflictError(InventoryAppError):
    status_code = 409
    default_message = "Username already registered"


class StorageError(InventoryAppError):
    status_code = 502
    default_message = "Could not store image"


class StoreError(InventoryAppError):
    status_code = 500
    default_message = "Database error"


class ConfigError(Exception):
    """Raised at startup when required settings are missing."""
