from typing import List, Optional


class HifdhError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Identity ---

AUTH_MESSAGES = {
    "invalid_credential": "Incorrect email or password.",
    "invalid_email": "Please enter a valid email address.",
    "weak_password": "Password is too weak. Please use at least 6 characters.",
    "email_in_use": "This email is already registered. Please sign in instead.",
    "network": "Network error. Please check your internet connection and try again.",
    "signup_failed": "Signup failed. Please try again.",
    "login_failed": "Login failed. Please try again.",
}


class AuthError(HifdhError):
    status_code = 400

    def __init__(self, kind: str):
        super().__init__(AUTH_MESSAGES.get(kind, AUTH_MESSAGES["login_failed"]))
        self.kind = kind
        if kind == "invalid_credential":
            self.status_code = 401
        elif kind == "network":
            self.status_code = 503


# --- Store ---

class StoreError(HifdhError):
    status_code = 500


class StorePermissionError(StoreError):
    status_code = 403


class StoreUnavailableError(StoreError):
    """Transient failure talking to the store; safe to retry."""
    status_code = 503


# --- Domain ---

class ValidationError(HifdhError):
    status_code = 422


class NotFoundError(HifdhError):
    status_code = 404


class ConflictError(HifdhError):
    status_code = 409


class InconsistentWriteError(ConflictError):
    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class ConfigurationError(HifdhError):
    status_code = 500

    def __init__(self, message: str = "Server configuration error"):
        super().__init__(message)
