"""
Error taxonomy for the function endpoints.

Every ServiceError is rendered by the app-level handler in app.main as
``{"success": false, "error": <message>}`` with the error's status code.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(ServiceError):
    status_code = 401


class ConfigurationError(ServiceError):
    status_code = 500


class RequestValidationFailed(ServiceError):
    status_code = 400


class ReceiptParseError(ServiceError):
    status_code = 500


class UpstreamServiceError(ServiceError):
    """Non-2xx answer from Gemini or Resend."""

    status_code = 500

    def __init__(self, message: str, upstream_status: int = None):
        super().__init__(message)
        self.upstream_status = upstream_status


def error_envelope(message: str) -> dict:
    return {"success": False, "error": message}
