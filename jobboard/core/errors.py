# jobboard/core/errors.py
"""
Error taxonomy shared by every service.

Services raise these; the API layer turns them into
``{"success": false, "message": ...}`` responses with the matching status code.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.errors = list(errors or [])
        if message is None and self.errors:
            fields = ", ".join(e["field"] for e in self.errors)
            message = f"Invalid input: {fields}"
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])

    @property
    def fields(self) -> List[str]:
        return [e["field"] for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        if self.errors:
            out["errors"] = self.errors
        return out


class AuthError(AppError):
    status_code = 401
    default_message = "Not authorized to access this route"


class PendingApprovalError(AuthError):
    status_code = 403
    default_message = "Your application is pending approval from admin. Please wait for approval."


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class ServerError(AppError):
    status_code = 500
