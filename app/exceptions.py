"""
Domain error taxonomy shared by services and the HTTP layer

Services raise these; app.main renders them as JSON with the matching
status code. Anything that is not an LMSError is wrapped in an
OperationError before it leaves a service.
"""
from datetime import datetime
from typing import Any, Dict


class LMSError(Exception):
    """Base class for errors surfaced to API callers"""

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "timestamp": self.timestamp.isoformat()
        }


class ValidationError(LMSError):
    """Missing or malformed input"""
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(LMSError):
    """Referenced resource does not exist"""
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class AuthorizationError(LMSError):
    """Caller is not allowed to act on the resource"""
    code = "AUTHORIZATION_ERROR"
    status_code = 403


class BusinessRuleViolation(LMSError):
    """Request is well-formed but breaks a domain rule"""
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 409


class OperationError(LMSError):
    """Unexpected infrastructure failure, reported without internals"""
    code = "OPERATION_FAILED"
    status_code = 500

    def __init__(self, operation: str):
        super().__init__(f"Failed to {operation}")
        self.operation = operation


class RateLimitExceeded(LMSError):
    """Client sent more requests than the configured window allows"""
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, limit: int, window: str, retry_after: int):
        super().__init__(f"Too many requests. Limit: {limit} requests per {window}")
        self.retry_after = retry_after

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["retry_after"] = self.retry_after
        return body
