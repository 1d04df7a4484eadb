from typing import Any, Dict


class ShopError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message}
        body.update(self.extra)
        return body


class BadRequest(ShopError):
    status_code = 400


class Unauthorized(ShopError):
    status_code = 401


class Forbidden(ShopError):
    status_code = 403


class NotFound(ShopError):
    status_code = 404


class Conflict(ShopError):
    status_code = 409


class InsufficientStock(Conflict):
    pass
