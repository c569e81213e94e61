# backend/livechat/errors.py
from typing import Any, Optional

from fastapi import status


class RelayError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthorized(RelayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class Forbidden(RelayError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class InvalidArgument(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid data"


class MissingConversation(InvalidArgument):
    message = "conversationId is required"


class NotFound(RelayError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Conflict(RelayError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflict"


class Internal(RelayError):
    pass
