from __future__ import annotations


class QuizRoomError(Exception):
    """Base error carrying the HTTP status it is rendered with."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(QuizRoomError):
    """Missing or malformed required field."""


class InvalidPhaseError(QuizRoomError):
    """Operation not allowed in the room's current phase."""


class NotFoundError(QuizRoomError):
    """Unknown player or round reference."""


class StorageError(QuizRoomError):
    status_code = 500
