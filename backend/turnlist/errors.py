"""Ошибки регистрации, доступа и хранилища."""
from .constants import (
    MSG_DUPLICATE,
    MSG_INVALID_PHONE,
    MSG_MISSING_NAME,
    MSG_NO_ACTIVE_GAME,
    MSG_REGISTRATIONS_CLOSED,
)


class RegistrationError(Exception):
    """Отказ в регистрации. str(e): сообщение для пользователя."""

    message = "Registration failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class RegistrationsClosedError(RegistrationError):
    message = MSG_REGISTRATIONS_CLOSED


class NoActiveGameError(RegistrationError):
    message = MSG_NO_ACTIVE_GAME


class MissingNameError(RegistrationError):
    message = MSG_MISSING_NAME


class InvalidPhoneError(RegistrationError):
    message = MSG_INVALID_PHONE


class DuplicateRegistrationError(RegistrationError):
    def __init__(self, game: int):
        self.game = game
        super().__init__(MSG_DUPLICATE.format(game=game))


class UnauthorizedError(Exception):
    """Вызов админской операции без доверенного токена."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class CorruptStoreError(Exception):
    """Содержимое хранилища не является корректным документом."""
