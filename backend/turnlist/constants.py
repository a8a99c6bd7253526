"""Константы игр, полей формы и экспорта."""
from typing import TypedDict


class SettingsDict(TypedDict):
    registrationsClosed: bool
    activeGame: int


MIN_GAME = 1
MAX_GAME = 5
NO_ACTIVE_GAME = 0
GAME_NUMBERS = list(range(MIN_GAME, MAX_GAME + 1))

DEFAULT_SETTINGS: SettingsDict = {"registrationsClosed": False, "activeGame": 1}

PHONE_LENGTH = 10
# Порядок важен: берётся первое присутствующее поле
PHONE_FIELD_ALIASES = ("phone", "phoneNumber", "phone-number")

CSV_HEADER = ["name", "phone", "game", "turnNumber", "createdAt"]
CSV_FILENAME = "students.csv"

TRUST_COOKIE = "admin_ok"

MSG_REGISTRATIONS_CLOSED = "Registrations are closed."
MSG_NO_ACTIVE_GAME = "No game is open for registration."
MSG_MISSING_NAME = "Name is required."
MSG_INVALID_PHONE = "Enter a valid 10-digit phone number."
MSG_DUPLICATE = "This phone is already registered for Game {game}."
MSG_INVALID_PIN = "Invalid PIN"
