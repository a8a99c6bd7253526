"""
Модель документа: настройки и список зарегистрированных.
Ключи JSON на диске в camelCase, как в db.json.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .constants import DEFAULT_SETTINGS
from .errors import CorruptStoreError

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class Settings:
    registrations_closed: bool = DEFAULT_SETTINGS["registrationsClosed"]
    active_game: int = DEFAULT_SETTINGS["activeGame"]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        closed = data.get("registrationsClosed", DEFAULT_SETTINGS["registrationsClosed"])
        active = data.get("activeGame", DEFAULT_SETTINGS["activeGame"])
        if not isinstance(closed, bool):
            raise CorruptStoreError(f"registrationsClosed must be boolean, got {closed!r}")
        if isinstance(active, bool) or not isinstance(active, int):
            raise CorruptStoreError(f"activeGame must be integer, got {active!r}")
        return cls(registrations_closed=closed, active_game=active)

    def to_dict(self) -> dict[str, Any]:
        return {
            "registrationsClosed": self.registrations_closed,
            "activeGame": self.active_game,
        }


@dataclass
class Registrant:
    id: str
    name: str
    phone: str | None
    game: int | None
    turn_number: int | None
    created_at: str | None  # ISO-8601, UTC

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Registrant":
        # Старые записи могут не содержать части полей
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            phone=data.get("phone"),
            game=data.get("game"),
            turn_number=data.get("turnNumber"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "game": self.game,
            "turnNumber": self.turn_number,
            "createdAt": self.created_at,
        }

    @property
    def created_at_dt(self) -> datetime:
        """Время создания для сортировки; без createdAt запись идёт первой."""
        if not self.created_at:
            return _EPOCH
        try:
            dt = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt


@dataclass
class Document:
    settings: Settings = field(default_factory=Settings)
    students: list[Registrant] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        if not isinstance(data, dict):
            raise CorruptStoreError("document must be a JSON object")
        settings = data.get("settings")
        students = data.get("students")
        if not isinstance(settings, dict):
            raise CorruptStoreError("document has no settings object")
        if not isinstance(students, list):
            raise CorruptStoreError("document has no students list")
        if not all(isinstance(s, dict) for s in students):
            raise CorruptStoreError("every student must be a JSON object")
        return cls(
            settings=Settings.from_dict(settings),
            students=[Registrant.from_dict(s) for s in students],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "students": [s.to_dict() for s in self.students],
        }

    def students_in_game(self, game: int) -> list[Registrant]:
        return [s for s in self.students if s.game == game]

    def sorted_students(self) -> list[Registrant]:
        """Все записи по возрастанию createdAt (сортировка устойчивая)."""
        return sorted(self.students, key=lambda s: s.created_at_dt)
