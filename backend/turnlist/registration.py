"""
Регистрация в активную игру: нормализация телефона, проверки,
выдача номера очереди (turn number) внутри игры.
"""
import logging
import re
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone

from .constants import NO_ACTIVE_GAME, PHONE_FIELD_ALIASES, PHONE_LENGTH
from .errors import (
    DuplicateRegistrationError,
    InvalidPhoneError,
    MissingNameError,
    NoActiveGameError,
    RegistrationError,
    RegistrationsClosedError,
)
from .models import Registrant
from .store import Store

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D", re.ASCII)
_PHONE_RE = re.compile(rf"^[0-9]{{{PHONE_LENGTH}}}$")


def normalize_phone(raw: str | None) -> str:
    """Оставить только цифры; если их больше 10, берутся последние 10."""
    digits = _NON_DIGITS.sub("", (raw or "").strip())
    if len(digits) > PHONE_LENGTH:
        digits = digits[-PHONE_LENGTH:]
    return digits


def resolve_phone_field(form: Mapping[str, str]) -> str:
    """Первое присутствующее поле телефона из PHONE_FIELD_ALIASES."""
    for alias in PHONE_FIELD_ALIASES:
        value = form.get(alias)
        if value is not None:
            return str(value)
    return ""


def new_registrant_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    """ISO-8601 в UTC с миллисекундами и суффиксом Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def register(store: Store, name: str | None, raw_phone: str | None) -> Registrant:
    """
    Зарегистрировать участника в активной игре.
    Проверки идут по порядку, первая неудачная бросает RegistrationError.
    Весь цикл выполняется в одной транзакции хранилища.
    """
    name = (name or "").strip()
    phone = normalize_phone(raw_phone)
    with store.transaction() as doc:
        active_game = doc.settings.active_game
        try:
            if doc.settings.registrations_closed:
                raise RegistrationsClosedError()
            if active_game == NO_ACTIVE_GAME:
                raise NoActiveGameError()
            if not name:
                raise MissingNameError()
            if not _PHONE_RE.match(phone):
                raise InvalidPhoneError()
            if any(s.phone == phone and s.game == active_game for s in doc.students):
                raise DuplicateRegistrationError(active_game)
        except RegistrationError as e:
            logger.info("Register: rejected game=%s: %s", active_game, e)
            raise

        student = Registrant(
            id=new_registrant_id(),
            name=name,
            phone=phone,
            game=active_game,
            turn_number=len(doc.students_in_game(active_game)) + 1,
            created_at=utc_timestamp(),
        )
        doc.students.append(student)
    logger.info(
        "Register: id=%s game=%s turn=%s", student.id, student.game, student.turn_number
    )
    return student


def find_registrant(store: Store, registrant_id: str) -> Registrant | None:
    if not registrant_id:
        return None
    for s in store.read_document().students:
        if s.id == registrant_id:
            return s
    return None
