"""
Операции администратора. Каждая сначала проверяет токен доверия
и бросает UnauthorizedError, если его нет.
"""
import csv
import io
import logging

from .auth import AdminGuard
from .constants import CSV_HEADER, MAX_GAME, MIN_GAME
from .models import Registrant, Settings
from .store import Store

logger = logging.getLogger(__name__)


def _cell(value) -> str:
    return "" if value is None else str(value)


def registrants_csv(students: list[Registrant]) -> str:
    """CSV: все поля в кавычках, кавычки удваиваются, строки через \\n."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in students:
        writer.writerow([
            _cell(s.name),
            _cell(s.phone),
            _cell(s.game),
            _cell(s.turn_number),
            _cell(s.created_at),
        ])
    # Без перевода строки в конце
    return buf.getvalue()[:-1]


class AdminControls:
    def __init__(self, store: Store, guard: AdminGuard):
        self.store = store
        self.guard = guard

    def toggle_registrations(self, token: str | None) -> bool:
        """Переключить registrationsClosed. Возвращает новое значение."""
        self.guard.require(token)
        with self.store.transaction() as doc:
            doc.settings.registrations_closed = not doc.settings.registrations_closed
            closed = doc.settings.registrations_closed
        logger.info("Admin: registrations %s", "closed" if closed else "opened")
        return closed

    def set_active_game(self, token: str | None, game: int) -> bool:
        """
        Сделать игру активной. Вне диапазона 1..5 ничего не меняет.
        Возвращает True, если значение записано.
        """
        self.guard.require(token)
        if isinstance(game, bool) or not isinstance(game, int):
            return False
        if not MIN_GAME <= game <= MAX_GAME:
            logger.info("Admin: ignored active game %s", game)
            return False
        with self.store.transaction() as doc:
            doc.settings.active_game = game
        logger.info("Admin: active game set to %s", game)
        return True

    def list_registrants(self, token: str | None) -> list[Registrant]:
        self.guard.require(token)
        return self.store.read_document().sorted_students()

    def overview(self, token: str | None) -> tuple[Settings, list[Registrant]]:
        """Настройки и список за одно чтение (для страницы /admin)."""
        self.guard.require(token)
        doc = self.store.read_document()
        return doc.settings, doc.sorted_students()

    def export_csv(self, token: str | None) -> str:
        students = self.list_registrants(token)
        logger.info("Admin: export %d registrants", len(students))
        return registrants_csv(students)

    def logout(self, token: str | None) -> None:
        self.guard.require(token)
        self.guard.revoke_trust(token)
        logger.info("Admin: logout")
