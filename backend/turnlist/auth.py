"""
Доступ администратора: проверка PIN и токен доверия.
Токен: строка "<nonce>.<issued_at>.<подпись>", подпись HMAC-SHA256 от
"<nonce>.<issued_at>" на секрете приложения. Токен живёт max_age секунд.
Транспорт (cookie) остаётся веб-слою.
"""
import hashlib
import hmac
import logging
import secrets
import threading
import time
from typing import Callable

from .errors import UnauthorizedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 7 * 24 * 3600


class AdminGuard:
    def __init__(
        self,
        pin: str,
        secret: str,
        max_age: int = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ):
        self._pin = pin
        self._secret = secret.encode()
        self._max_age = max_age
        self._clock = clock
        # nonce -> момент истечения; истёкшие записи выбрасываются
        self._revoked: dict[str, int] = {}
        self._lock = threading.Lock()

    def check_pin(self, candidate: str | None) -> bool:
        """True, если введённый PIN (без пробелов по краям) совпадает."""
        ok = hmac.compare_digest((candidate or "").strip().encode(), self._pin.encode())
        if not ok:
            logger.info("Auth: invalid PIN")
        return ok

    def issue_trust(self) -> str:
        payload = f"{secrets.token_urlsafe(16)}.{int(self._clock())}"
        return f"{payload}.{self._sign(payload)}"

    def is_trusted(self, token: str | None) -> bool:
        parsed = self._parse(token)
        if parsed is None:
            return False
        nonce, _ = parsed
        with self._lock:
            return nonce not in self._revoked

    def revoke_trust(self, token: str | None) -> None:
        """Запретить токен для последующих запросов."""
        parsed = self._parse(token)
        if parsed is None:
            return
        nonce, expires_at = parsed
        now = self._clock()
        with self._lock:
            self._revoked = {n: exp for n, exp in self._revoked.items() if exp > now}
            self._revoked[nonce] = expires_at

    def require(self, token: str | None) -> None:
        if not self.is_trusted(token):
            raise UnauthorizedError()

    def _parse(self, token: str | None) -> tuple[str, int] | None:
        """(nonce, момент истечения) для подлинного непросроченного токена."""
        if not token or not token.isascii():
            return None
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            return None
        nonce, issued, signature = parts
        if not issued.isdigit():
            return None
        expected = self._sign(f"{nonce}.{issued}")
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            return None
        expires_at = int(issued) + self._max_age
        if expires_at <= self._clock():
            return None
        return nonce, expires_at

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode(), hashlib.sha256).hexdigest()
