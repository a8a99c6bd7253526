"""Конфигурация приложения."""
import hashlib
import os
from functools import lru_cache
from pathlib import Path


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@lru_cache
def get_config():
    admin_pin = os.environ.get("ADMIN_PIN", "1234")
    # Без явного секрета подпись зависит от PIN: смена PIN сбрасывает доверие
    trust_secret = os.environ.get("TRUST_SECRET") or hashlib.sha256(
        f"turnlist:{admin_pin}".encode()
    ).hexdigest()
    return type("Config", (), {
        "admin_pin": admin_pin,
        "trust_secret": trust_secret,
        "trust_max_age": int(os.environ.get("TRUST_MAX_AGE", str(7 * 24 * 3600))),
        "data_file": Path(os.environ.get("DATA_FILE", str(Path.cwd() / "data" / "db.json"))),
        "debug": _flag("DEBUG"),
        "log_level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "cookie_secure": _flag("COOKIE_SECURE"),
        "host": os.environ.get("HOST", "0.0.0.0"),
        "port": int(os.environ.get("PORT", "8000")),
    })()
