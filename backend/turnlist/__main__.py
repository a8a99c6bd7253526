"""Запуск: python -m turnlist"""
import uvicorn

from .config import get_config


def main() -> None:
    config = get_config()
    uvicorn.run("turnlist.main:app", host=config.host, port=config.port)


if __name__ == "__main__":
    main()
