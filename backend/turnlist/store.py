"""
Хранилище документа.
Каждая операция: полный цикл чтение-изменение-запись под общим замком.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import CorruptStoreError
from .models import Document

logger = logging.getLogger(__name__)


class Store:
    """Базовое хранилище: замок и транзакция поверх read/write."""

    def __init__(self):
        # Реентерабельный: read_document внутри transaction берёт его повторно
        self._lock = threading.RLock()

    def read_document(self) -> Document:
        with self._lock:
            return self._read()

    def write_document(self, doc: Document) -> None:
        with self._lock:
            self._write(doc)

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """
        Захватить замок, прочитать документ, отдать его на изменение
        и записать при успешном выходе. При исключении ничего не пишется.
        """
        with self._lock:
            doc = self._read()
            yield doc
            self._write(doc)

    def _read(self) -> Document:
        raise NotImplementedError

    def _write(self, doc: Document) -> None:
        raise NotImplementedError


class MemoryStore(Store):
    """Хранилище в памяти (для тестов и отладки)."""

    def __init__(self, doc: Document | None = None):
        super().__init__()
        self._data = (doc or Document()).to_dict()

    def _read(self) -> Document:
        return Document.from_dict(copy.deepcopy(self._data))

    def _write(self, doc: Document) -> None:
        self._data = doc.to_dict()


class JsonFileStore(Store):
    """Один JSON-файл на диске, создаётся с настройками по умолчанию."""

    def __init__(self, path: str | os.PathLike):
        super().__init__()
        self.path = Path(path)

    def _read(self) -> Document:
        if not self.path.exists():
            logger.info("Store: %s not found, initializing defaults", self.path)
            doc = Document()
            self._write(doc)
            return doc
        raw = self.path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(f"{self.path}: invalid JSON: {e}") from e
        try:
            return Document.from_dict(data)
        except CorruptStoreError as e:
            raise CorruptStoreError(f"{self.path}: {e}") from e

    def _write(self, doc: Document) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(doc.to_dict(), indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
