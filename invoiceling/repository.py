"""JSON-file repositories for clients and invoices, one file per record."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

from .model import Client, Invoice

log = logging.getLogger(__name__)

_EXTENSION = ".json"
_READ_WRITE_MODE = 0o600
_READ_ONLY_MODE = 0o400
_DECODE_ERRORS = (ValueError, TypeError, AttributeError, KeyError)

T = TypeVar("T")


class RepositoryError(Exception):
    """A record could not be stored or retrieved."""


class RecordExistsError(RepositoryError):
    """A record with the same identifier is already stored."""


class RecordNotFoundError(RepositoryError):
    """No readable record exists for the requested identifier."""


def _write(path: Path, text: str, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(text)


class _JsonStore(Generic[T]):
    """Stores records as indented JSON files named after their identifier."""

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        kind: str,
        decode: Callable[[Any], T],
        encode: Callable[[T], dict[str, Any]],
        key: Callable[[T], str],
    ) -> None:
        self.base_path = Path(os.path.abspath(base_dir))
        self.kind = kind
        self._decode = decode
        self._encode = encode
        self._key = key

    def _path(self, record_id: str) -> Path:
        return self.base_path / f"{record_id}{_EXTENSION}"

    def _dump(self, record: T) -> str:
        return json.dumps(self._encode(record), indent=2, ensure_ascii=False)

    def _load(self, path: Path) -> T:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
        return self._decode(data)

    def list(self, predicate: Callable[[T], bool] | None) -> list[T]:
        try:
            with os.scandir(self.base_path) as entries:
                ordered = sorted(entries, key=lambda entry: entry.name)
        except OSError as exc:
            log.warning("cannot open %s directory %s: %s", self.kind, self.base_path, exc)
            return []

        records = []
        for entry in ordered:
            if entry.is_dir() or not entry.name.endswith(_EXTENSION):
                continue
            try:
                record = self._load(Path(entry.path))
            except (OSError, *_DECODE_ERRORS) as exc:
                log.warning("cannot load %s %s: %s", self.kind, entry.name, exc)
                continue
            if predicate is None or predicate(record):
                records.append(record)
        return records

    def create(self, record: T) -> None:
        payload = self._dump(record)
        path = self._path(self._key(record))
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, _READ_WRITE_MODE)
        except FileExistsError as exc:
            raise RecordExistsError(f"{self.kind} already exists") from exc
        except OSError as exc:
            raise RepositoryError(f"cannot create {self.kind} {path.name}: {exc}") from exc
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)

    def read(self, record_id: str) -> T:
        try:
            return self._load(self._path(record_id))
        except (OSError, *_DECODE_ERRORS) as exc:
            raise RecordNotFoundError(f"cannot load {self.kind} {record_id}: {exc}") from exc

    def update(self, record: T) -> T:
        record_id = self._key(record)
        try:
            _write(self._path(record_id), self._dump(record), _READ_WRITE_MODE)
        except OSError as exc:
            raise RepositoryError(f"cannot update {self.kind} {record_id}: {exc}") from exc
        return record

    def delete(self, record_id: str) -> None:
        try:
            _write(self._path(record_id), "", _READ_ONLY_MODE)
        except OSError as exc:
            raise RepositoryError(f"cannot delete {self.kind} {record_id}: {exc}") from exc


class FsClientRepository:
    """Clients stored as <id>.json files in one directory."""

    def __init__(self, base_dir: str | os.PathLike[str]) -> None:
        self._store: _JsonStore[Client] = _JsonStore(
            base_dir, "client", Client.from_dict, Client.to_dict, lambda client: client.id
        )

    @property
    def base_path(self) -> Path:
        return self._store.base_path

    def list(self, predicate: Callable[[Client], bool] | None = None) -> list[Client]:
        """Return the stored clients, in file-name order, that satisfy predicate."""
        return self._store.list(predicate)

    def create(self, client: Client) -> None:
        """Store a new client; raise RecordExistsError if one is already there."""
        self._store.create(client)

    def read(self, client_id: str) -> Client:
        """Load a client; raise RecordNotFoundError if it cannot be read."""
        return self._store.read(client_id)

    def update(self, client: Client) -> Client:
        """Overwrite the stored client and return it."""
        return self._store.update(client)

    def delete(self, client_id: str) -> None:
        """Blank out the client's file so it is no longer loaded."""
        self._store.delete(client_id)


class FsInvoiceRepository:
    """Invoices stored as <id>.json files in one directory."""

    def __init__(self, base_dir: str | os.PathLike[str]) -> None:
        self._store: _JsonStore[Invoice] = _JsonStore(
            base_dir, "invoice", Invoice.from_dict, Invoice.to_dict, lambda invoice: invoice.id
        )

    @property
    def base_path(self) -> Path:
        return self._store.base_path

    def list(self, predicate: Callable[[Invoice], bool] | None = None) -> list[Invoice]:
        """Return the stored invoices, in file-name order, that satisfy predicate."""
        return self._store.list(predicate)

    def create(self, invoice: Invoice) -> None:
        """Store a new invoice; raise RecordExistsError if one is already there."""
        self._store.create(invoice)

    def read(self, invoice_id: str) -> Invoice:
        """Load an invoice; raise RecordNotFoundError if it cannot be read."""
        return self._store.read(invoice_id)

    def update(self, invoice: Invoice) -> Invoice:
        """Overwrite the stored invoice and return it."""
        return self._store.update(invoice)

    def delete(self, invoice_id: str) -> None:
        """Blank out the invoice's file so it is no longer loaded."""
        self._store.delete(invoice_id)