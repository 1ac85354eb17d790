"""Client, invoice and document services on top of the repositories."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Protocol

from .config import ConfigRepo
from .model import Client, Invoice, Item, new_invoice
from .repository import FsClientRepository, FsInvoiceRepository

_COUNTRY_CODE_LENGTH = 2

_VAT_PATTERNS = {
    country: re.compile(pattern)
    for country, pattern in {
        "AT": r"U[A-Z0-9]{8}",
        "BE": r"(0[0-9]{9}|[0-9]{10})",
        "BG": r"[0-9]{9,10}",
        "CH": r"(?:E(?:-| )[0-9]{3}(?:\.| )[0-9]{3}(?:\.| )[0-9]{3}( MWST)?|E[0-9]{9}(?:MWST)?)",
        "CY": r"[0-9]{8}[A-Z]",
        "CZ": r"[0-9]{8,10}",
        "DE": r"[0-9]{9}",
        "DK": r"[0-9]{8}",
        "EE": r"[0-9]{9}",
        "EL": r"[0-9]{9}",
        "ES": r"[A-Z][0-9]{7}[A-Z]|[0-9]{8}[A-Z]|[A-Z][0-9]{8}",
        "FI": r"[0-9]{8}",
        "FR": r"([A-Z]{2}|[0-9]{2})[0-9]{9}",
        "GB": r"[0-9]{9}|[0-9]{12}|(GD|HA)[0-9]{3}",
        "HR": r"[0-9]{11}",
        "HU": r"[0-9]{8}",
        "IE": r"[A-Z0-9]{7}[A-Z]|[A-Z0-9]{7}[A-W][A-I]",
        "IT": r"[0-9]{11}",
        "LT": r"([0-9]{9}|[0-9]{12})",
        "LU": r"[0-9]{8}",
        "LV": r"[0-9]{11}",
        "MT": r"[0-9]{8}",
        "NL": r"[0-9]{9}B[0-9]{2}",
        "PL": r"[0-9]{10}",
        "PT": r"[0-9]{9}",
        "RO": r"[0-9]{2,10}",
        "SE": r"[0-9]{12}",
        "SI": r"[0-9]{8}",
        "SK": r"[0-9]{10}",
    }.items()
}


class VatFormatError(ValueError):
    """The VAT number does not have a valid format."""

    def __init__(self) -> None:
        super().__init__("vat: format not valid")


class CountryNotFoundError(ValueError):
    """The VAT number's country prefix is not known."""

    def __init__(self) -> None:
        super().__init__("vat: country not found")


def validate_vat_number(number: str) -> None:
    """Check a VAT number against its country's format, raising on mismatch."""
    number = number.upper()
    if len(number) <= _COUNTRY_CODE_LENGTH:
        raise VatFormatError()
    pattern = _VAT_PATTERNS.get(number[:_COUNTRY_CODE_LENGTH])
    if pattern is None:
        raise CountryNotFoundError()
    if pattern.search(number[_COUNTRY_CODE_LENGTH:]) is None:
        raise VatFormatError()


class Renderer(Protocol):
    """Something that lays out an invoice and saves it as a document."""

    def render(self, invoice: Invoice, draft: bool) -> None:
        """Lay out invoice, marking it as a draft when draft is true."""

    def save_to(self, filename: str) -> None:
        """Write the rendered document to filename."""


class ClientService:
    """Validates and stores clients."""

    def __init__(self, repo: FsClientRepository) -> None:
        self.repo = repo

    def list(self, predicate: Callable[[Client], bool] | None = None) -> list[Client]:
        return self.repo.list(predicate)

    def create(
        self, client_id: str, name: str, vat_id: str, address1: str, address2: str
    ) -> Client:
        """Store a new client; without an id, one is composed from the VAT id."""
        validate_vat_number(vat_id)
        client = Client(
            id=client_id or f"client-{vat_id}",
            name=name,
            vat_id=vat_id,
            address1=address1,
            address2=address2,
        )
        self.repo.create(client)
        return client

    def read(self, client_id: str) -> Client:
        return self.repo.read(client_id)

    def update(self, client: Client) -> Client:
        return self.repo.update(client)

    def delete(self, client_id: str) -> None:
        self.repo.delete(client_id)


class InvoiceService:
    """Creates invoices from configuration and stored clients."""

    def __init__(
        self,
        invoice_repo: FsInvoiceRepository,
        client_repo: FsClientRepository,
        config_repo: ConfigRepo,
    ) -> None:
        self.invoice_repo = invoice_repo
        self.client_repo = client_repo
        self.config_repo = config_repo

    def list(self, predicate: Callable[[Invoice], bool] | None = None) -> list[Invoice]:
        return self.invoice_repo.list(predicate)

    def create(
        self,
        number: int,
        client_id: str,
        due_days: int,
        note: str,
        vat: float,
        retention: float,
    ) -> Invoice:
        """Create and store an invoice; number 0 means one after the last stored."""
        invoice_id = self._formatted_id(number)
        config_notes = self.config_repo.notes()

        invoice = new_invoice(
            invoice_id,
            timedelta(days=due_days),
            self.config_repo.currency(),
            note,
            config_notes["no_due"],
        )
        invoice.logo = self.config_repo.logo()
        invoice.sender = self.config_repo.freelancer()
        invoice.recipient = self.client_repo.read(client_id)
        invoice.payment = self.config_repo.payment_info()
        invoice.set_taxes(vat, retention, config_notes)

        self.invoice_repo.create(invoice)
        return invoice

    def read(self, invoice_id: str) -> Invoice:
        return self.invoice_repo.read(invoice_id)

    def add_items(self, invoice: Invoice, items: Iterable[Item]) -> Invoice:
        """Append items to invoice and store it."""
        for item in items:
            invoice.add_item(item)
        return self.invoice_repo.update(invoice)

    def update(self, invoice: Invoice) -> Invoice:
        return self.invoice_repo.update(invoice)

    def delete(self, invoice_id: str) -> None:
        self.invoice_repo.delete(invoice_id)

    def _next_number(self) -> int:
        invoices = self.invoice_repo.list()
        if not invoices:
            return 1
        last_part = invoices[-1].id.split("-")[-1]
        try:
            last = int(last_part)
        except ValueError:
            last = 0
        return last + 1

    def _formatted_id(self, number: int) -> str:
        if number == 0:
            number = self._next_number()
        year = datetime.now().strftime("%y")
        return self.config_repo.id_format() % (year, number)


class DocumentService:
    """Renders invoices to files in an output directory."""

    def __init__(
        self,
        debug: bool,
        draft: bool,
        output_dir: str | os.PathLike[str],
        renderer: Renderer | None = None,
    ) -> None:
        self.debug = debug
        self.draft = draft
        self.output_dir = output_dir
        self.renderer = renderer

    def render(self, invoice: Invoice) -> str:
        """Render invoice and save it; return the path written."""
        if self.renderer is None:
            raise RuntimeError("no renderer set")
        suffix = "_DRAFT.pdf" if self.draft else ".pdf"
        self.renderer.render(invoice, self.draft)
        destination = os.path.join(self.output_dir, invoice.id + suffix)
        self.renderer.save_to(destination)
        return destination