"""Invoice domain model: clients, freelancers, items, taxes and notes."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

DEFAULT_DUE_DAYS = 30

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "RUB": "₽",
    "KRW": "₩",
    "BRL": "R$",
    "SGD": "SGD$",
}

_CASTS = {"str": str, "int": int, "float": float}
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_MICRO = 1000

R = TypeVar("R")


def currency_symbol(code: str) -> str:
    """Return the symbol for an ISO currency code, or an empty string."""
    return _CURRENCY_SYMBOLS.get(code, "")


def _json_key(f: dataclasses.Field) -> str:
    return f.metadata.get("json", f.name)


def _record_to_dict(record: Any) -> dict[str, Any]:
    return {_json_key(f): getattr(record, f.name) for f in dataclasses.fields(record)}


def _record_from_dict(cls: type[R], data: Mapping[str, Any] | None) -> R:
    data = data or {}
    kwargs = {}
    for f in dataclasses.fields(cls):
        value = data.get(_json_key(f))
        if value is None:
            continue
        cast = _CASTS.get(str(f.type))
        kwargs[f.name] = cast(value) if cast else value
    return cls(**kwargs)


@dataclass
class Client:
    """A customer that invoices are addressed to."""

    id: str = ""
    name: str = ""
    vat_id: str = ""
    address1: str = ""
    address2: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Client:
        return _record_from_dict(cls, data)


@dataclass
class Freelancer:
    """The issuer of an invoice."""

    company: str = ""
    name: str = ""
    email: str = ""
    phone: str = ""
    vat_id: str = ""
    address1: str = ""
    address2: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Freelancer:
        return _record_from_dict(cls, data)


@dataclass
class Payment:
    """Bank details printed on an invoice."""

    holder: str = ""
    iban: str = ""
    swift: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Payment:
        return _record_from_dict(cls, data)


@dataclass
class TaxInfo:
    """VAT and retention percentages of an invoice."""

    vat: float = 0.0
    retention: float = 0.0

    def vat_amount(self, amount: float) -> float:
        return amount * self.vat / 100

    def retention_amount(self, amount: float) -> float:
        return amount * self.retention / 100

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TaxInfo:
        return _record_from_dict(cls, data)


@dataclass
class Notes:
    """Free-text notes printed at the foot of an invoice."""

    default: str = ""
    retention_not0: str = field(default="", metadata={"json": "retentionNot0"})
    vat0: str = ""

    def to_list(self) -> list[str]:
        """Return the default note followed by any non-empty tax notes."""
        notes = [self.default]
        if self.vat0:
            notes.append(self.vat0)
        if self.retention_not0:
            notes.append(self.retention_not0)
        return notes

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Notes:
        return _record_from_dict(cls, data)


@dataclass
class Item:
    """A billable line of an invoice."""

    description: str = ""
    quantity: int = 0
    vat: float = 0.0
    rate: float = 0.0

    def amount(self) -> float:
        return self.quantity * self.rate

    def vat_amount(self) -> float:
        return self.amount() * self.vat / 100

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Item:
        return _record_from_dict(cls, data)


def _now() -> datetime:
    return datetime.now().astimezone()


def _duration_to_nanos(value: timedelta) -> int:
    return (value // timedelta(microseconds=1)) * _NANOS_PER_MICRO


def _nanos_to_duration(value: int) -> timedelta:
    return timedelta(microseconds=int(value) // _NANOS_PER_MICRO)


@dataclass
class Invoice:
    """An invoice with its parties, items, taxes and notes."""

    id: str = ""
    status: str = ""
    logo: str = ""
    sender: Freelancer = field(default_factory=Freelancer)
    recipient: Client = field(default_factory=Client)
    date: datetime = field(default_factory=_now)
    due: timedelta = timedelta(0)
    items: list[Item] = field(default_factory=list)
    tax: TaxInfo = field(default_factory=TaxInfo)
    discount: float = 0.0
    currency: str = ""
    payment: Payment = field(default_factory=Payment)
    notes: Notes = field(default_factory=Notes)

    def set_taxes(self, vat: float, retention: float, config_notes: Mapping[str, str]) -> None:
        """Set tax rates and attach the configured notes they require."""
        self.tax = TaxInfo(vat=vat, retention=retention)
        if vat == 0:
            self.notes.vat0 = config_notes.get("vat_0", "")
        if retention != 0:
            self.notes.retention_not0 = config_notes.get("retention_not_0", "")

    def add_item(self, item: Item) -> None:
        """Append a copy of item, giving it the invoice VAT when it has none."""
        added = dataclasses.replace(item)
        if added.vat == 0:
            added.vat = self.tax.vat
        self.items.append(added)

    def due_date(self) -> datetime:
        return self.date + self.due

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "logo": self.logo,
            "from": self.sender.to_dict(),
            "to": self.recipient.to_dict(),
            "date": self.date.isoformat(),
            "due": _duration_to_nanos(self.due),
            "items": [item.to_dict() for item in self.items],
            "tax": self.tax.to_dict(),
            "discount": self.discount,
            "currency": self.currency,
            "payment": self.payment.to_dict(),
            "notes": self.notes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Invoice:
        data = data or {}
        raw_date = data.get("date")
        return cls(
            id=str(data.get("id") or ""),
            status=str(data.get("status") or ""),
            logo=str(data.get("logo") or ""),
            sender=Freelancer.from_dict(data.get("from")),
            recipient=Client.from_dict(data.get("to")),
            date=datetime.fromisoformat(raw_date) if raw_date else _ZERO_TIME,
            due=_nanos_to_duration(data.get("due") or 0),
            items=[Item.from_dict(item) for item in data.get("items") or []],
            tax=TaxInfo.from_dict(data.get("tax")),
            discount=float(data.get("discount") or 0),
            currency=str(data.get("currency") or ""),
            payment=Payment.from_dict(data.get("payment")),
            notes=Notes.from_dict(data.get("notes")),
        )


def new_invoice(
    invoice_id: str,
    due: timedelta,
    currency: str,
    note: str,
    no_due_note: str,
) -> Invoice:
    """Create a fresh invoice dated now with status CREATED."""
    notes = Notes(default=note)
    if due == timedelta(0):
        notes.default += " " + no_due_note
    return Invoice(
        id=invoice_id,
        status="CREATED",
        date=_now(),
        due=due,
        currency=currency,
        notes=notes,
    )