import json
from datetime import datetime, timedelta, timezone

import pytest

from invoiceling.model import (
    Client,
    Invoice,
    Item,
    Notes,
    TaxInfo,
    currency_symbol,
    new_invoice,
)


def test_currency_symbol_known_codes():
    assert currency_symbol("EUR") == "€"
    assert currency_symbol("BRL") == "R$"
    assert currency_symbol("SGD") == "SGD$"


def test_currency_symbol_unknown_code_is_empty():
    assert currency_symbol("XYZ") == ""


def test_item_amount_with_single_unit_equals_rate():
    assert Item(description="x", quantity=1, rate=42.5).amount() == pytest.approx(42.5)


def test_item_vat_amount_zero_without_vat():
    assert Item(quantity=3, rate=10.0, vat=0).vat_amount() == 0


def test_item_full_vat_equals_amount():
    item = Item(quantity=4, rate=12.5, vat=100)
    assert item.vat_amount() == pytest.approx(item.amount())


def test_tax_info_percentages_of_hundred():
    tax = TaxInfo(vat=21, retention=15)
    assert tax.vat_amount(100) == pytest.approx(21)
    assert tax.retention_amount(100) == pytest.approx(15)


def test_notes_order():
    notes = Notes(default="d", retention_not0="r", vat0="v")
    assert notes.to_list() == ["d", "v", "r"]


def test_notes_default_always_present():
    assert Notes().to_list() == [""]


def test_new_invoice_without_due_appends_note():
    inv = new_invoice("F24-001", timedelta(0), "EUR", "Thanks.", "Pay soon.")
    assert inv.notes.default == "Thanks. Pay soon."
    assert inv.status == "CREATED"
    assert inv.items == []
    assert inv.currency == "EUR"
    assert inv.id == "F24-001"


def test_new_invoice_with_due_keeps_note():
    inv = new_invoice("F24-002", timedelta(days=30), "USD", "Thanks.", "Pay soon.")
    assert inv.notes.default == "Thanks."
    assert inv.due == timedelta(days=30)


def test_set_taxes_zero_vat_and_retention():
    inv = Invoice()
    inv.set_taxes(0, 15, {"vat_0": "exempt", "retention_not_0": "retained"})
    assert inv.tax == TaxInfo(vat=0, retention=15)
    assert inv.notes.vat0 == "exempt"
    assert inv.notes.retention_not0 == "retained"


def test_set_taxes_regular_leaves_notes_empty():
    inv = Invoice()
    inv.set_taxes(21, 0, {"vat_0": "exempt", "retention_not_0": "retained"})
    assert inv.notes.vat0 == ""
    assert inv.notes.retention_not0 == ""


def test_add_item_inherits_invoice_vat():
    inv = Invoice(tax=TaxInfo(vat=21))
    item = Item(description="work", quantity=2, rate=50.0)
    inv.add_item(item)
    assert inv.items[0].vat == 21
    assert item.vat == 0


def test_add_item_keeps_own_vat():
    inv = Invoice(tax=TaxInfo(vat=21))
    inv.add_item(Item(description="book", quantity=1, rate=9.0, vat=4))
    assert inv.items[0].vat == 4


def test_due_date():
    date = datetime(2024, 1, 10, tzinfo=timezone.utc)
    inv = Invoice(date=date, due=timedelta(days=5))
    assert inv.due_date() == date + timedelta(days=5)


def test_to_dict_keys():
    data = new_invoice("F24-003", timedelta(days=1), "EUR", "n", "x").to_dict()
    assert set(data) == {
        "id", "status", "logo", "from", "to", "date", "due",
        "items", "tax", "discount", "currency", "payment", "notes",
    }
    assert set(data["notes"]) == {"default", "retentionNot0", "vat0"}
    assert "vat_id" in data["to"]


def test_invoice_json_round_trip():
    inv = new_invoice("F24-004", timedelta(days=30), "EUR", "note", "none")
    inv.recipient = Client(id="c1", name="ACME", vat_id="ESB12345678")
    inv.set_taxes(21, 15, {"retention_not_0": "ret"})
    inv.add_item(Item(description="dev", quantity=3, rate=80.0))
    restored = Invoice.from_dict(json.loads(json.dumps(inv.to_dict())))
    assert restored == inv


def test_from_dict_nanosecond_date():
    inv = Invoice.from_dict({"date": "2024-03-01T10:00:00.123456789Z", "due": 0})
    assert inv.date == datetime(2024, 3, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)


def test_from_dict_missing_fields_default():
    inv = Invoice.from_dict({"id": "A", "items": None})
    assert inv.items == []
    assert inv.due == timedelta(0)
    assert inv.recipient == Client()


def test_client_round_trip():
    client = Client(id="c", name="N", vat_id="V", address1="a1", address2="a2")
    assert Client.from_dict(client.to_dict()) == client