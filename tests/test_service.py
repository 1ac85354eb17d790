import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import pytest

from invoiceling.config import Config, ConfigRepo, apply_defaults
from invoiceling.model import Client, Invoice, Item
from invoiceling.repository import FsClientRepository, FsInvoiceRepository, RecordNotFoundError
from invoiceling.service import (
    ClientService,
    CountryNotFoundError,
    DocumentService,
    InvoiceService,
    VatFormatError,
    validate_vat_number,
)

YEAR = datetime.now().strftime("%y")


@pytest.fixture
def config():
    cfg = Config(environ={})
    apply_defaults(cfg)
    return cfg


@pytest.fixture
def client_repo(tmp_path):
    path = tmp_path / "client"
    path.mkdir()
    return FsClientRepository(path)


@pytest.fixture
def invoice_repo(tmp_path):
    path = tmp_path / "invoice"
    path.mkdir()
    return FsInvoiceRepository(path)


@pytest.fixture
def invoice_service(config, client_repo, invoice_repo):
    client_repo.create(Client(id="acme", name="Acme", vat_id="ESB12345678", address1="Main St"))
    return InvoiceService(invoice_repo, client_repo, ConfigRepo(config))


@pytest.mark.parametrize(
    "number", ["ESB12345678", "esb12345678", "DE123456789", "NL123456789B01", "ATU12345678"]
)
def test_valid_vat_numbers(number):
    assert validate_vat_number(number) is None


@pytest.mark.parametrize("number", ["ES", "E", "", "DE12", "NL123456789X01"])
def test_invalid_vat_format(number):
    with pytest.raises(VatFormatError, match="vat: format not valid"):
        validate_vat_number(number)


def test_unknown_vat_country():
    with pytest.raises(CountryNotFoundError, match="vat: country not found"):
        validate_vat_number("XX123456789")


def test_client_create_and_read(client_repo):
    service = ClientService(client_repo)
    created = service.create("acme", "Acme", "ESB12345678", "Main St", "Town")
    assert service.read("acme") == created
    assert [c.id for c in service.list()] == ["acme"]


def test_client_create_without_id_uses_vat(client_repo):
    service = ClientService(client_repo)
    created = service.create("", "Acme", "ESB12345678", "Main St", "")
    assert created.id == "client-ESB12345678"
    assert service.read("client-ESB12345678").name == "Acme"


def test_client_create_rejects_bad_vat(client_repo):
    service = ClientService(client_repo)
    with pytest.raises(VatFormatError):
        service.create("acme", "Acme", "ES1", "Main St", "")
    assert service.list() == []


def test_client_update_and_delete(client_repo):
    service = ClientService(client_repo)
    client = service.create("acme", "Acme", "ESB12345678", "Main St", "")
    client.name = "Renamed"
    service.update(client)
    assert service.read("acme").name == "Renamed"
    service.delete("acme")
    with pytest.raises(RecordNotFoundError):
        service.read("acme")


def test_invoice_create_first_number(invoice_service, config):
    invoice = invoice_service.create(0, "acme", 30, "Thanks", 21.0, 0.0)
    assert invoice.id == f"F{YEAR}-001"
    assert invoice.status == "CREATED"
    assert invoice.due == timedelta(days=30)
    assert invoice.currency == "EUR"
    assert invoice.recipient.name == "Acme"
    assert invoice.sender == ConfigRepo(config).freelancer()
    assert invoice.notes.default == "Thanks"
    assert invoice.notes.vat0 == ""


def test_invoice_numbers_follow_last(invoice_service):
    invoice_service.create(41, "acme", 30, "Thanks", 21.0, 0.0)
    following = invoice_service.create(0, "acme", 30, "Thanks", 21.0, 0.0)
    assert following.id == f"F{YEAR}-042"


def test_invoice_create_is_stored(invoice_service):
    invoice = invoice_service.create(0, "acme", 30, "Thanks", 21.0, 0.0)
    assert invoice_service.read(invoice.id) == invoice
    assert [i.id for i in invoice_service.list()] == [invoice.id]


def test_invoice_without_due_appends_note(invoice_service, config):
    invoice = invoice_service.create(0, "acme", 0, "Thanks", 21.0, 0.0)
    assert invoice.notes.default == "Thanks " + config.get_str("notes.no_due")


def test_invoice_tax_notes(invoice_service, config):
    invoice = invoice_service.create(0, "acme", 30, "Thanks", 0.0, 15.0)
    assert invoice.notes.vat0 == config.get_str("notes.vat_0")
    assert invoice.notes.retention_not0 == config.get_str("notes.retention_not_0")
    assert invoice.tax.retention == 15.0


def test_invoice_unknown_client(invoice_service):
    with pytest.raises(RecordNotFoundError):
        invoice_service.create(0, "nobody", 30, "Thanks", 21.0, 0.0)
    assert invoice_service.list() == []


def test_add_items_inherits_vat_and_persists(invoice_service):
    invoice = invoice_service.create(0, "acme", 30, "Thanks", 21.0, 0.0)
    invoice_service.add_items(
        invoice,
        [Item(description="Work", quantity=2, rate=50.0), Item(description="Other", quantity=1, vat=10.0, rate=5.0)],
    )
    stored = invoice_service.read(invoice.id)
    assert [item.vat for item in stored.items] == [21.0, 10.0]
    assert [item.description for item in stored.items] == ["Work", "Other"]


def test_invoice_delete(invoice_service):
    invoice = invoice_service.create(0, "acme", 30, "Thanks", 21.0, 0.0)
    invoice_service.delete(invoice.id)
    with pytest.raises(RecordNotFoundError):
        invoice_service.read(invoice.id)


@dataclass
class RecordingRenderer:
    calls: list = field(default_factory=list)
    fail: bool = False

    def render(self, invoice, draft):
        if self.fail:
            raise ValueError("boom")
        self.calls.append(("render", invoice.id, draft))

    def save_to(self, filename):
        self.calls.append(("save", filename))


@pytest.mark.parametrize("draft, name", [(False, "F1.pdf"), (True, "F1_DRAFT.pdf")])
def test_document_render_names_file(draft, name):
    renderer = RecordingRenderer()
    service = DocumentService(False, draft, "out", renderer)
    destination = service.render(Invoice(id="F1"))
    assert destination == os.path.join("out", name)
    assert renderer.calls == [("render", "F1", draft), ("save", destination)]


def test_document_render_error_stops_save():
    renderer = RecordingRenderer(fail=True)
    service = DocumentService(False, False, "out", renderer)
    with pytest.raises(ValueError, match="boom"):
        service.render(Invoice(id="F1"))
    assert renderer.calls == []


def test_document_without_renderer():
    with pytest.raises(RuntimeError):
        DocumentService(False, False, "out").render(Invoice(id="F1"))