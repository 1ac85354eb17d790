"""Wiring of repositories, services and renderers from a configuration."""

from __future__ import annotations

from .config import Config, ConfigRepo
from .i18n import Language, Translator
from .render import PdfBasicRenderer
from .repository import FsClientRepository, FsInvoiceRepository
from .service import ClientService, DocumentService, InvoiceService

_RENDERERS = {"Basic": PdfBasicRenderer}


def new_invoice_service(config: Config) -> InvoiceService:
    """Build an invoice service on the configured invoice and client directories."""
    return InvoiceService(
        FsInvoiceRepository(config.get_str("dirs.invoice")),
        FsClientRepository(config.get_str("dirs.client")),
        ConfigRepo(config),
    )


def new_client_service(config: Config) -> ClientService:
    """Build a client service on the configured client directory."""
    return ClientService(FsClientRepository(config.get_str("dirs.client")))


def new_document_service(
    config: Config,
    render_type: str = "Basic",
    draft: bool = False,
    language: Language = Language.ENGLISH,
) -> DocumentService:
    """Build a document service; unknown render types use the basic renderer."""
    repo = ConfigRepo(config)
    document = DocumentService(repo.debug(), draft, repo.pdf_output_dir())
    renderer_cls = _RENDERERS.get(render_type, PdfBasicRenderer)
    document.renderer = renderer_cls(Translator(language))
    return document