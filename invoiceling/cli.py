"""Command line interface for managing clients, invoices and their PDFs."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable, Sequence

import yaml

from .config import ALLOWED_FORMATS, DIRS, Config, apply_defaults
from .container import new_client_service, new_document_service, new_invoice_service
from .i18n import parse_language
from .model import DEFAULT_DUE_DAYS, Client, Invoice, Item
from .repository import RepositoryError

VERSION = "0.2.1"
DEFAULT_NOTE = (
    "Thank you for your business. Please add the invoice number to your payment description."
)
_DIR_MODE = 0o755
_DATE_FORMAT = "%Y-%m-%d"
_FAILURES = (RepositoryError, ValueError, OSError, RuntimeError, yaml.YAMLError)


def filter_client(text: str) -> Callable[[Client], bool]:
    """Return a predicate matching clients whose fields contain text."""

    def predicate(client: Client) -> bool:
        if not text:
            return True
        fields = (client.id, client.name, client.vat_id, client.address1, client.address2)
        return any(text in value for value in fields)

    return predicate


def filter_invoice(text: str) -> Callable[[Invoice], bool]:
    """Return a predicate matching invoices whose id, client or notes contain text."""

    def predicate(invoice: Invoice) -> bool:
        if not text:
            return True
        to = invoice.recipient
        fields = (
            invoice.id,
            to.name,
            to.vat_id,
            to.address1,
            to.address2,
            ":".join(invoice.notes.to_list()),
        )
        return any(text in value for value in fields)

    return predicate


def _load_config(path: str | None) -> Config:
    config = Config()
    try:
        if path:
            config.read(path)
        else:
            config.discover(".")
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print("Could not load configuration", exc)
    return config


def _init(args: argparse.Namespace, config: Config) -> None:
    if config.config_file is not None:
        print("Directory already initialized, exiting...")
        return
    if args.format not in ALLOWED_FORMATS:
        raise ValueError(f"format option '{args.format}' not allowed")

    print("Generating folder structure...")
    for directory in DIRS:
        try:
            os.mkdir(directory, _DIR_MODE)
        except FileExistsError:
            print("Directory", directory, "already exists, skipping...")

    print("Generating default configuration file...")
    apply_defaults(config)
    config.write(f"./config.{args.format}")


def _client(args: argparse.Namespace, config: Config) -> None:
    service = new_client_service(config)
    if args.client_command == "create":
        service.create(args.id, args.name, args.vat_id, args.address1, args.address2)
        return
    print("ID: Name | VAT_ID")
    for client in service.list(filter_client(args.filter)):
        print(f"{client.id}: {client.name} | {client.vat_id}")


def _invoice(args: argparse.Namespace, config: Config) -> None:
    service = new_invoice_service(config)
    if args.invoice_command == "create":
        vat = config.get_float("vat") if args.vat is None else args.vat
        retention = config.get_float("retention") if args.retention is None else args.retention
        invoice = service.create(args.id, args.client, args.due, args.note, vat, retention)
        print(f"InvoiceService created: {invoice.id}")
    elif args.invoice_command == "item":
        invoice = service.read(args.invoice)
        item = Item(description=args.desc, quantity=args.quantity, rate=args.rate, vat=args.vat)
        invoice = service.add_items(invoice, [item])
        print(f"Invoice {invoice.id} updated")
    else:
        print("ID: Client | Date | Due")
        for invoice in service.list(filter_invoice("")):
            print(
                f"{invoice.id}: {invoice.recipient.name} | "
                f"{invoice.date.strftime(_DATE_FORMAT)} | "
                f"{invoice.due_date().strftime(_DATE_FORMAT)}"
            )


def _pdf(args: argparse.Namespace, config: Config) -> None:
    language = parse_language(args.language)
    document = new_document_service(config, args.renderer, args.draft, language)
    invoice = new_invoice_service(config).read(args.invoice)
    document.render(invoice)
    print("Generated PDF for:", args.invoice)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="invoiceling",
        description="CLI based invoicing tool for freelancers.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--config", help="config file (default is ./config.<ext>)")
    commands = parser.add_subparsers(dest="command")

    init = commands.add_parser("init", help="Initialize a folder with default configurations")
    init.add_argument(
        "-f", "--format", default="yaml", help="Configuration file format: yaml, yml, json"
    )
    init.set_defaults(handler=_init)

    client = commands.add_parser("client", help="List and create clients")
    client.add_argument("-f", "--filter", default="", help="Filter clients by name")
    client.set_defaults(handler=_client)
    client_commands = client.add_subparsers(dest="client_command")
    create_client = client_commands.add_parser("create", help="Creates a new client entry")
    create_client.add_argument("-i", "--id", default="", help="Provide a custom client id")
    create_client.add_argument("-n", "--name", required=True, help="Client name")
    create_client.add_argument("-v", "--vat_id", required=True, help="Client VAT ID")
    create_client.add_argument(
        "-s", "--address1", required=True, help="Client address street info"
    )
    create_client.add_argument(
        "-c", "--address2", default="", help="Client address region state country"
    )

    invoice = commands.add_parser("invoice", help="Invoice commands")
    invoice.set_defaults(handler=_invoice)
    invoice_commands = invoice.add_subparsers(dest="invoice_command")
    create_invoice = invoice_commands.add_parser("create", help="Create a new invoice file")
    create_invoice.add_argument("-i", "--id", type=int, default=0, help="Invoice number")
    create_invoice.add_argument("-c", "--client", required=True, help="Invoice client")
    create_invoice.add_argument(
        "-d", "--due", type=int, default=DEFAULT_DUE_DAYS, help="Days until due"
    )
    create_invoice.add_argument("-v", "--vat", type=float, default=None, help="Invoice VAT")
    create_invoice.add_argument(
        "-r", "--retention", type=float, default=None, help="Invoice retention (Spanish IRPF)"
    )
    create_invoice.add_argument("-n", "--note", default=DEFAULT_NOTE, help="Add invoice note")

    item = invoice_commands.add_parser("item", help="Add billable item to invoice")
    item.add_argument("-i", "--invoice", required=True, help="Invoice ID")
    item.add_argument("-d", "--desc", required=True, help="Item description")
    item.add_argument("-r", "--rate", type=float, required=True, help="Item price")
    item.add_argument("-q", "--quantity", type=int, default=1, help="Item quantity")
    item.add_argument("-v", "--vat", type=float, default=0.0, help="Item VAT")

    pdf = commands.add_parser("pdf", help="Render an invoice as PDF")
    pdf.add_argument("-i", "--invoice", default="", help="Invoice id to render")
    pdf.add_argument("-d", "--draft", action="store_true", help="Generate draft PDF")
    pdf.add_argument("-r", "--renderer", default="Basic", help="Renderer to use")
    pdf.add_argument("-l", "--language", default="en", help="Language for the PDF (en, es)")
    pdf.set_defaults(handler=_pdf)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    config = _load_config(args.config)
    try:
        args.handler(args, config)
    except _FAILURES as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())