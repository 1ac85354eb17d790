"""Basic one-page PDF layout of an invoice."""

from __future__ import annotations

import os

from PIL import Image

from .i18n import Translator
from .model import Client, Freelancer, Invoice, Item, Notes, Payment, TaxInfo, currency_symbol
from .pdf import PAGE_WIDTH, Align, PdfCanvas

DATE_FORMAT = "%Y-%m-%d"

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

FONT_SIZE_NORMAL = 10
FONT_SIZE_SUBTLE_NORMAL = 12
FONT_SIZE_SUBTLE_TOTAL = 14
FONT_SIZE_TITLE = 24
FONT_SIZE_DRAFT_MARK = 92
LINE_HEIGHT = 20
MARGIN = 40

HEADER_INFO_START_X = 400
HEADER_INFO_WIDTH = 155
HEADER_INFO_NAME = 45
HEADER_INFO_SEPARATOR = 10
HEADER_INFO_VALUE = 100
HEADER_LOGO_SIZE = 100
HEADER_MIN_HEIGHT = 160

FROM_TO_LINE_HEIGHT = 18
FROM_WIDTH = 250
TO_START = 320
TO_WIDTH = 275

ITEM_DESC_WIDTH = 300
ITEM_QTY_WIDTH = 60
ITEM_RATE_WIDTH = 75
ITEM_AMOUNT_WIDTH = 80

DRAFT_ALPHA = 0.65
DRAFT_VERTICAL_SHIFT = 200
DRAFT_HORIZONTAL_SHIFT = 350

_NOTES_PAGE_BOTTOM = 842
_NOTE_LINE_SPACE = 20

BLUE = (0, 0, 200)
GRAY = (192, 192, 192)
BLACK = (24, 24, 24)
LAVENDER = (128, 128, 192)


def scaled_image_size(path: str | os.PathLike[str]) -> tuple[float, float]:
    """Return the logo size scaled to the header height, keeping its aspect."""
    with Image.open(path) as img:
        width, height = img.size
    scaled_height = float(HEADER_LOGO_SIZE)
    return width * scaled_height / height, scaled_height


def _money(value: float, symbol: str) -> str:
    return f"{value:.2f}{symbol}"


class PdfBasicRenderer:
    """Lays out an invoice on a single A4 page."""

    def __init__(self, translator: Translator | None = None, debug: bool = False) -> None:
        self.translator = translator or Translator()
        self.debug = debug
        self.canvas = PdfCanvas(margin=MARGIN)
        self._last_y = 0.0

    def _t(self, key: str) -> str:
        return self.translator.t(key)

    def _track(self) -> None:
        self._last_y = max(self._last_y, self.canvas.y)

    def _cell(self, width: float | None, text: str, align: Align = Align.LEFT) -> None:
        self.canvas.cell(width, text, align, border=self.debug)

    def _style(self, color: tuple[int, int, int], font: str, size: float) -> None:
        self.canvas.set_text_color(*color)
        self.canvas.set_font(font, size)

    def _normal_text(self) -> None:
        self._style(BLACK, REGULAR_FONT, FONT_SIZE_NORMAL)

    def _subtle_normal_text(self) -> None:
        self._style(LAVENDER, REGULAR_FONT, FONT_SIZE_SUBTLE_NORMAL)

    def _subtle_total_text(self) -> None:
        self._style(LAVENDER, BOLD_FONT, FONT_SIZE_SUBTLE_TOTAL)

    def _title_text(self) -> None:
        self._style(BLACK, BOLD_FONT, FONT_SIZE_TITLE)

    def _draft_text(self) -> None:
        self._style(GRAY, BOLD_FONT, FONT_SIZE_DRAFT_MARK)

    def _separator(self) -> None:
        canvas = self.canvas
        canvas.y = self._last_y
        canvas.set_stroke_color(*BLUE)
        canvas.line(MARGIN, canvas.y, PAGE_WIDTH - MARGIN, canvas.y)
        canvas.br(LINE_HEIGHT)

    def render(self, invoice: Invoice, draft: bool) -> None:
        """Draw invoice onto the page, with a watermark when draft is true."""
        self._header(invoice)
        self._separator()
        self._sending_info(invoice.sender, invoice.recipient)
        self._separator()
        self._items(invoice.items, invoice.tax, invoice.currency, invoice.payment)
        self.canvas.y = self._last_y
        self.canvas.br(LINE_HEIGHT)
        self._notes(invoice.notes)
        if draft:
            self._draft_overlay()

    def save_to(self, filename: str | os.PathLike[str]) -> None:
        self.canvas.save(filename)

    def _header(self, invoice: Invoice) -> None:
        canvas = self.canvas
        self._title_text()
        self._cell(HEADER_INFO_WIDTH, self._t("invoice_caps"), Align.CENTER)
        canvas.br(36)

        self._info_line(self._t("invoice"), invoice.id)
        self._info_line(self._t("date"), invoice.date.strftime(DATE_FORMAT))
        if invoice.due.total_seconds() > 0:
            self._info_line(self._t("due"), invoice.due_date().strftime(DATE_FORMAT))
        self._track()

        canvas.x = HEADER_INFO_START_X
        canvas.y = MARGIN
        if invoice.logo:
            width, height = scaled_image_size(invoice.logo)
            canvas.image(invoice.logo, canvas.x, canvas.y, width, height)
            canvas.br(height + LINE_HEIGHT)
            self._track()

        self._last_y = max(self._last_y, HEADER_MIN_HEIGHT)

    def _info_line(self, key: str, value: str) -> None:
        self._subtle_normal_text()
        self._cell(HEADER_INFO_NAME, key)
        self._cell(HEADER_INFO_SEPARATOR, ":")
        self._normal_text()
        self._cell(HEADER_INFO_VALUE, value, Align.RIGHT)
        self.canvas.br(LINE_HEIGHT)

    def _sending_info(self, sender: Freelancer, client: Client) -> None:
        start_y = self.canvas.y
        self._from(sender)
        self.canvas.y = start_y
        self._to(client)

    def _from(self, sender: Freelancer) -> None:
        canvas = self.canvas
        self._subtle_normal_text()
        canvas.cell(FROM_WIDTH, self._t("from"))
        canvas.br(LINE_HEIGHT)
        self._normal_text()
        canvas.cell(FROM_WIDTH, sender.name)
        canvas.br(FROM_TO_LINE_HEIGHT)
        for value in (sender.company, sender.vat_id, sender.address1, sender.address2, sender.phone):
            if value:
                canvas.cell(FROM_WIDTH, value)
                canvas.br(FROM_TO_LINE_HEIGHT)
        canvas.br(LINE_HEIGHT)
        self._track()

    def _to(self, client: Client) -> None:
        canvas = self.canvas
        canvas.x = TO_START
        self._subtle_normal_text()
        canvas.cell(TO_WIDTH, self._t("to"))
        canvas.br(LINE_HEIGHT)
        self._normal_text()
        for value in (client.name, client.vat_id):
            canvas.x = TO_START
            canvas.cell(TO_WIDTH, value)
            canvas.br(FROM_TO_LINE_HEIGHT)
        for value in (client.address1, client.address2):
            if value:
                canvas.x = TO_START
                canvas.cell(TO_WIDTH, value)
                canvas.br(FROM_TO_LINE_HEIGHT)
        self._track()

    def _table_row(self, desc: str, qty: str, rate: str, total: str) -> None:
        self._cell(ITEM_DESC_WIDTH, desc)
        self._cell(ITEM_QTY_WIDTH, qty, Align.RIGHT)
        self._cell(ITEM_RATE_WIDTH, rate, Align.RIGHT)
        self._cell(ITEM_AMOUNT_WIDTH, total, Align.RIGHT)
        self.canvas.br(LINE_HEIGHT)

    def _items(self, items: list[Item], tax: TaxInfo, currency: str, payment: Payment) -> None:
        canvas = self.canvas
        symbol = currency_symbol(currency)

        self._subtle_normal_text()
        self._table_row(
            self._t("description"), self._t("quantity"), self._t("rate"), self._t("amount")
        )
        self._normal_text()

        subtotal = 0.0
        for item in items:
            subtotal += item.amount()
            self._table_row(
                item.description,
                str(item.quantity),
                _money(item.rate, symbol),
                _money(item.amount(), symbol),
            )
        total = subtotal + tax.vat_amount(subtotal) - tax.retention_amount(subtotal)

        canvas.br(LINE_HEIGHT)
        start_y = canvas.y
        self._subtle_normal_text()
        self._cell(ITEM_QTY_WIDTH, self._t("payment_info"))
        canvas.br(LINE_HEIGHT)

        canvas.set_stroke_color(*GRAY)
        canvas.set_fill_color(*GRAY)
        canvas.rectangle(MARGIN, canvas.y, ITEM_DESC_WIDTH, canvas.y + 3 * LINE_HEIGHT, "DF")
        canvas.br(5)
        self._normal_text()
        payment_lines = (
            (self._t("holder_label") + payment.holder, FROM_TO_LINE_HEIGHT),
            (self._t("iban_label") + payment.iban, FROM_TO_LINE_HEIGHT),
            (self._t("swift_label") + payment.swift, LINE_HEIGHT),
        )
        for text, advance in payment_lines:
            canvas.x = MARGIN + 5
            self._cell(ITEM_QTY_WIDTH, text)
            canvas.br(advance)
        self._track()

        canvas.y = start_y
        canvas.set_stroke_color(*BLUE)
        canvas.br(LINE_HEIGHT)
        canvas.line(MARGIN + ITEM_DESC_WIDTH, canvas.y, PAGE_WIDTH - MARGIN, canvas.y)
        canvas.br(LINE_HEIGHT / 2)

        self._table_row("", self._t("subtotal"), "", _money(subtotal, symbol))

        mark = "*"
        vat_label = self._t("vat")
        retention_label = self._t("irpf")
        if tax.vat == 0:
            vat_label += mark
            mark += "*"
        if tax.retention != 0:
            retention_label += mark

        self._table_row(
            "", vat_label, f"{tax.vat:.0f}%", _money(tax.vat_amount(subtotal), symbol)
        )
        if tax.retention != 0:
            self._table_row(
                "",
                retention_label,
                f"-{tax.retention:.0f}%",
                _money(-tax.retention_amount(subtotal), symbol),
            )

        self._subtle_total_text()
        self._table_row("", self._t("total"), "", _money(total, symbol))
        self._track()

    def _notes(self, notes: Notes) -> None:
        canvas = self.canvas
        lines = notes.to_list()
        self._normal_text()
        canvas.y = float(_NOTES_PAGE_BOTTOM - MARGIN - len(lines) * _NOTE_LINE_SPACE)
        mark = ""
        for line in lines:
            canvas.multi_cell(PAGE_WIDTH - 2 * MARGIN, 2 * LINE_HEIGHT, mark + line)
            mark += "*"
            canvas.br(5)

    def _draft_overlay(self) -> None:
        canvas = self.canvas
        self._draft_text()
        for row in range(4):
            canvas.x = MARGIN
            canvas.y = MARGIN + row * DRAFT_VERTICAL_SHIFT
            if row % 2 == 1:
                canvas.x = PAGE_WIDTH - DRAFT_HORIZONTAL_SHIFT
            canvas.cell(None, self._t("draft"), alpha=DRAFT_ALPHA)