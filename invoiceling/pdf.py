"""A small single-page PDF writer with top-left coordinates in points."""

from __future__ import annotations

import os
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from PIL import Image

PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
_DEFAULT_WIDTH = 556

_HELVETICA_WIDTHS = (
    278, 278, 355, 556, 556, 889, 667, 191, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556,
    278, 278, 584, 584, 584, 556, 1015,
    667, 667, 722, 722, 667, 611, 778, 722, 278, 500, 667, 556, 833,
    722, 778, 667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611,
    278, 278, 278, 469, 556, 333,
    556, 556, 500, 556, 556, 278, 556, 556, 222, 222, 500, 222, 833,
    556, 556, 556, 556, 333, 500, 278, 556, 500, 722, 500, 500, 500,
    334, 260, 334, 584,
)

_HELVETICA_BOLD_WIDTHS = (
    278, 333, 474, 556, 556, 889, 722, 238, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556,
    333, 333, 584, 584, 584, 611, 975,
    722, 722, 722, 722, 667, 611, 778, 722, 278, 556, 722, 611, 833,
    722, 778, 667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611,
    333, 278, 333, 584, 556, 333,
    556, 611, 556, 611, 556, 333, 611, 611, 278, 278, 556, 278, 889,
    611, 611, 611, 611, 389, 556, 333, 611, 556, 778, 556, 556, 500,
    389, 280, 389, 584,
)


@dataclass(frozen=True)
class _Font:
    resource: str
    base_font: str
    widths: dict[str, int]
    ascent: int = 718

    def char_width(self, char: str) -> int:
        return self.widths.get(char, _DEFAULT_WIDTH)


def _width_map(widths: tuple[int, ...]) -> dict[str, int]:
    return {chr(32 + offset): width for offset, width in enumerate(widths)}


_FONTS = {
    "Helvetica": _Font("F1", "Helvetica", _width_map(_HELVETICA_WIDTHS)),
    "Helvetica-Bold": _Font("F2", "Helvetica-Bold", _width_map(_HELVETICA_BOLD_WIDTHS)),
}

_RECT_STYLES = {"D": "S", "F": "f", "DF": "B", "FD": "B"}


class Align(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _pdf_string(text: str) -> str:
    parts = []
    for byte in text.encode("cp1252", errors="replace"):
        if byte in (0x28, 0x29, 0x5C):
            parts.append("\\" + chr(byte))
        elif 32 <= byte < 127:
            parts.append(chr(byte))
        else:
            parts.append(f"\\{byte:03o}")
    return "(" + "".join(parts) + ")"


def _check_color(red: int, green: int, blue: int) -> tuple[int, int, int]:
    for component in (red, green, blue):
        if not 0 <= component <= 255:
            raise ValueError(f"color component out of range: {component}")
    return red, green, blue


def _color(rgb: tuple[int, int, int]) -> str:
    return " ".join(_num(component / 255) for component in rgb)


@dataclass
class _ImageData:
    name: str
    width: int
    height: int
    data: bytes


def _load_image(path: str | os.PathLike[str], name: str) -> _ImageData:
    with Image.open(path) as img:
        img.load()
        has_alpha = img.mode in ("RGBA", "LA") or (
            img.mode == "P" and "transparency" in img.info
        )
        if has_alpha:
            rgba = img.convert("RGBA")
            rgb = Image.new("RGB", rgba.size, (255, 255, 255))
            rgb.paste(rgba, mask=rgba.getchannel("A"))
        else:
            rgb = img.convert("RGB")
        return _ImageData(name, rgb.width, rgb.height, zlib.compress(rgb.tobytes()))


class PdfCanvas:
    """One PDF page drawn with a cursor; y grows downwards from the top edge."""

    def __init__(
        self,
        margin: float = 40.0,
        width: float = PAGE_WIDTH,
        height: float = PAGE_HEIGHT,
    ) -> None:
        self.margin = margin
        self.width = width
        self.height = height
        self.x = margin
        self.y = margin
        self.font_size = 0.0
        self._font: _Font | None = None
        self._text_color = (0, 0, 0)
        self._stroke_color = (0, 0, 0)
        self._fill_color = (0, 0, 0)
        self._ops: list[str] = []
        self._fonts_used: dict[str, _Font] = {}
        self._states: dict[float, str] = {}
        self._images: dict[str, _ImageData] = {}

    def _flip(self, y: float) -> float:
        return self.height - y

    def _require_font(self) -> tuple[_Font, float]:
        if self._font is None:
            raise RuntimeError("no font set")
        return self._font, self.font_size

    def set_font(self, name: str, size: float) -> None:
        """Select one of the built-in fonts by name at size points."""
        font = _FONTS.get(name)
        if font is None:
            raise ValueError(f"unknown font: {name}")
        if size <= 0:
            raise ValueError(f"font size must be positive: {size}")
        self._font = font
        self.font_size = size

    def set_text_color(self, red: int, green: int, blue: int) -> None:
        self._text_color = _check_color(red, green, blue)

    def set_stroke_color(self, red: int, green: int, blue: int) -> None:
        self._stroke_color = _check_color(red, green, blue)

    def set_fill_color(self, red: int, green: int, blue: int) -> None:
        self._fill_color = _check_color(red, green, blue)

    def text_width(self, text: str) -> float:
        """Width of text in points in the current font."""
        font, size = self._require_font()
        return sum(font.char_width(char) for char in text) * size / 1000

    def _graphics_state(self, alpha: float) -> str:
        if not 0 <= alpha <= 1:
            raise ValueError(f"alpha out of range: {alpha}")
        name = self._states.get(alpha)
        if name is None:
            name = self._states[alpha] = f"GS{len(self._states) + 1}"
        return name

    def cell(
        self,
        width: float | None,
        text: str,
        align: Align = Align.LEFT,
        border: bool = False,
        alpha: float | None = None,
    ) -> None:
        """Draw text in a cell at the cursor and move the cursor right past it.

        Without a width the cell is as wide as the text. With alpha the text is
        drawn at that opacity with overlay blending.
        """
        font, size = self._require_font()
        text_w = self.text_width(text)
        cell_w = text_w if width is None else width
        if align is Align.RIGHT:
            text_x = self.x + cell_w - text_w
        elif align is Align.CENTER:
            text_x = self.x + (cell_w - text_w) / 2
        else:
            text_x = self.x

        ops = ["q"]
        if alpha is not None:
            ops.append(f"/{self._graphics_state(alpha)} gs")
        if text:
            self._fonts_used[font.resource] = font
            baseline = self.y + size * font.ascent / 1000
            ops += [
                f"{_color(self._text_color)} rg",
                "BT",
                f"/{font.resource} {_num(size)} Tf",
                f"{_num(text_x)} {_num(self._flip(baseline))} Td",
                f"{_pdf_string(text)} Tj",
                "ET",
            ]
        if border:
            ops += [
                f"{_color(self._stroke_color)} RG",
                f"{_num(self.x)} {_num(self._flip(self.y + size))} "
                f"{_num(cell_w)} {_num(size)} re S",
            ]
        ops.append("Q")
        self._ops.extend(ops)
        self.x += cell_w

    def multi_cell(self, width: float, height: float, text: str) -> None:
        """Draw text wrapped to width, one line per font size, within height.

        Lines that would overflow height are left out. The cursor ends below
        the last line at the starting x.
        """
        _, size = self._require_font()
        start_x = self.x
        used = 0.0
        for line in self._wrap(text, width):
            if used + size > height:
                break
            self.x = start_x
            self.cell(width, line)
            self.y += size
            used += size
        self.x = start_x

    def _wrap(self, text: str, width: float) -> list[str]:
        lines: list[str] = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if self.text_width(candidate) <= width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                current = ""
                for char in word:
                    if current and self.text_width(current + char) > width:
                        lines.append(current)
                        current = ""
                    current += char
            lines.append(current)
        return lines

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._ops += [
            "q",
            f"{_color(self._stroke_color)} RG",
            f"{_num(x1)} {_num(self._flip(y1))} m",
            f"{_num(x2)} {_num(self._flip(y2))} l",
            "S",
            "Q",
        ]

    def rectangle(self, x1: float, y1: float, x2: float, y2: float, style: str = "D") -> None:
        """Draw a rectangle between two corners; style is D, F, DF or FD."""
        operator = _RECT_STYLES.get(style.upper())
        if operator is None:
            raise ValueError(f"unknown rectangle style: {style}")
        left, right = sorted((x1, x2))
        top, bottom = sorted((y1, y2))
        self._ops += [
            "q",
            f"{_color(self._stroke_color)} RG",
            f"{_color(self._fill_color)} rg",
            f"{_num(left)} {_num(self._flip(bottom))} "
            f"{_num(right - left)} {_num(bottom - top)} re {operator}",
            "Q",
        ]

    def image(
        self,
        path: str | os.PathLike[str],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Place an image file with its top-left corner at x, y."""
        key = os.fspath(path)
        data = self._images.get(key)
        if data is None:
            data = _load_image(path, f"Im{len(self._images) + 1}")
            self._images[key] = data
        self._ops += [
            "q",
            f"{_num(width)} 0 0 {_num(height)} {_num(x)} {_num(self._flip(y + height))} cm",
            f"/{data.name} Do",
            "Q",
        ]

    def br(self, height: float) -> None:
        """Move the cursor down by height and back to the left margin."""
        self.x = self.margin
        self.y += height

    def to_bytes(self) -> bytes:
        """Serialise the page as a complete PDF document."""
        content = "\n".join(self._ops).encode("ascii")
        fonts = sorted(self._fonts_used.values(), key=lambda font: font.resource)
        states = sorted(self._states.items(), key=lambda item: item[1])
        images = list(self._images.values())

        next_number = 5
        font_numbers = {}
        for font in fonts:
            font_numbers[font.resource] = next_number
            next_number += 1
        state_numbers = {}
        for _, name in states:
            state_numbers[name] = next_number
            next_number += 1
        image_numbers = {}
        for image in images:
            image_numbers[image.name] = next_number
            next_number += 1

        def refs(numbers: dict[str, int]) -> str:
            return " ".join(f"/{name} {number} 0 R" for name, number in numbers.items())

        resources = ["/ProcSet [/PDF /Text /ImageC]"]
        if font_numbers:
            resources.append(f"/Font << {refs(font_numbers)} >>")
        if state_numbers:
            resources.append(f"/ExtGState << {refs(state_numbers)} >>")
        if image_numbers:
            resources.append(f"/XObject << {refs(image_numbers)} >>")

        bodies: list[bytes] = [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {_num(self.width)} "
                f"{_num(self.height)}] /Resources << {' '.join(resources)} >> "
                f"/Contents 4 0 R >>"
            ).encode("ascii"),
            _stream(b"", content),
        ]
        for font in fonts:
            bodies.append(
                (
                    f"<< /Type /Font /Subtype /Type1 /BaseFont /{font.base_font} "
                    f"/Encoding /WinAnsiEncoding >>"
                ).encode("ascii")
            )
        for alpha, _ in states:
            bodies.append(
                (
                    f"<< /Type /ExtGState /ca {_num(alpha)} /CA {_num(alpha)} "
                    f"/BM /Overlay >>"
                ).encode("ascii")
            )
        for image in images:
            header = (
                f"/Type /XObject /Subtype /Image /Width {image.width} "
                f"/Height {image.height} /ColorSpace /DeviceRGB /BitsPerComponent 8 "
                f"/Filter /FlateDecode "
            ).encode("ascii")
            bodies.append(_stream(header, image.data))

        out = bytearray(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
        offsets = []
        for number, body in enumerate(bodies, start=1):
            offsets.append(len(out))
            out += f"{number} 0 obj\n".encode("ascii") + body + b"\nendobj\n"
        xref_offset = len(out)
        out += f"xref\n0 {len(bodies) + 1}\n".encode("ascii")
        out += b"0000000000 65535 f \n"
        out += b"".join(f"{offset:010d} 00000 n \n".encode("ascii") for offset in offsets)
        out += (
            f"trailer\n<< /Size {len(bodies) + 1} /Root 1 0 R >>\n"
            f"startxref\n{xref_offset}\n%%EOF\n"
        ).encode("ascii")
        return bytes(out)

    def save(self, path: str | os.PathLike[str]) -> None:
        Path(path).write_bytes(self.to_bytes())


def _stream(extra: bytes, data: bytes) -> bytes:
    return (
        b"<< " + extra + f"/Length {len(data)} >>\nstream\n".encode("ascii")
        + data + b"\nendstream"
    )