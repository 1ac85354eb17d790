"""Translations of the labels printed on invoices."""

from __future__ import annotations

from enum import StrEnum


class Language(StrEnum):
    ENGLISH = "en"
    SPANISH = "es"


# Each row holds a label key followed by its English and Spanish wording.
_LABELS: tuple[tuple[str, str, str], ...] = (
    ("invoice", "Invoice", "Factura"),
    ("invoice_caps", "INVOICE", "FACTURA"),
    ("date", "Date", "Fecha"),
    ("due", "Due", "Vence"),
    ("from", "From", "De"),
    ("to", "To", "Cliente"),
    ("description", "Description", "Descripción"),
    ("quantity", "Quantity", "Cantidad"),
    ("rate", "Rate", "Precio"),
    ("amount", "Amount", "Importe"),
    ("payment_info", "Payment Info", "Información de Pago"),
    ("holder", "Holder", "Titular"),
    ("iban", "IBAN", "IBAN"),
    ("swift", "Swift", "Swift"),
    ("subtotal", "Subtotal", "Subtotal"),
    ("vat", "VAT", "IVA"),
    ("irpf", "IRPF", "IRPF"),
    ("total", "Total", "Total"),
    ("draft", "DRAFT", "BORRADOR"),
    ("holder_label", "Holder: ", "Titular: "),
    ("iban_label", "IBAN: ", "IBAN: "),
    ("swift_label", "Swift: ", "Swift: "),
)

_TRANSLATIONS: dict[Language, dict[str, str]] = {
    Language.ENGLISH: {key: english for key, english, _ in _LABELS},
    Language.SPANISH: {key: spanish for key, _, spanish in _LABELS},
}


class Translator:
    """Looks up labels in the current language, falling back to English."""

    def __init__(self, language: Language = Language.ENGLISH) -> None:
        self.language = language

    def t(self, key: str) -> str:
        """Translate key; return the key itself when no translation exists."""
        for language in dict.fromkeys((self.language, Language.ENGLISH)):
            translation = _TRANSLATIONS.get(language, {}).get(key)
            if translation is not None:
                return translation
        return key


def supported_languages() -> list[Language]:
    """Return the languages that have translations."""
    return list(Language)


def is_language_supported(lang: str) -> bool:
    return lang in supported_languages()


def parse_language(lang: str) -> Language:
    """Return the Language for lang, raising ValueError if it is unsupported."""
    if not is_language_supported(lang):
        raise ValueError(f"unsupported language: {lang}")
    return Language(lang)