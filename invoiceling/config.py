"""Layered configuration: defaults, a config file and environment variables."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .model import Freelancer, Payment

CONFIG_NAME = "config"
SEARCH_EXTENSIONS = ("json", "toml", "yaml", "yml")
ALLOWED_FORMATS = ("yaml", "yml", "json")
DIRS = ("client", "invoice", "pdf", "static")

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_MISSING = object()


def _lower_keys(tree: Mapping[str, Any]) -> dict[str, Any]:
    return {
        str(key).lower(): _lower_keys(value) if isinstance(value, Mapping) else value
        for key, value in tree.items()
    }


def _lookup(tree: Mapping[str, Any], parts: list[str]) -> Any:
    node: Any = tree
    for part in parts:
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _assign(tree: dict[str, Any], parts: list[str], value: Any) -> None:
    *parents, leaf = parts
    node = tree
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _extension(path: Path) -> str:
    return path.suffix.lstrip(".").lower()


class Config:
    """Dotted-key settings; environment beats file values, which beat defaults."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._defaults: dict[str, Any] = {}
        self._values: dict[str, Any] = {}
        self._environ = os.environ if environ is None else environ
        self.config_file: Path | None = None

    def get(self, key: str, default: Any = None) -> Any:
        key = key.lower()
        env_value = self._environ.get(key.upper())
        if env_value:
            return env_value
        parts = key.split(".")
        for tree in (self._values, self._defaults):
            value = _lookup(tree, parts)
            if value is not _MISSING:
                return value
        return default

    def get_str(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
        return str(value)

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip() in _TRUE
        return False

    def get_float(self, key: str) -> float:
        value = self.get(key)
        if isinstance(value, (bool, int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return 0.0
        return 0.0

    def set_default(self, key: str, value: Any) -> None:
        _assign(self._defaults, key.lower().split("."), value)

    def as_dict(self) -> dict[str, Any]:
        """Return all settings, file values merged over defaults."""
        return _merge(self._defaults, self._values)

    def read(self, path: str | os.PathLike[str]) -> None:
        """Load settings from a JSON, TOML or YAML file."""
        path = Path(path)
        ext = _extension(path)
        text = path.read_text(encoding="utf-8")
        if ext == "json":
            data = json.loads(text)
        elif ext == "toml":
            data = tomllib.loads(text)
        elif ext in ("yaml", "yml"):
            data = yaml.safe_load(text)
        else:
            raise ValueError(f"unsupported config type: {ext!r}")
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValueError(f"config file {path} does not hold a mapping")
        self._values = _lower_keys(data)
        self.config_file = path

    def write(self, path: str | os.PathLike[str]) -> None:
        """Write all settings to a JSON or YAML file chosen by extension."""
        path = Path(path)
        ext = _extension(path)
        settings = self.as_dict()
        if ext == "json":
            text = json.dumps(settings, indent=2, sort_keys=True, ensure_ascii=False)
        elif ext in ("yaml", "yml"):
            text = yaml.safe_dump(settings, sort_keys=True, allow_unicode=True)
        else:
            raise ValueError(f"unsupported config type: {ext!r}")
        path.write_text(text, encoding="utf-8")

    def discover(self, directory: str | os.PathLike[str] = ".") -> Path:
        """Find and read config.<ext> in directory; raise FileNotFoundError if absent."""
        for ext in SEARCH_EXTENSIONS:
            candidate = Path(directory) / f"{CONFIG_NAME}.{ext}"
            if candidate.is_file():
                self.read(candidate)
                return candidate
        raise FileNotFoundError(f"config file {CONFIG_NAME!r} not found in {directory}")


def apply_defaults(config: Config) -> None:
    """Install the default settings of a freshly initialised folder."""
    for directory in DIRS:
        config.set_default(f"dirs.{directory}", f"./{directory}")

    config.set_default("debug", False)

    config.set_default("invoice.currency", "EUR")
    config.set_default("invoice.logo", "./static/logo.png")
    config.set_default("invoice.id_format", "F%s-%03d")

    config.set_default("freelancer.company", "Your Company Name")
    config.set_default("freelancer.name", "Your Full Name")
    config.set_default("freelancer.email", "your.email@example.com")
    config.set_default("freelancer.phone", "[phone]")
    config.set_default("freelancer.vat_id", "CC12345678A")
    config.set_default("freelancer.address1", "Your Street Address")
    config.set_default("freelancer.address2", "City, ST, Zip Code")

    config.set_default("payment.holder", "Bank account holder")
    config.set_default("payment.iban", "CC00 1234 1234 12 1234567890")
    config.set_default("payment.swift", "ABCDDEFFXXX")

    config.set_default(
        "notes.no_due", "Please send payment within 28 days of receiving this invoice."
    )
    config.set_default(
        "notes.vat_0",
        "Invoice exempt from VAT pursuant to EU Directive 2006/112/EC and art. 25 "
        "of Spanish VAT Law 37 /1992.",
    )
    config.set_default(
        "notes.retention_not_0",
        "Profesionales de nuevo inicio (en el año de inicio y en los dos siguientes) "
        "(art. 101.5.a LIRPF y 95.1 RIRPF).",
    )


@dataclass
class ConfigRepo:
    """Typed access to the invoicing settings of a Config."""

    config: Config

    def debug(self) -> bool:
        return self.config.get_bool("debug")

    def notes(self) -> dict[str, str]:
        return {
            "no_due": self.config.get_str("notes.no_due"),
            "retention_not_0": self.config.get_str("notes.retention_not_0"),
            "vat_0": self.config.get_str("notes.vat_0"),
        }

    def pdf_output_dir(self) -> str:
        return self.config.get_str("dirs.pdf")

    def currency(self) -> str:
        return self.config.get_str("invoice.currency")

    def id_format(self) -> str:
        return self.config.get_str("invoice.id_format")

    def logo(self) -> str:
        return self.config.get_str("invoice.logo")

    def freelancer(self) -> Freelancer:
        get = self.config.get_str
        return Freelancer(
            company=get("freelancer.company"),
            name=get("freelancer.name"),
            email=get("freelancer.email"),
            phone=get("freelancer.phone"),
            vat_id=get("freelancer.vat_id"),
            address1=get("freelancer.address1"),
            address2=get("freelancer.address2"),
        )

    def payment_info(self) -> Payment:
        get = self.config.get_str
        return Payment(
            holder=get("payment.holder"),
            iban=get("payment.iban"),
            swift=get("payment.swift"),
        )