"""Configuration of an output party, read from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = ["OutputPartyConfig"]

_FIELDS: tuple[tuple[str, str, type], ...] = (
    ("OutputParty_ID", "outputparty_id", str),
    ("Cert_path", "cert_path", str),
    ("Key_path", "key_path", str),
    ("Port", "port", str),
    ("N", "n", int),
    ("T", "t", int),
    ("N_secrets", "n_secrets", int),
    ("Q", "q", int),
)


def _decode_fields(data: Any, fields: tuple[tuple[str, str, type], ...]) -> dict[str, Any]:
    """Map a JSON object onto attribute names; keys match exactly or ignoring case."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    exact = {name: (attr, kind) for name, attr, kind in fields}
    folded = {name.lower(): (attr, kind) for name, attr, kind in fields}
    values: dict[str, Any] = {}
    for key, value in data.items():
        target = exact.get(key) or folded.get(key.lower())
        if target is None or value is None:
            continue
        attr, kind = target
        if kind is int:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"field {key!r} must be an integer")
        elif not isinstance(value, kind):
            raise ValueError(f"field {key!r} must be a string")
        values[attr] = value
    return values


@dataclass
class OutputPartyConfig:
    """Identity, TLS files, port and sharing parameters of an output party."""

    outputparty_id: str = ""
    cert_path: str = ""
    key_path: str = ""
    port: str = ""
    n: int = 0
    t: int = 0
    n_secrets: int = 0
    q: int = 0

    @classmethod
    def load(cls, path: str | Path) -> OutputPartyConfig:
        """Read a configuration file; missing fields keep their zero values."""
        text = Path(path).read_text(encoding="utf-8")
        try:
            return cls(**_decode_fields(json.loads(text), _FIELDS))
        except ValueError as exc:
            raise ValueError(f"unable to read from config file: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration under its file field names."""
        return {name: getattr(self, attr) for name, attr, _ in _FIELDS}