"""Configuration of a client, read from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = ["ClientConfig"]

_FIELDS: tuple[tuple[str, str, type], ...] = (
    ("Client_ID", "client_id", str),
    ("Token", "token", str),
    ("URLs", "urls", list),
    ("N", "n", int),
    ("T", "t", int),
    ("K", "k", int),
    ("Q", "q", int),
    ("N_secrets", "n_secrets", int),
    ("M", "m", int),
    ("N_open", "n_open", int),
)


def _decode(data: Any) -> dict[str, Any]:
    """Map a JSON object onto attribute names; keys match exactly or ignoring case."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    exact = {name: (attr, kind) for name, attr, kind in _FIELDS}
    folded = {name.lower(): (attr, kind) for name, attr, kind in _FIELDS}
    values: dict[str, Any] = {}
    for key, value in data.items():
        target = exact.get(key) or folded.get(key.lower())
        if target is None or value is None:
            continue
        attr, kind = target
        if kind is int:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"field {key!r} must be an integer")
        elif kind is list:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"field {key!r} must be a list of strings")
            value = list(value)
        elif not isinstance(value, str):
            raise ValueError(f"field {key!r} must be a string")
        values[attr] = value
    return values


@dataclass
class ClientConfig:
    """Identity, server URLs and proof parameters of a client."""

    client_id: str = ""
    token: str = ""
    urls: list[str] = field(default_factory=list)
    n: int = 0
    t: int = 0
    k: int = 0
    q: int = 0
    n_secrets: int = 0
    m: int = 0
    n_open: int = 0

    @classmethod
    def load(cls, path: str | Path) -> ClientConfig:
        """Read a configuration file; missing fields keep their zero values."""
        text = Path(path).read_text(encoding="utf-8")
        try:
            return cls(**_decode(json.loads(text)))
        except ValueError as exc:
            raise ValueError(f"unable to read from client config file: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration under its file field names."""
        result = {name: getattr(self, attr) for name, attr, _ in _FIELDS}
        result["URLs"] = list(self.urls)
        return result