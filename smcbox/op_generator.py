"""Generate output-party configuration files and experiment schedules."""

from __future__ import annotations

import json
import os
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from .op_config import OutputPartyConfig

__all__ = ["format_timestamp", "parse_timestamp", "generate_op_config", "generate_op_input"]

_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)

_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))? "
    r"([+-])(\d{2})(\d{2}) \S+(?: m=[+-][\d.]+)?"
)


def _dump_json(obj: Any, indent: int | None = None) -> str:
    if indent is None:
        text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    else:
        text = json.dumps(obj, indent=indent, ensure_ascii=False)
    for char, escape in _ESCAPES:
        text = text.replace(char, escape)
    return text


def format_timestamp(moment: datetime) -> str:
    """Write a moment in UTC as 'YYYY-MM-DD HH:MM:SS[.frac] +0000 UTC'."""
    utc = moment.astimezone(timezone.utc)
    text = utc.strftime("%Y-%m-%d %H:%M:%S")
    if utc.microsecond:
        text += "." + f"{utc.microsecond:06d}".rstrip("0")
    return text + " +0000 UTC"


def parse_timestamp(text: str) -> datetime:
    """Read a timestamp written by format_timestamp; return it as aware UTC time."""
    match = _TIMESTAMP.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"cannot parse timestamp {text!r}")
    year, month, day, hour, minute, second, frac, sign, off_h, off_m = match.groups()
    micro = int((frac or "").ljust(6, "0")[:6])
    offset = timedelta(hours=int(off_h), minutes=int(off_m))
    if sign == "-":
        offset = -offset
    moment = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro,
        tzinfo=timezone(offset),
    )
    return moment.astimezone(timezone.utc)


def generate_op_config(n_op: int, ports: list[str], src: str | Path,
                       des: str | Path) -> list[Path]:
    """Write config_op<i>.json for each output party from a template; return the paths."""
    if len(ports) < n_op:
        raise ValueError("not enough ports for the output parties")
    destination = Path(des)
    os.makedirs(destination, exist_ok=True)
    template = OutputPartyConfig.load(src)

    written = []
    for number, port in enumerate(ports[:n_op], start=1):
        config = replace(template, outputparty_id=f"op{number}", port=port)
        path = destination / f"config_{config.outputparty_id}.json"
        path.write_text(_dump_json(config.to_dict(), indent=1), encoding="utf-8")
        written.append(path)
    return written


def generate_op_input(exp_num: int, start_time: datetime, t: int, des: str | Path) -> Path:
    """Write experiments.json: client shares due at start_time, server shares t minutes later."""
    destination = Path(des)
    os.makedirs(destination, exist_ok=True)

    client_share_due = start_time.astimezone(timezone.utc)
    server_share_due = client_share_due + timedelta(minutes=t)
    experiments = [
        {
            "Exp_ID": f"exp{number}",
            "ClientShareDue": format_timestamp(client_share_due),
            "ServerShareDue": format_timestamp(server_share_due),
        }
        for number in range(1, exp_num + 1)
    ]

    path = destination / "experiments.json"
    path.write_text(_dump_json(experiments) + "\n", encoding="utf-8")
    return path