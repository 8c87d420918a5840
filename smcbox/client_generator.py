"""Generate client configuration files and random bit inputs."""

from __future__ import annotations

import os
import secrets as _secrets
from dataclasses import replace
from pathlib import Path

from .client_config import ClientConfig
from .op_generator import _dump_json

__all__ = [
    "generate_client_config",
    "generate_client_config_cloud",
    "generate_client_input",
    "generate_client_input_cloud",
    "generate_secrets",
]


def _write_configs(ids: range, src: str | Path, des: str | Path) -> list[Path]:
    destination = Path(des)
    os.makedirs(destination, exist_ok=True)
    template = ClientConfig.load(src)

    written = []
    for number in ids:
        config = replace(template, client_id=f"c{number}", token=f"t{number}")
        fields = {key: value for key, value in config.to_dict().items() if key != "K"}
        path = destination / f"config_{config.client_id}.json"
        path.write_text(_dump_json(fields, indent=1), encoding="utf-8")
        written.append(path)
    return written


def generate_client_config(client_num: int, src: str | Path, des: str | Path) -> list[Path]:
    """Write config_c1.json .. config_c<client_num>.json from a template."""
    return _write_configs(range(1, client_num + 1), src, des)


def generate_client_config_cloud(client_num: int, start_cid: int, src: str | Path,
                                 des: str | Path) -> list[Path]:
    """Write client_num configuration files numbered from start_cid."""
    return _write_configs(range(start_cid, start_cid + client_num), src, des)


def generate_secrets(size: int) -> list[int]:
    """Return size random bits."""
    return [_secrets.randbelow(2) for _ in range(size)]


def _write_inputs(ids: range, exp_num: int, value_num: list[int],
                  des: str | Path) -> list[Path]:
    if len(value_num) < exp_num:
        raise ValueError("value_num must give a number of inputs for every experiment")
    destination = Path(des)
    os.makedirs(destination, exist_ok=True)

    written = []
    for number in ids:
        experiments = [
            {"Exp_ID": f"exp{index}", "Secrets": generate_secrets(count)}
            for index, count in enumerate(value_num[:exp_num], start=1)
        ]
        path = destination / f"input_c{number}.json"
        path.write_text(_dump_json(experiments) + "\n", encoding="utf-8")
        written.append(path)
    return written


def generate_client_input(client_num: int, exp_num: int, value_num: list[int],
                          des: str | Path) -> list[Path]:
    """Write input_c1.json .. input_c<client_num>.json with random bits per experiment."""
    return _write_inputs(range(1, client_num + 1), exp_num, value_num, des)


def generate_client_input_cloud(client_num: int, start_cid: int, exp_num: int,
                                value_num: list[int], des: str | Path) -> list[Path]:
    """Write client_num input files numbered from start_cid."""
    return _write_inputs(range(start_cid, start_cid + client_num), exp_num, value_num, des)