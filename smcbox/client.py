"""A client that proves its bit inputs and sends each server its shares."""

from __future__ import annotations

import argparse
import gzip
import json
import logging
import os
import sys
import time
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from .client_config import ClientConfig
from .ligero import LigeroZK
from .op_generator import _dump_json, format_timestamp
from .proof import Proof, proof_size

__all__ = ["ClientInput", "ClientRequest", "Client", "read_client_input", "main"]

_log = logging.getLogger(__name__)

CONTENT_TYPE = "application/json; charset=UTF-8"


def _duration(seconds: float) -> str:
    return f"{seconds:.6f}s"


class _EventLog:
    """Writes one JSON object per line; to the module logger when no stream is given."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def info(self, **fields: Any) -> None:
        line = json.dumps({**fields, "level": "info", "msg": ""}, sort_keys=True, default=str)
        if self.stream is None:
            _log.debug(line)
        else:
            self.stream.write(line + "\n")
            self.stream.flush()


@dataclass
class ClientInput:
    """The secrets a client contributes to one experiment."""

    exp_id: str = ""
    secrets: list[int] = field(default_factory=list)


@dataclass
class ClientRequest:
    """The message sent to one server: the experiment, the client and its proof."""

    exp_id: str = ""
    client_id: str = ""
    token: str = ""
    timestamp: str = ""
    proof: Proof = field(default_factory=Proof)

    def to_json(self) -> bytes:
        """Return the gzip-compressed JSON body; the token is sent empty."""
        message = {
            "Exp_ID": self.exp_id,
            "Client_ID": self.client_id,
            "Token": "",
            "Timestamp": self.timestamp,
            "Proof": self.proof.to_dict(),
        }
        return gzip.compress(_dump_json(message).encode("utf-8"))


def _parse_input(item: Any) -> ClientInput:
    if not isinstance(item, dict):
        raise ValueError("each client input must be a JSON object")
    folded = {str(key).lower(): value for key, value in item.items()}
    exp_id = folded.get("exp_id") or ""
    values = folded.get("secrets") or []
    if not isinstance(exp_id, str):
        raise ValueError("Exp_ID must be a string")
    if not isinstance(values, list) or any(
        isinstance(v, bool) or not isinstance(v, int) for v in values
    ):
        raise ValueError("Secrets must be a list of integers")
    return ClientInput(exp_id=exp_id, secrets=list(values))


def read_client_input(path: str | Path) -> list[ClientInput]:
    """Read the list of experiment inputs from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("client input must be a JSON list")
    return [_parse_input(item) for item in data]


class Client:
    """Generates a proof per input and posts each server its own copy."""

    def __init__(self, config: ClientConfig, mode: str) -> None:
        self.config = config
        self.mode = mode
        self.events = _EventLog()

    def _request(self, exp_id: str, position: int, proof: Proof, timestamp: str) -> ClientRequest:
        if self.mode == "malicious" and position == 0:
            proof = replace(proof, code_test=[0] * len(proof.code_test))
        return ClientRequest(
            exp_id=exp_id,
            client_id=self.config.client_id,
            token=self.config.token,
            timestamp=timestamp,
            proof=proof,
        )

    def _deliver(self, address: str, request: ClientRequest) -> int | None:
        _log.info(
            "client %s is sending data of %s to server%d ...",
            request.client_id, request.exp_id, request.proof.shares.party_index,
        )
        return self.send(address, request.to_json())

    def run(self, inputpath: str | Path) -> None:
        """Prove every input in the file and send the proofs to the servers."""
        inputs = read_client_input(inputpath)
        cfg = self.config
        urls = list(cfg.urls)
        zk = LigeroZK(cfg.n_secrets, cfg.m, cfg.n, cfg.t, cfg.q, cfg.n_open)

        for item in inputs:
            start = time.perf_counter()
            proofs = zk.generate_proof(item.secrets)
            elapsed = time.perf_counter() - start
            if len(urls) > len(proofs):
                raise ValueError("more server URLs than servers in the configuration")

            proof_bytes, share_bytes = proof_size(proofs[0])
            self.events.info(
                input={"Exp_ID": item.exp_id, "Secrets": item.secrets},
                proof_time=_duration(elapsed),
                proof_size=proof_bytes,
                input_shares_size=share_bytes,
            )

            timestamp = format_timestamp(datetime.now(timezone.utc))
            requests = [
                self._request(item.exp_id, position, proof, timestamp)
                for position, proof in enumerate(proofs[:len(urls)])
            ]
            if requests:
                with ThreadPoolExecutor(max_workers=len(requests)) as pool:
                    list(pool.map(self._deliver, urls, requests))

    def send(self, address: str, data: bytes) -> int | None:
        """POST data to address; return the response status, or None if sending failed."""
        request = urllib.request.Request(
            address, data=data, method="POST", headers={"Content-Type": CONTENT_TYPE}
        )
        try:
            with urllib.request.urlopen(request) as response:
                status, body = response.status, response.read()
        except urllib.error.HTTPError as exc:
            status, body = exc.code, exc.read()
        except (urllib.error.URLError, OSError) as exc:
            _log.warning("impossible to send http request: %s", exc)
            return None
        _log.info("response Status:%s", status)
        if body:
            _log.info("response Body: %s", body.decode("utf-8", "replace"))
        return status


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smcbox-client", description="Run a client.")
    parser.add_argument("-confpath", "--confpath", default="../config/client.json",
                        help="config file path")
    parser.add_argument("-inputpath", "--inputpath", default="input.json",
                        help="client input path")
    parser.add_argument("-logpath", "--logpath", default="./", help="client log path")
    parser.add_argument("-mode", "--mode", default="malicious", help="malicious client mode")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Load the configuration, run the client and log timings to <logpath>/<id>.log."""
    args = _parser().parse_args(argv)
    try:
        config = ClientConfig.load(args.confpath)
        os.makedirs(args.logpath, exist_ok=True)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    with ExitStack() as stack:
        log_path = Path(args.logpath) / f"{config.client_id}.log"
        try:
            stream: TextIO = stack.enter_context(open(log_path, "a", encoding="utf-8"))
        except OSError:
            stream = sys.stderr
            print("Failed to log to file, using default stderr", file=sys.stderr)
        events = _EventLog(stream)
        events.info(
            id=config.client_id, N=config.n, T=config.t, Q=config.q,
            N_secrets=config.n_secrets, M=config.m, N_open=config.n_open, URLs=config.urls,
        )

        client = Client(config, args.mode)
        client.events = events
        events.info(start=format_timestamp(datetime.now(timezone.utc)))
        started = time.perf_counter()
        try:
            client.run(args.inputpath)
        except (OSError, ValueError) as exc:
            print(exc, file=sys.stderr)
            return 1
        events.info(end=_duration(time.perf_counter() - started))
    return 0


if __name__ == "__main__":
    sys.exit(main())