"""The output party: collects aggregated server shares and reconstructs the results."""

from __future__ import annotations

import argparse
import gzip
import json
import logging
import os
import ssl
import sys
import threading
import zlib
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from math import comb
from pathlib import Path
from typing import Any, TextIO

from .client import _EventLog
from .field import Share
from .op_config import OutputPartyConfig
from .op_generator import _dump_json, format_timestamp, parse_timestamp
from .proof import Shares
from .rss import ReplicatedSecretSharing
from .store import Experiment, ShareStore, StoreError

__all__ = [
    "AggregatedShareRequest",
    "OutputPartyRequest",
    "OutputParty",
    "read_output_party_input",
    "write_result",
    "main",
]

_log = logging.getLogger(__name__)

SHARE_PATH = "/serverShare/"


def _folded(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return {str(key).strip().lower(): value for key, value in data.items()}


def _text(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _shares_json(shares: Shares) -> bytes:
    return _dump_json({"Index": list(shares.index), "Values": [list(r) for r in shares.values]}).encode()


@dataclass
class AggregatedShareRequest:
    """A server's aggregated shares for one experiment."""

    exp_id: str = ""
    server_id: str = ""
    timestamp: str = ""
    shares: Shares = field(default_factory=Shares)

    @classmethod
    def from_gzip_json(cls, data: bytes) -> AggregatedShareRequest:
        """Decode a gzip-compressed JSON request body."""
        try:
            text = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise ValueError(f"Cannot decompress server request: {exc}") from exc
        try:
            fields = _folded(json.loads(text), "aggregated share request")
            raw_shares = fields.get("shares") or {}
            if not isinstance(raw_shares, dict):
                raise ValueError("Shares must be a JSON object")
            return cls(
                exp_id=_text(fields, "exp_id"),
                server_id=_text(fields, "server_id"),
                timestamp=_text(fields, "timestamp"),
                shares=Shares.from_dict(raw_shares),
            )
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Cannot decode aggregated share request: {exc}") from exc


@dataclass
class OutputPartyRequest:
    """Announcement of an experiment to the output party."""

    exp_id: str = ""
    client_share_due: str = ""
    owner: str = ""

    def to_json(self) -> bytes:
        """Return the compact JSON body."""
        return _dump_json(
            {"Exp_ID": self.exp_id, "ClientShareDue": self.client_share_due, "Owner": self.owner}
        ).encode("utf-8")


def read_output_party_input(path: str | Path) -> list[Experiment]:
    """Read the experiment schedule from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("experiments must be a JSON list")
    experiments = []
    for item in data:
        fields = _folded(item, "experiment")
        experiments.append(
            Experiment(
                exp_id=_text(fields, "exp_id"),
                client_share_due=_text(fields, "clientsharedue"),
                server_share_due=_text(fields, "serversharedue"),
            )
        )
    return experiments


def write_result(exp_id: str, result: list[int], path: str | Path = "result.json") -> None:
    """Append an experiment's result to the JSON list kept in path."""
    target = Path(path)
    records: list[Any] = []
    if target.exists():
        loaded = json.loads(target.read_text(encoding="utf-8"))
        if loaded is not None:
            if not isinstance(loaded, list):
                raise ValueError("result file must hold a JSON list")
            records = loaded
    records.append({"Exp_ID": exp_id, "Result": list(result)})
    target.write_text(_dump_json(records, indent=2), encoding="utf-8")


class OutputParty:
    """Stores server shares as they arrive and reconstructs each experiment when due."""

    def __init__(self, config: OutputPartyConfig, store: ShareStore) -> None:
        self.config = config
        self.store = store
        self.n_sh = comb(config.n - 1, config.t) * config.n * config.n_secrets
        self.real_server_share_due: datetime | None = None
        self.reconstruction_time: timedelta | None = None
        self.result_path = Path("result.json")
        self.events = _EventLog()

    def handle_experiments(self, path: str | Path) -> None:
        """Load the experiment schedule into the store."""
        for exp in read_output_party_input(path):
            self.events.info(
                exp_id=exp.exp_id,
                client_share_due=exp.client_share_due,
                server_share_due=exp.server_share_due,
            )
            self.store.insert_experiment(exp.exp_id, exp.client_share_due, exp.server_share_due)

    def create_server_share(self, request: AggregatedShareRequest) -> int:
        """Store a server's shares; return how many records the experiment now has."""
        if self.store.get_experiment(request.exp_id) is None:
            raise ValueError(
                "experiment does not exist when output party creates server's shares record"
            )
        _log.info("outputparty received server shares from %s", request.server_id)
        self.store.insert_server_share(request.exp_id, request.server_id,
                                       _shares_json(request.shares))
        count = self.store.count_shares_per_experiment(request.exp_id)
        if count == self.n_sh:
            self.real_server_share_due = datetime.now(timezone.utc)
        return count

    def _accept_share(self, body: bytes) -> tuple[int, str]:
        try:
            self.create_server_share(AggregatedShareRequest.from_gzip_json(body))
        except (ValueError, StoreError) as exc:
            _log.warning("error: %s", exc)
            return HTTPStatus.BAD_REQUEST, f"{exc}\n"
        return HTTPStatus.OK, ""

    def reconstruct_experiment(self, experiment: Experiment) -> list[int]:
        """Reconstruct the sum of every secret from the servers' stored shares."""
        per_input: dict[int, dict[str, list[Share]]] = {}
        for record in self.store.get_shares_per_experiment(experiment.exp_id):
            try:
                shares = Shares.from_dict(json.loads(record.shares))
            except (ValueError, TypeError) as exc:
                raise ValueError(
                    f"{self.config.outputparty_id} cannot unmarshall "
                    f"{record.server_id} masked shares record"
                ) from exc
            for input_index, values in enumerate(shares.values):
                if len(values) > len(shares.index):
                    raise ValueError(f"shares of {record.server_id} are malformed")
                per_input.setdefault(input_index, {})[record.server_id] = [
                    Share(index=index, value=value) for index, value in zip(shares.index, values)
                ]

        rss = ReplicatedSecretSharing(self.config.n, self.config.t, self.config.q)
        result = [0] * self.config.n_secrets
        for input_index, servers in per_input.items():
            if input_index >= len(result):
                raise ValueError("more inputs than the configured number of secrets")
            result[input_index] = rss.reconstruct(list(servers.values()))
        return result

    def process_due_experiments(self, now: datetime | None = None) -> dict[str, list[int]]:
        """Reconstruct, record and complete every open experiment whose server round is over."""
        current = now or datetime.now(timezone.utc)
        finished: dict[str, list[int]] = {}
        for exp in self.store.get_all_experiments():
            try:
                due: datetime | None = parse_timestamp(exp.server_share_due)
            except ValueError:
                due = None
            if due is not None and not current > due:
                continue
            result = self.reconstruct_experiment(exp)
            if due is not None:
                self.reconstruction_time = datetime.now(timezone.utc) - due
            self.events.info(exp_id=exp.exp_id, result=result)
            write_result(exp.exp_id, result, self.result_path)
            self.store.update_completed_experiment(exp.exp_id)
            finished[exp.exp_id] = result
        return finished

    def _finish(self) -> None:
        real_due = self.real_server_share_due
        self.events.info(
            real_server_share_due=format_timestamp(real_due) if real_due else "",
            reconstruction_time=str(self.reconstruction_time or timedelta()),
            end=format_timestamp(datetime.now(timezone.utc)),
        )
        _log.info("%s is finishing", self.config.outputparty_id)

    def _watch(self, server: ThreadingHTTPServer, stop: threading.Event,
               errors: list[BaseException]) -> None:
        try:
            while not stop.wait(1.0):
                self.process_due_experiments()
                if not self.store.get_all_experiments():
                    self._finish()
                    break
        except Exception as exc:  # reported by serve() after shutdown
            errors.append(exc)
        finally:
            server.shutdown()

    def serve(self, use_tls: bool = True) -> None:
        """Accept server shares over HTTP(S) until every experiment is completed."""
        party = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self) -> None:
                if not self.path.startswith(SHARE_PATH):
                    self.send_error(HTTPStatus.NOT_FOUND)
                    return
                length = int(self.headers.get("Content-Length") or 0)
                status, text = party._accept_share(self.rfile.read(length))
                payload = text.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "text/plain; charset=utf-8")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, format: str, *args: Any) -> None:
                _log.debug(format, *args)

        server = ThreadingHTTPServer(("", int(self.config.port)), Handler)
        if use_tls:
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            context.load_cert_chain(self.config.cert_path, self.config.key_path)
            server.socket = context.wrap_socket(server.socket, server_side=True)

        stop = threading.Event()
        errors: list[BaseException] = []
        watcher = threading.Thread(target=self._watch, args=(server, stop, errors), daemon=True)
        watcher.start()
        try:
            server.serve_forever()
        finally:
            stop.set()
            server.server_close()
        if errors:
            raise errors[0]


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smcbox-outputparty", description="Run an output party.")
    parser.add_argument("-confpath", "--confpath", default="../config/outputparty.json",
                        help="config file path")
    parser.add_argument("-inputpath", "--inputpath", default="experiments.json",
                        help="experiments information path")
    parser.add_argument("-mode", "--mode", default="tls", help="use tls")
    parser.add_argument("-logpath", "--logpath", default="./", help="outputparty log path")
    parser.add_argument("-n_client", "--n_client", type=int, default=0, help="client number")
    parser.add_argument("-dbpath", "--dbpath", default="smc.db", help="database file")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Load the configuration and schedule, then serve until every experiment is done."""
    args = _parser().parse_args(argv)
    if args.n_client == 0:
        print("number of clients in command could not be 0", file=sys.stderr)
        return 1
    try:
        config = OutputPartyConfig.load(args.confpath)
        os.makedirs(args.logpath, exist_ok=True)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    with ExitStack() as stack:
        log_path = Path(args.logpath) / f"{config.outputparty_id}.log"
        try:
            stream: TextIO = stack.enter_context(open(log_path, "a", encoding="utf-8"))
        except OSError:
            stream = sys.stderr
            print("Failed to log to file, using default stderr", file=sys.stderr)
        events = _EventLog(stream)
        events.info(
            id=config.outputparty_id, N_clients=args.n_client, N=config.n, T=config.t,
            Q=config.q, N_secrets=config.n_secrets, Port=config.port,
        )
        try:
            store = stack.enter_context(ShareStore(args.dbpath))
            party = OutputParty(config, store)
            party.events = events
            party.handle_experiments(args.inputpath)
            events.info(start=format_timestamp(datetime.now(timezone.utc)))
            party.serve(args.mode == "tls")
        except (OSError, ValueError, StoreError) as exc:
            print(exc, file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())