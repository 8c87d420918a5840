"""Persistent storage of experiments and the aggregated shares servers send in."""

from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

__all__ = ["StoreError", "Experiment", "ServerShare", "ShareStore"]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS experiments (
    exp_id TEXT PRIMARY KEY,
    client_share_due TEXT NOT NULL DEFAULT '',
    server_share_due TEXT NOT NULL DEFAULT '',
    completed INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS server_shares (
    exp_id TEXT NOT NULL,
    server_id TEXT NOT NULL,
    shares BLOB,
    PRIMARY KEY (exp_id, server_id)
);
"""


class StoreError(Exception):
    """Raised when the database rejects an operation."""


@dataclass(frozen=True)
class Experiment:
    """An experiment and the deadlines of its two rounds."""

    exp_id: str
    client_share_due: str = ""
    server_share_due: str = ""
    completed: bool = False


@dataclass(frozen=True)
class ServerShare:
    """The serialized aggregated shares one server sent for one experiment."""

    exp_id: str
    server_id: str
    shares: bytes = b""


class ShareStore:
    """SQLite-backed tables of experiments and server shares, safe to share between threads."""

    def __init__(self, path: str | os.PathLike = ":memory:") -> None:
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
            with self._conn:
                self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"cannot set up database: {exc}") from exc

    def __enter__(self) -> ShareStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise StoreError(str(exc)) from exc

    def insert_server_share(self, exp_id: str, server_id: str, shares: bytes) -> None:
        """Record a server's shares; a second record for the same pair is an error."""
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO server_shares (exp_id, server_id, shares) VALUES (?, ?, ?)",
                (exp_id, server_id, bytes(shares)),
            )

    def get_shares_per_server(self, exp_id: str, server_id: str) -> list[ServerShare]:
        """Return the records of one server for one experiment."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT exp_id, server_id, shares FROM server_shares "
                "WHERE exp_id = ? AND server_id = ? ORDER BY rowid",
                (exp_id, server_id),
            ).fetchall()
        return [ServerShare(e, s, bytes(b or b"")) for e, s, b in rows]

    def get_shares_per_experiment(self, exp_id: str) -> list[ServerShare]:
        """Return every server's record for an experiment."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT exp_id, server_id, shares FROM server_shares "
                "WHERE exp_id = ? ORDER BY rowid",
                (exp_id,),
            ).fetchall()
        return [ServerShare(e, s, bytes(b or b"")) for e, s, b in rows]

    def count_shares_per_experiment(self, exp_id: str) -> int:
        """Return how many server records an experiment has."""
        with self._connection() as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM server_shares WHERE exp_id = ?", (exp_id,)
            ).fetchone()
        return int(count)

    def insert_experiment(self, exp_id: str, client_share_due: str,
                          server_share_due: str) -> None:
        """Record a new, not yet completed experiment."""
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO experiments (exp_id, client_share_due, server_share_due, completed) "
                "VALUES (?, ?, ?, 0)",
                (exp_id, client_share_due, server_share_due),
            )

    def get_experiment(self, exp_id: str) -> Experiment | None:
        """Return the experiment, or None if there is no such record."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT exp_id, client_share_due, server_share_due, completed "
                "FROM experiments WHERE exp_id = ?",
                (exp_id,),
            ).fetchone()
        if row is None:
            return None
        return Experiment(row[0], row[1], row[2], bool(row[3]))

    def get_all_experiments(self) -> list[Experiment]:
        """Return every experiment that is not completed yet."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT exp_id, client_share_due, server_share_due, completed "
                "FROM experiments WHERE completed = 0 ORDER BY rowid"
            ).fetchall()
        return [Experiment(r[0], r[1], r[2], bool(r[3])) for r in rows]

    def update_completed_experiment(self, exp_id: str) -> None:
        """Mark an experiment as completed."""
        with self._connection() as conn:
            conn.execute("UPDATE experiments SET completed = 1 WHERE exp_id = ?", (exp_id,))

    def delete_experiment(self, exp_id: str) -> None:
        """Remove an experiment record."""
        with self._connection() as conn:
            conn.execute("DELETE FROM experiments WHERE exp_id = ?", (exp_id,))

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()


def _default_path(name: str) -> Path:
    return Path(f"{name}.db")