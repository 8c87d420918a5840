"""Time proof generation and verification for a set of parameters."""

from __future__ import annotations

import argparse
import sys
import time

from .ligero import LigeroZK
from .proof import proof_size
from .verify import VerificationError, verify_proof

__all__ = ["main"]


def _duration(seconds: float) -> str:
    return f"{seconds:.6f}s"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smcbox-bench", description="Benchmark proof generation and verification."
    )
    parser.add_argument("--n-secret", type=int, default=100000, help="number of secrets")
    parser.add_argument("--m", type=int, default=100, help="rows of the witness layout")
    parser.add_argument("--n-server", type=int, default=7, help="number of servers")
    parser.add_argument("--t", type=int, default=2, help="corruption threshold")
    parser.add_argument("--q", type=int, default=41543, help="prime modulus")
    parser.add_argument("--n-open", type=int, default=240, help="number of opened columns")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Generate a proof for all-ones input, verify it for every party, report timings."""
    args = _parser().parse_args(argv)

    try:
        zk = LigeroZK(args.n_secret, args.m, args.n_server, args.t, args.q, args.n_open)
        start = time.perf_counter()
        proofs = zk.generate_proof([1] * args.n_secret)
        elapsed = time.perf_counter() - start
    except ValueError as exc:
        print(f"err: {exc}", file=sys.stderr)
        return 1

    proof_bytes, share_bytes = proof_size(proofs[0])
    print(f"share size: {share_bytes}, proof size: {proof_bytes}")
    print(f"proof generation end: {_duration(elapsed)}")

    for position, proof in enumerate(proofs):
        party = proof.shares.party_index
        start = time.perf_counter()
        try:
            verify_proof(zk, proof)
        except VerificationError as exc:
            print(f"verification failed for party {party}")
            print(exc, file=sys.stderr)
            return 1
        if position == 0:
            print(f"proof verification end: {_duration(time.perf_counter() - start)}")
        print(f"verification succeed for party {party}")
    return 0


if __name__ == "__main__":
    sys.exit(main())