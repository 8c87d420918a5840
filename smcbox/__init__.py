"""Secret-shared aggregation of client bits, with zero-knowledge proofs of well-formed inputs, a client and an output party."""

__version__ = "0.1.0"

__all__ = ["__version__"]