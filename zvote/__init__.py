"""Cryptographic primitives for zero-knowledge voting."""

__version__ = "0.1.0"