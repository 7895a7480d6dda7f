"""Common interface for elliptic-curve group elements."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod


class Point(ABC):
    """Affine elliptic-curve point whose arithmetic updates the receiver."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @abstractmethod
    def new(self) -> Point:
        """Return a new point on the same curve (the identity)."""

    @abstractmethod
    def order(self) -> int:
        """Return the order of the curve group."""

    @abstractmethod
    def add(self, a: Point, b: Point) -> None:
        """Set the receiver to ``a + b``."""

    def safe_add(self, a: Point, b: Point) -> None:
        """Set the receiver to ``a + b`` holding the receiver's lock."""
        with self._lock:
            self.add(a, b)

    @abstractmethod
    def scalar_mult(self, a: Point, scalar: int) -> None:
        """Set the receiver to ``scalar * a``."""

    @abstractmethod
    def scalar_base_mult(self, scalar: int) -> None:
        """Set the receiver to ``scalar * G``."""

    @abstractmethod
    def marshal(self) -> bytes:
        """Serialize the point to bytes."""

    @abstractmethod
    def unmarshal(self, buf: bytes) -> None:
        """Load the point from bytes; raise ``ValueError`` if invalid."""

    @abstractmethod
    def marshal_json(self) -> bytes:
        """Serialize the point to JSON."""

    @abstractmethod
    def unmarshal_json(self, buf: bytes) -> None:
        """Load the point from JSON."""

    @abstractmethod
    def marshal_cbor(self) -> bytes:
        """Serialize the point to CBOR."""

    @abstractmethod
    def unmarshal_cbor(self, buf: bytes) -> None:
        """Load the point from CBOR."""

    @abstractmethod
    def equal(self, a: Point) -> bool:
        """Return whether ``a`` is the same point."""

    @abstractmethod
    def neg(self, a: Point) -> None:
        """Set the receiver to ``-a``."""

    @abstractmethod
    def set_zero(self) -> None:
        """Set the receiver to the identity element."""

    @abstractmethod
    def set(self, a: Point) -> None:
        """Copy ``a`` into the receiver."""

    @abstractmethod
    def set_generator(self) -> None:
        """Set the receiver to the group generator."""

    @abstractmethod
    def point(self) -> tuple[int, int]:
        """Return the ``(x, y)`` coordinates."""

    @abstractmethod
    def set_point(self, x: int, y: int) -> Point:
        """Return a new point with the given coordinates."""

    @abstractmethod
    def type(self) -> str:
        """Return the curve type identifier."""

    @abstractmethod
    def __str__(self) -> str:
        """Return a printable form of the point."""