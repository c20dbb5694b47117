"""
Fixed-size bit vector used as the universal solution encoding.

The vector is backed by a numpy boolean array. Copies come in two explicit
flavours: clone() allocates independent storage, view() shares the backing
buffer with the original.
"""

from typing import Iterable, List, Optional
import numpy as np


class BitVector:
    """
    Ordered, zero-indexed sequence of booleans with an immutable size.

    Attributes:
        bits: Backing numpy boolean array (shared between views)
    """

    __slots__ = ("bits",)

    def __init__(self, size: int, buffer: Optional[np.ndarray] = None):
        """
        Create an all-zero bit vector, or wrap an existing buffer.

        Args:
            size: Number of bits
            buffer: Optional boolean array to wrap (not copied)

        Raises:
            ValueError: If size is negative or the buffer size disagrees
        """
        if size < 0:
            raise ValueError(f"Bit vector size must be non-negative, got {size}")

        if buffer is None:
            self.bits = np.zeros(size, dtype=bool)
        else:
            if buffer.shape != (size,):
                raise ValueError(
                    f"Buffer of shape {buffer.shape} does not match size {size}"
                )
            self.bits = buffer

    @classmethod
    def from_bits(cls, values: Iterable) -> "BitVector":
        """Build a vector from any iterable of truthy/falsy values."""
        array = np.array([bool(v) for v in values], dtype=bool)
        return cls(len(array), array)

    @classmethod
    def from_string(cls, text: str) -> "BitVector":
        """
        Build a vector from a literal bit string such as "0110".

        Raises:
            ValueError: If the string contains characters other than 0 and 1
        """
        text = text.strip()
        if any(ch not in "01" for ch in text):
            raise ValueError(f"Invalid bit string: {text!r}")
        return cls.from_bits(ch == "1" for ch in text)

    @classmethod
    def from_indices(cls, size: int, indices: Iterable[int]) -> "BitVector":
        """Build a vector of the given size with the listed positions set."""
        vector = cls(size)
        for i in indices:
            vector.set(i, True)
        return vector

    @property
    def size(self) -> int:
        return self.bits.shape[0]

    def __len__(self) -> int:
        return self.size

    def get(self, index: int) -> bool:
        return bool(self.bits[index])

    def set(self, index: int, value: bool = True) -> None:
        self.bits[index] = value

    def flip(self, index: int) -> None:
        self.bits[index] = not self.bits[index]

    def all(self) -> bool:
        """True iff every bit is set (vacuously true for size 0)."""
        return bool(self.bits.all())

    def count(self) -> int:
        """Number of set bits."""
        return int(np.count_nonzero(self.bits))

    def indices(self) -> List[int]:
        """Positions of the set bits, ascending."""
        return [int(i) for i in np.flatnonzero(self.bits)]

    def clone(self) -> "BitVector":
        """Deep copy with independent storage."""
        return BitVector(self.size, self.bits.copy())

    def view(self) -> "BitVector":
        """Copy sharing this vector's storage; writes show through both."""
        return BitVector(self.size, self.bits)

    def shares_storage(self, other: "BitVector") -> bool:
        return np.shares_memory(self.bits, other.bits)

    def to_string(self) -> str:
        """Literal bit string, index 0 first."""
        return "".join("1" if b else "0" for b in self.bits)

    def __iter__(self):
        for b in self.bits:
            yield bool(b)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BitVector):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self.bits, other.bits))

    def __repr__(self) -> str:
        return f"BitVector('{self.to_string()}')"
