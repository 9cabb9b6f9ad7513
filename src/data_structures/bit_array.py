import numpy as np
import pyarrow as pa
import pyarrow.compute as pc

_BIT_MASKS = np.array([1 << i for i in range(8)], dtype=np.uint8)
_UNIT_SHIFT = np.uint64(3)
_UNIT_MASK = np.uint64(7)


class BitArray:
    """Fixed-size packed bit storage with mark/test primitives.

    Bits are packed eight to a ``uint8`` unit, least significant bit first:
    bit ``i`` lives in unit ``i >> 3`` at position ``i & 7``. That is the
    layout of an Arrow boolean bitmap, so the storage can be exposed as a
    ``pyarrow.BooleanArray`` without copying and counted with Arrow compute
    kernels.

    The storage is allocated once, zeroed, and never resized. Bits are only
    ever set, never cleared.

    Attributes:
        size (int): Number of addressable bits ``m``.
        nbytes (int): Number of 8-bit storage units, ``ceil(m / 8)``.

    Example:
        >>> bits = BitArray(100)
        >>> bits.mark(42)
        >>> bits.test(42)
        True
        >>> bits.test(43)
        False
        >>> bits.count()
        1

    """
    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"bit array size must be positive, got {size}")
        self._size = size
        self._units = np.zeros((size + 7) // 8, dtype=np.uint8)

    @property
    def size(self) -> int:
        return self._size

    @property
    def nbytes(self) -> int:
        return self._units.nbytes

    def __len__(self) -> int:
        return self._size

    def _check(self, i: int):
        if not 0 <= i < self._size:
            raise IndexError(f"bit index {i} out of range [0, {self._size})")

    def _check_many(self, indices) -> np.ndarray:
        idx = np.asarray(indices)
        if idx.size == 0:
            return idx.astype(np.uint64)
        if idx.dtype.kind not in 'iu':
            raise TypeError(f"bit indices must be integers, got {idx.dtype}")
        if (idx.dtype.kind == 'i' and idx.min() < 0) or idx.max() >= self._size:
            raise IndexError(f"bit indices out of range [0, {self._size})")
        return idx.astype(np.uint64, copy=False)

    def mark(self, i: int):
        """Set bit i"""
        self._check(i)
        self._units[i >> 3] |= _BIT_MASKS[i & 7]

    def test(self, i: int) -> bool:
        """Whether bit i is set"""
        self._check(i)
        return bool(self._units[i >> 3] & _BIT_MASKS[i & 7])

    def mark_many(self, indices):
        """Set every bit in an integer array of indices"""
        idx = self._check_many(indices).ravel()
        # .at so repeated units accumulate instead of last-write-wins
        np.bitwise_or.at(self._units, idx >> _UNIT_SHIFT, _BIT_MASKS[idx & _UNIT_MASK])

    def test_many(self, indices) -> np.ndarray:
        """Boolean array, shaped like indices, of which bits are set"""
        idx = self._check_many(indices)
        return (self._units[idx >> _UNIT_SHIFT] & _BIT_MASKS[idx & _UNIT_MASK]) != 0

    def to_arrow(self) -> pa.BooleanArray:
        """Zero-copy Arrow view of the bits; reflects later marks"""
        return pa.Array.from_buffers(
            pa.bool_(), self._size, [None, pa.py_buffer(self._units)]
        )

    def count(self) -> int:
        """Number of set bits"""
        return pc.sum(self.to_arrow()).as_py()
