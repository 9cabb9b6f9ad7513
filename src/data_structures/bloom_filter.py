import logging
from typing import Iterable, List, Optional, Tuple, Union

from algorithms.double_hashing import Hasher, murmur3_128, probe_matrix, probe_positions
from algorithms.parameter_estimator import (
    FilterParameters,
    estimate,
    false_positive_rate,
    validate_parameters,
)
from data_structures.bit_array import BitArray
from data_structures.rw_lock import ReadWriteLock

logger = logging.getLogger(__name__)

Item = Union[bytes, bytearray, memoryview, str]

_U64 = (1 << 64) - 1


def _as_bytes(item: Item) -> bytes:
    if isinstance(item, bytes):
        return item
    if isinstance(item, str):
        return item.encode()
    if isinstance(item, (bytearray, memoryview)):
        return bytes(item)
    raise TypeError(f"Bloom filter items must be bytes or str, not {type(item).__name__}")


class BloomFilter:
    """A space-efficient probabilistic data structure for membership testing.

    A Bloom filter answers "is this item possibly in the set?". It never
    reports a false negative: once an item is added, ``contains`` returns
    True for it for the life of the filter. It may report a false positive
    for an item that was never added, at a rate set by its parameters.

    Each item is hashed once into a 128-bit digest ``(a, b)`` and ``k`` bit
    positions are derived from it by double hashing, ``(a + i*b) mod m``.
    The bits live in a :class:`BitArray` backed by numpy and viewable as an
    Arrow boolean array.

    The filter is safe to share between threads. ``add`` takes a reader/writer
    lock exclusively and ``contains`` takes it shared. Callers doing bulk work
    can hold the lock themselves with ``write_locked()``/``read_locked()`` and
    call the ``*_unlocked`` primitives, or use ``add_many``/``contains_many``.

    Attributes:
        size (int): Number of bits ``m`` in the bit array.
        hash_count (int): Number of probe positions ``k`` per item.
        hasher (Callable[[bytes], tuple[int, int]]): Digest function mapping an
            item to two unsigned 64-bit integers. Defaults to MurmurHash3 x64-128.

    Example:
        >>> bf = BloomFilter.with_estimate(1000, 0.03)
        >>> bf.contains(b"foo")
        False
        >>> bf.add(b"foo")
        >>> b"foo" in bf
        True
        >>> with bf.write_locked():
        ...     for word in (b"bar", b"baz"):
        ...         bf.add_unlocked(word)

    """
    def __init__(self, m: int, k: int, *, hasher: Optional[Hasher] = None):
        self._params = validate_parameters(m, k)
        self._bits = BitArray(self._params.m)
        self._hasher = hasher if hasher is not None else murmur3_128
        self._lock = ReadWriteLock()
        logger.debug(
            "created Bloom filter m=%d k=%d hasher=%s",
            self._params.m, self._params.k, getattr(self._hasher, '__name__', repr(self._hasher)),
        )

    @classmethod
    def with_estimate(cls, n: int, p: float, *, hasher: Optional[Hasher] = None) -> 'BloomFilter':
        """Create a filter sized for about n items at false positive rate p"""
        m, k = estimate(n, p)
        return cls(m, k, hasher=hasher)

    @property
    def size(self) -> int:
        return self._params.m

    @property
    def hash_count(self) -> int:
        return self._params.k

    @property
    def parameters(self) -> FilterParameters:
        return self._params

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    def _digest(self, item: Item) -> Tuple[int, int]:
        a, b = self._hasher(_as_bytes(item))
        return a & _U64, b & _U64

    def _probes(self, item: Item):
        a, b = self._digest(item)
        return probe_positions(a, b, self._params.k, self._params.m)

    def read_locked(self):
        """Context manager holding the filter lock in shared mode"""
        return self._lock.read_locked()

    def write_locked(self):
        """Context manager holding the filter lock in exclusive mode"""
        return self._lock.write_locked()

    def add(self, item: Item):
        """Insert item into filter"""
        probes = list(self._probes(item))
        with self._lock.write_locked():
            for pos in probes:
                self._bits.mark(pos)

    def add_unlocked(self, item: Item):
        """add() without locking; the caller must hold write_locked()"""
        for pos in self._probes(item):
            self._bits.mark(pos)

    def contains(self, item: Item) -> bool:
        """Check item membership; True may be a false positive"""
        probes = list(self._probes(item))
        with self._lock.read_locked():
            return self._all_set(probes)

    def contains_unlocked(self, item: Item) -> bool:
        """contains() without locking; the caller must hold a lock"""
        return self._all_set(self._probes(item))

    def _all_set(self, positions: Iterable[int]) -> bool:
        for pos in positions:
            if not self._bits.test(pos):
                return False
        return True

    def __contains__(self, item: Item) -> bool:
        return self.contains(item)

    def add_many(self, items: Iterable[Item]):
        """Insert every item under a single exclusive lock acquisition"""
        positions = self._probe_matrix(items)
        if positions is None:
            return
        with self._lock.write_locked():
            self._bits.mark_many(positions)

    def contains_many(self, items: Iterable[Item]) -> List[bool]:
        """Membership of every item, tested under one shared lock acquisition"""
        positions = self._probe_matrix(items)
        if positions is None:
            return []
        with self._lock.read_locked():
            hits = self._bits.test_many(positions)
        return hits.all(axis=1).tolist()

    def _probe_matrix(self, items: Iterable[Item]):
        digests = [self._digest(item) for item in items]
        if not digests:
            return None
        return probe_matrix(digests, self._params.k, self._params.m)

    def bit_count(self) -> int:
        """Number of bits currently set"""
        with self._lock.read_locked():
            return self._bits.count()

    def fill_ratio(self) -> float:
        """Fraction of the bit array that is set"""
        return self.bit_count() / self._params.m

    def false_positive_rate(self, n: int) -> float:
        """Expected false positive rate after n distinct insertions"""
        return false_positive_rate(self._params.m, self._params.k, n)

    def __repr__(self) -> str:
        return f"BloomFilter(m={self._params.m}, k={self._params.k})"
