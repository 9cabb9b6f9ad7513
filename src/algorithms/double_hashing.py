import hashlib
from typing import Callable, Iterator, Tuple

import mmh3
import numpy as np

# Maps an item to two independent unsigned 64-bit integers
Hasher = Callable[[bytes], Tuple[int, int]]

_MAX_VECTOR_MODULUS = 1 << 63


def murmur3_128(item: bytes) -> Tuple[int, int]:
    """MurmurHash3 x64 128-bit digest (seed 0) as two unsigned 64-bit halves"""
    return mmh3.hash64(item, seed=0, x64arch=True, signed=False)


def blake2b_128(item: bytes) -> Tuple[int, int]:
    """BLAKE2b 16-byte digest split into two little-endian 64-bit halves"""
    digest = hashlib.blake2b(item, digest_size=16).digest()
    return (int.from_bytes(digest[:8], 'little'),
            int.from_bytes(digest[8:], 'little'))


def probe_positions(a: int, b: int, k: int, m: int) -> Iterator[int]:
    """Derive k bit positions in [0, m) from one digest (a, b)

    Kirsch-Mitzenmacher double hashing: position i is (a + i*b) mod m.
    a and b are reduced modulo m first, and the sequence is walked by
    repeated addition so no intermediate exceeds 2*m.
    """
    a, b = a % m, b % m
    pos = a
    for _ in range(k):
        yield pos
        pos = (pos + b) % m


def probe_matrix(digests, k: int, m: int) -> np.ndarray:
    """Vectorized probe_positions over many digests
    Args:
    digests: (N, 2) array-like of unsigned 64-bit digest halves
    k: Number of positions per digest
    m: Bit-array size, at most 2**63 so uint64 sums cannot wrap
    Returns:
    (N, k) uint64 array; row j holds the positions of digest j
    """
    if m > _MAX_VECTOR_MODULUS:
        raise ValueError(f"bit-array size {m} too large for vectorized probing")
    digests = np.asarray(digests, dtype=np.uint64).reshape(-1, 2)
    modulus = np.uint64(m)
    pos = digests[:, 0] % modulus
    step = digests[:, 1] % modulus

    positions = np.empty((len(digests), k), dtype=np.uint64)
    for i in range(k):
        positions[:, i] = pos
        pos = (pos + step) % modulus
    return positions
