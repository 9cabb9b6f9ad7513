import logging
import math
import numbers
import operator
from typing import NamedTuple

from algorithms.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class FilterParameters(NamedTuple):
    """Bit-array size ``m`` and hash-function count ``k`` of a Bloom filter"""
    m: int
    k: int


def _as_integer(name: str, value, minimum: int = 1) -> int:
    # numpy integers count, bools do not
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        raise InvalidArgumentError(name, value)
    value = operator.index(value)
    if value < minimum:
        raise InvalidArgumentError(name, value)
    return value


def validate_parameters(m: int, k: int) -> FilterParameters:
    """Check that m and k are positive integers
    Raises:
    InvalidArgumentError: naming the first parameter that is out of range
    """
    return FilterParameters(_as_integer("m", m), _as_integer("k", k))


def estimate(n: int, p: float) -> FilterParameters:
    """Size a filter for about n items at false positive probability p
    Args:
    n: Expected number of items (> 0)
    p: Target false positive probability, 0 < p < 1
    Returns:
    FilterParameters(m, k), both rounded up
    """
    n = _as_integer("n", n)
    if not isinstance(p, numbers.Real) or isinstance(p, bool):
        raise InvalidArgumentError("p", p)
    p = float(p)
    # also rejects NaN
    if not 0 < p < 1:
        raise InvalidArgumentError("p", p)

    # -log2(p) stays finite for subnormal p, log2(1/p) does not
    m = math.ceil(math.log2(math.e) * -math.log2(p) * n)
    k = math.ceil(math.log(2) * m / n)
    logger.debug("estimated m=%d k=%d for n=%d p=%g", m, k, n, p)
    return FilterParameters(m, k)


def false_positive_rate(m: int, k: int, n: int) -> float:
    """Expected false positive probability after n insertions"""
    m, k = validate_parameters(m, k)
    n = _as_integer("n", n, minimum=0)
    if n == 0:
        return 0.0
    return (1 - math.exp(-k * n / m)) ** k
