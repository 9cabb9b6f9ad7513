import math

import numpy as np
import pytest
from hypothesis import given, strategies as st

from algorithms.errors import InvalidArgumentError
from algorithms.parameter_estimator import (
    FilterParameters,
    estimate,
    false_positive_rate,
    validate_parameters,
)


class TestEstimate:
    def test_known_sizing(self):
        assert estimate(1000, 0.03) == FilterParameters(m=7299, k=6)

    def test_unpacks_as_pair(self):
        m, k = estimate(1000, 0.03)
        assert (m, k) == (7299, 6)

    @given(st.integers(1, 10**6), st.floats(0.0001, 0.5))
    def test_sizing_rounds_up(self, n, p):
        m, k = estimate(n, p)
        assert m > 0 and k > 0
        # never smaller than the optimal size
        assert m >= -n * math.log(p) / math.log(2) ** 2 - 1e-6 * n
        assert k == math.ceil(math.log(2) * m / n)

    @pytest.mark.parametrize("n", [0, -1, 2.5, True, None])
    def test_invalid_n(self, n):
        with pytest.raises(InvalidArgumentError, match=r"invalid argument n"):
            estimate(n, 0.3)

    @pytest.mark.parametrize("p", [-1, 0, 1, 2, float("nan")])
    def test_invalid_p(self, p):
        with pytest.raises(InvalidArgumentError, match=r"invalid argument p"):
            estimate(1000000, p)

    def test_accepts_numpy_scalars(self):
        assert estimate(np.int64(1000), np.float64(0.03)) == (7299, 6)
        m, k = estimate(np.uint32(1000), 0.03)
        assert type(m) is int and type(k) is int

    @pytest.mark.parametrize("p", [5e-324, 1e-310, 2.2250738585072014e-308])
    def test_subnormal_p_stays_finite(self, p):
        m, k = estimate(1, p)
        assert 1400 < m < 1600
        assert k == math.ceil(math.log(2) * m)

    @pytest.mark.parametrize("p", ["0.1", None, b"0.1", 1j, True])
    def test_non_numeric_p(self, p):
        with pytest.raises(InvalidArgumentError, match=r"invalid argument p"):
            estimate(1000, p)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError) as info:
            estimate(0, 0.1)
        assert info.value.name == "n"
        assert info.value.value == 0


class TestValidateParameters:
    def test_valid(self):
        assert validate_parameters(10, 1) == (10, 1)

    @pytest.mark.parametrize("m, k, name", [
        (0, 5, "m"),
        (-3, 5, "m"),
        (1000000, 0, "k"),
        (1000000, -1, "k"),
        (10.0, 5, "m"),
        (10, False, "k"),
        (np.float64(10), 5, "m"),
        (10, np.bool_(True), "k"),
    ])
    def test_invalid(self, m, k, name):
        with pytest.raises(InvalidArgumentError, match=rf"invalid argument {name}"):
            validate_parameters(m, k)

    def test_numpy_integers_become_ints(self):
        params = validate_parameters(np.int64(1024), np.uint64(3))
        assert params == (1024, 3)
        assert type(params.m) is int and type(params.k) is int


class TestFalsePositiveRate:
    def test_empty_filter(self):
        assert false_positive_rate(7299, 6, 0) == 0.0

    def test_near_target_at_capacity(self):
        assert 0.025 < false_positive_rate(7299, 6, 1000) < 0.035

    @given(st.integers(0, 5000))
    def test_grows_with_load(self, n):
        assert false_positive_rate(7299, 6, n) <= false_positive_rate(7299, 6, n + 1)

    def test_invalid(self):
        with pytest.raises(InvalidArgumentError):
            false_positive_rate(7299, 6, -1)
        with pytest.raises(InvalidArgumentError):
            false_positive_rate(0, 6, 10)
