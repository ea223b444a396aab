"""
JIT-compiled kernels for the hot trial-division loop.

Numba is optional. When it is installed the small-prime table walk of
trial_division runs compiled (the loop is pure integer arithmetic on int64,
so every input must be below JIT_INPUT_LIMIT). Without Numba the pure
Python walk in uvprime.trial is used and no kernel is defined here.

OPTIMIZATION TARGETS:
1. Trial division over the small-prime table: Numba JIT
2. Table packed once as a contiguous int64 NumPy array
"""
import math
from functools import lru_cache

import numpy as np

from . import config

try:
    from numba import njit
    NUMBA_AVAILABLE: bool = True
except ImportError:
    NUMBA_AVAILABLE: bool = False

# int64 kernel: keep n and every intermediate square well inside the sign bit
JIT_INPUT_LIMIT = 1 << 62


def is_jit_available() -> bool:
    """True when Numba is installed and the kernels are not switched off."""
    return NUMBA_AVAILABLE and config.jit_enabled()


@lru_cache(maxsize=4)
def packed_primes(primes: tuple[int, ...]) -> np.ndarray:
    """Contiguous int64 copy of a prime table, built once per table."""
    arr = np.ascontiguousarray(primes, dtype=np.int64)
    arr.setflags(write=False)
    return arr


if NUMBA_AVAILABLE:
    @njit
    def _trial_divide_table_jit(n, primes, limit):
        """
        Divide n by each table prime while the prime stays within limit.

        The limit shrinks to isqrt(n) after every factor found, never grows.

        Args:
            n: Number to strip (int64, n < 2^62)
            primes: Ascending int64 NumPy array of primes
            limit: Initial trial bound

        Returns:
            (list of factors found, remaining cofactor, final limit)
        """
        factors = []
        for p in primes:
            if p > limit:
                break
            if n % p == 0:
                while n % p == 0:
                    factors.append(p)
                    n //= p
                root = np.int64(math.sqrt(n))
                while root * root > n:
                    root -= 1
                while (root + 1) * (root + 1) <= n:
                    root += 1
                if root < limit:
                    limit = root
        return factors, n, limit


def trial_divide_table(n: int, primes: tuple[int, ...], limit: int) -> tuple[list[int], int, int]:
    """
    Run the compiled table walk and convert the results back to Python ints.

    Only call when is_jit_available() and n < JIT_INPUT_LIMIT.
    """
    found, rem, lim = _trial_divide_table_jit(
        np.int64(n), packed_primes(primes), np.int64(min(limit, JIT_INPUT_LIMIT))
    )
    return [int(f) for f in found], int(rem), int(lim)
