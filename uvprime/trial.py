"""
Trial division with a small-prime table and a mod-30 wheel.

Divides out 2, 3, 5 and 7 directly, walks the table of the primes below 2000
(JIT-compiled when Numba is present), then continues on the mod-30 wheel.
The trial bound starts at min(limit, isqrt(n)) and is recomputed from the
shrinking cofactor after every factor found, so it only ever decreases.
"""
import math

from . import jit_kernels
from .errors import check_word
from .sieve import NEXT_WHEEL30, WHEEL_ADVANCE30, get_small_primes

_TABLE_LIMIT = 2000
# Table primes after 7: 11 .. 1999
_TRIAL_PRIMES: tuple[int, ...] = tuple(p for p in get_small_primes() if 7 < p < _TABLE_LIMIT)


def _walk_table(n: int, limit: int, factors: list[int]) -> tuple[int, int]:
    for p in _TRIAL_PRIMES:
        if p > limit:
            break
        if n % p == 0:
            while n % p == 0:
                factors.append(p)
                n //= p
            limit = min(limit, math.isqrt(n))
    return n, limit


def trial_division(n: int, limit: int = 0) -> tuple[list[int], int]:
    """
    Strip every prime factor <= limit from n.

    Args:
        n: Number to factor
        limit: Largest trial divisor, 0 for no limit (up to isqrt(n))

    Returns:
        (prime factors found in ascending order, remaining cofactor). The
        cofactor is 1 when n was factored completely. If the search ran past
        the square root of what was left, that prime leftover is moved into
        the factor list. n < 2 or a limit below 2 (other than 0) returns
        ([], n) untouched.
    """
    check_word(n)
    factors: list[int] = []
    if n < 2 or (limit and limit < 2):
        return factors, n
    maxtrial = limit if limit else n

    while (n & 1) == 0:
        factors.append(2)
        n >>= 1
    for f in (3, 5, 7):
        if f > maxtrial:
            break
        while n % f == 0:
            factors.append(f)
            n //= f

    bound = min(maxtrial, math.isqrt(n))
    if n > 1 and bound >= 11:
        if jit_kernels.is_jit_available() and n < jit_kernels.JIT_INPUT_LIMIT:
            found, n, bound = jit_kernels.trial_divide_table(n, _TRIAL_PRIMES, bound)
            factors.extend(found)
        else:
            n, bound = _walk_table(n, bound, factors)

        # Past the table: continue on the mod-30 wheel
        f = _TABLE_LIMIT + 3
        m = f % 30
        while f <= bound:
            if n % f == 0:
                while n % f == 0:
                    factors.append(f)
                    n //= f
                bound = min(bound, math.isqrt(n))
            f += WHEEL_ADVANCE30[m]
            m = NEXT_WHEEL30[m]

    # Nothing <= sqrt(n) divides what is left, so it is prime
    if n > 1 and (limit == 0 or math.isqrt(n) <= bound):
        factors.append(n)
        n = 1
    return factors, n


def trial_factor(n: int, maxtrial: int = 0) -> list[int]:
    """
    Trial factor n, returning the factors found followed by any cofactor.

    n < 2 or a maxtrial below 2 (other than 0) returns [n] (not attempted).
    """
    if n < 2 or (maxtrial and maxtrial < 2):
        check_word(n)
        return [n]
    factors, rem = trial_division(n, maxtrial)
    if rem != 1:
        factors.append(rem)
    return factors
