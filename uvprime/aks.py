"""
AKS primality proof (version 6 of the paper) for native words.

Slow and deterministic. Not part of the default cascade.

The witness check (X + a)^n == X^(n mod r) + a in Z_n[X] / (X^r - 1) needs
products of length-r polynomials, which are circular convolutions:

1. Small coefficients: when r * (n-1)^2 fits a signed 64-bit integer the
   convolution runs in NumPy int64 with a single reduction at the end.
2. Otherwise Kronecker substitution: each polynomial is packed into one
   Python int with wide enough slots, multiplied once, and unpacked.
"""
import logging
import math

import numpy as np

from .errors import check_word
from .util import is_perfect_power

logger = logging.getLogger(__name__)

_INT64_MAX = (1 << 63) - 1


def order(r: int, n: int, limit: int) -> int:
    """Multiplicative order of n mod r, or limit + 1 if it exceeds limit."""
    t = 1
    for j in range(1, limit + 1):
        t = (t * n) % r
        if t == 1:
            return j
    return limit + 1


def _fits_int64(r: int, n: int) -> bool:
    return r * (n - 1) * (n - 1) <= _INT64_MAX


def _poly_mulmod_numpy(px: np.ndarray, py: np.ndarray, r: int, n: int) -> np.ndarray:
    full = np.convolve(px, py)
    res = full[:r].copy()
    res[:r - 1] += full[r:]
    return res % n


def _pack(coeffs, width: int) -> int:
    value = 0
    for c in reversed(coeffs):
        value = (value << width) | int(c)
    return value


def _poly_mulmod_kronecker(px: list[int], py: list[int], r: int, n: int) -> list[int]:
    width = (r * (n - 1) * (n - 1)).bit_length() + 1
    mask = (1 << width) - 1
    if px is py:
        x = _pack(px, width)
        prod = x * x
    else:
        prod = _pack(px, width) * _pack(py, width)
    res = [0] * r
    for i in range(2 * r - 1):
        c = prod & mask
        prod >>= width
        if c:
            k = i if i < r else i - r
            res[k] += c
    return [c % n for c in res]


def poly_mod_mul(px, py, r: int, n: int):
    """px * py mod (X^r - 1, n)."""
    if isinstance(px, np.ndarray):
        return _poly_mulmod_numpy(px, py, r, n)
    return _poly_mulmod_kronecker(px, py, r, n)


def poly_mod_sqr(px, r: int, n: int):
    """px^2 mod (X^r - 1, n)."""
    if isinstance(px, np.ndarray):
        return _poly_mulmod_numpy(px, px, r, n)
    return _poly_mulmod_kronecker(px, px, r, n)


def poly_mod_pow(pn, power: int, r: int, n: int):
    """pn^power mod (X^r - 1, n) by square-and-multiply."""
    if isinstance(pn, np.ndarray):
        res = np.zeros(r, dtype=np.int64)
    else:
        res = [0] * r
    res[0] = 1 % n
    while power:
        if power & 1:
            res = poly_mod_mul(res, pn, r, n)
        power >>= 1
        if power:
            pn = poly_mod_sqr(pn, r, n)
    return res


def witness_holds(a: int, n: int, r: int) -> bool:
    """Check (X + a)^n == X^(n mod r) + a mod (X^r - 1, n)."""
    a %= n
    if _fits_int64(r, n):
        pn = np.zeros(r, dtype=np.int64)
    else:
        pn = [0] * r
    pn[0] = a
    pn[1] = 1
    res = poly_mod_pow(pn, n, r, n)
    res = [int(c) for c in res]
    res[n % r] = (res[n % r] - 1) % n
    res[0] = (res[0] - a) % n
    return not any(res)


def is_prime_aks(n: int) -> bool:
    """
    Prove or disprove primality of n with AKS.

    Returns:
        True when n is prime, False otherwise
    """
    check_word(n)
    if n < 2:
        return False
    if n == 2:
        return True
    if is_perfect_power(n):
        return False

    sqrtn = math.isqrt(n)
    log2n = math.log2(n)
    limit = int(math.floor(log2n * log2n))
    logger.debug("aks n=%d order limit %d", n, limit)

    r = 2
    while r < n:
        if n % r == 0:
            return False
        # No divisor up to sqrt(n): prime
        if r > sqrtn:
            return True
        if order(r, n, limit) > limit:
            break
        r += 1
    if r >= n:
        return True

    rlimit = int(math.floor(math.sqrt(r - 1) * log2n))
    logger.debug("aks n=%d r=%d witnesses 1..%d", n, r, rlimit)
    for a in range(1, rlimit + 1):
        if not witness_holds(a, n, r):
            logger.debug("aks n=%d fails witness %d", n, a)
            return False
    return True
