"""
Small-prime services consumed by the core.

- get_small_primes(): read-only table of every prime below SMALL_PRIMES_LIMIT,
  built once with a NumPy sieve of Eratosthenes.
- is_small_prime(n): exact primality oracle for n inside that table.
- primes_from(lo, hi): ascending prime generator, restartable per call.
  Ranges past the table are sieved segment by segment and thrown away.
- next_prime(n): smallest prime strictly greater than n.
- NEXT_WHEEL30 / WHEEL_ADVANCE30: mod-30 wheel tables for trial division.
"""
import bisect
import math
from functools import lru_cache

import numpy as np

SMALL_PRIMES_LIMIT = 1 << 16
_SEGMENT_SIZE = 1 << 16

# Residues mod 30 coprime to 30: the spokes of the wheel
_WHEEL30_SPOKES = (1, 7, 11, 13, 17, 19, 23, 29)


def _build_wheel30() -> tuple[tuple[int, ...], tuple[int, ...]]:
    """nextwheel30[m] is the next spoke after m, wheeladvance30[m] the distance to it."""
    nxt = []
    adv = []
    for m in range(30):
        step = 1
        while (m + step) % 30 not in _WHEEL30_SPOKES:
            step += 1
        nxt.append((m + step) % 30)
        adv.append(step)
    return tuple(nxt), tuple(adv)


NEXT_WHEEL30, WHEEL_ADVANCE30 = _build_wheel30()


def _sieve_flags(limit: int) -> np.ndarray:
    """Boolean primality flags for 0..limit."""
    sieve = np.ones(limit + 1, dtype=np.bool_)
    sieve[:2] = False
    sieve[4::2] = False
    for i in range(3, math.isqrt(limit) + 1, 2):
        if sieve[i]:
            sieve[i * i::2 * i] = False
    return sieve


@lru_cache(maxsize=1)
def _small_prime_flags() -> np.ndarray:
    flags = _sieve_flags(SMALL_PRIMES_LIMIT)
    flags.setflags(write=False)
    return flags


@lru_cache(maxsize=1)
def get_small_primes() -> tuple[int, ...]:
    """Every prime below SMALL_PRIMES_LIMIT (memoized, read-only)."""
    return tuple(int(p) for p in np.flatnonzero(_small_prime_flags()))


def is_small_prime(n: int) -> bool:
    """Exact primality for 0 <= n <= SMALL_PRIMES_LIMIT."""
    if n > SMALL_PRIMES_LIMIT:
        raise ValueError(f"{n} is beyond the small prime table ({SMALL_PRIMES_LIMIT})")
    return bool(_small_prime_flags()[n])


def _segment_primes(lo: int, hi: int) -> np.ndarray:
    """Primes in [lo, hi] for lo > SMALL_PRIMES_LIMIT, sieved by the table."""
    size = hi - lo + 1
    flags = np.ones(size, dtype=np.bool_)
    root = math.isqrt(hi)
    for p in get_small_primes():
        if p > root:
            break
        start = max(p * p, ((lo + p - 1) // p) * p)
        flags[start - lo::p] = False
    return np.flatnonzero(flags) + lo


def primes_from(lo: int, hi: int):
    """
    Yield the primes p with lo <= p <= hi in ascending order.

    hi must stay below SMALL_PRIMES_LIMIT^2 so the table can sieve it.
    """
    if hi < 2 or lo > hi:
        return
    lo = max(lo, 2)
    small = get_small_primes()
    if lo <= SMALL_PRIMES_LIMIT:
        start = bisect.bisect_left(small, lo)
        for p in small[start:]:
            if p > hi:
                return
            yield p
        lo = SMALL_PRIMES_LIMIT + 1
    if hi >= SMALL_PRIMES_LIMIT * SMALL_PRIMES_LIMIT:
        raise ValueError(f"prime range upper bound {hi} is too large to sieve")
    while lo <= hi:
        seg_hi = min(hi, lo + _SEGMENT_SIZE - 1)
        for p in _segment_primes(lo, seg_hi):
            yield int(p)
        lo = seg_hi + 1


def next_prime(n: int) -> int:
    """Smallest prime strictly greater than n."""
    small = get_small_primes()
    if n < small[-1]:
        return small[bisect.bisect_right(small, n)]
    # Past the table: walk the wheel and ask the primality cascade
    from .primality import is_probable_prime
    m = (n + 1) % 30
    candidate = n + 1
    if m not in _WHEEL30_SPOKES:
        candidate += WHEEL_ADVANCE30[m]
        m = NEXT_WHEEL30[m]
    while not is_probable_prime(candidate):
        candidate += WHEEL_ADVANCE30[m]
        m = NEXT_WHEEL30[m]
    return candidate
