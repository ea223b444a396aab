"""
Primality cascade for native words: trial sieve, deterministic Miller-Rabin,
then BPSW.

ESCALATION:
1. Tiny n and divisibility by the primes up to 53 (catches ~90% of
   composites for almost nothing).
2. n inside the small-prime table: answered by the sieve, exact.
3. Deterministic Miller-Rabin with published minimal witness sets
   (miller-rabin.appspot.com). Thresholds and bases must not be changed.
4. Above the last threshold: SPRP base 2 plus one Lucas test (BPSW), or the
   seven-base set that is exact below 2^64 when configured with "mr7".

Results are three-valued: COMPOSITE, PROBABLE_PRIME, PRIME.
"""
import logging
from enum import IntEnum

from . import config
from .errors import InvalidBaseError, check_word
from .lucas import (
    LucasStrength,
    is_almost_extra_strong_lucas_pseudoprime,
    is_lucas_pseudoprime,
)
from .mulmod import addmod, mulmod, powmod, sqrmod, submod
from .sieve import SMALL_PRIMES_LIMIT, is_small_prime
from .util import ctz, gcd, is_perfect_square, jacobi

logger = logging.getLogger(__name__)


class Primality(IntEnum):
    COMPOSITE = 0
    PROBABLE_PRIME = 1
    PRIME = 2


_SIEVE_PRIMES = (11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53)

# (exclusive upper bound, witness bases)
_MR_WITNESSES_64: tuple[tuple[int, tuple[int, ...]], ...] = (
    (9080191, (31, 73)),
    (4759123141, (2, 7, 61)),
    (105936894253, (2, 1005905886, 1340600841)),
    (31858317218647, (2, 642735, 553174392, 3046413974)),
    (3071837692357849, (2, 75088, 642735, 203659041, 3613982119)),
)
_MR_WITNESSES_32: tuple[tuple[int, tuple[int, ...]], ...] = (
    (9080191, (31, 73)),
    (1 << 32, (2, 7, 61)),
)
# Exact for every n < 2^64 (Jim Sinclair)
MR_BASES_64 = (2, 325, 9375, 28178, 450775, 9780504, 1795265022)

_LUCAS_VARIANTS = {
    "standard": LucasStrength.STANDARD,
    "strong": LucasStrength.STRONG,
    "extra_strong": LucasStrength.EXTRA_STRONG,
}

# Frobenius-Underwood: these x give the same Jacobi symbol as a smaller x
_FU_SKIP = frozenset((2, 4, 7, 8, 10, 14, 16, 18))
_FU_MAX_X = 1000000


def miller_rabin(n: int, bases) -> bool:
    """
    Strong probable prime test of odd n > 2 against every base.

    Each base is reduced mod n; bases that reduce to 0, 1 or n-1 pass
    trivially. Returns False at the first base that proves n composite.
    """
    d = n - 1
    s = ctz(d)
    d >>= s
    nm1 = n - 1
    for a in bases:
        if a >= n:
            a %= n
        if a <= 1 or a == nm1:
            continue
        x = powmod(a, d, n)
        if x == 1 or x == nm1:
            continue
        for _ in range(s - 1):
            x = sqrmod(x, n)
            if x == nm1:
                break
            if x == 1:
                return False
        else:
            return False
    return True


def is_strong_pseudoprime(n: int, *bases: int) -> bool:
    """
    Miller-Rabin test of n to the given bases.

    Raises:
        InvalidBaseError: a base lies outside [2, n-1]
    """
    check_word(n)
    if not bases:
        raise InvalidBaseError("at least one base is required")
    if n < 3:
        return n == 2
    for a in bases:
        if a < 2 or a > n - 1:
            raise InvalidBaseError(f"base {a} is invalid for n={n}, must be in [2, n-1]")
    if (n & 1) == 0:
        return False
    return miller_rabin(n, bases)


def is_bpsw_prime(n: int) -> bool:
    """SPRP base 2 followed by the configured Lucas test."""
    check_word(n)
    if n < 7:
        return n in (2, 3, 5)
    if (n & 1) == 0:
        return False
    if not miller_rabin(n, (2,)):
        return False
    variant = config.lucas_variant()
    if variant == "almost_extra_strong":
        return is_almost_extra_strong_lucas_pseudoprime(n, 1)
    return is_lucas_pseudoprime(n, _LUCAS_VARIANTS[variant])


def is_frobenius_underwood_pseudoprime(n: int) -> bool:
    """
    Frobenius test of Paul Underwood.

    Picks the least x >= 0 with (x^2 - 4 / n) = -1 and checks
    (X + 2)^(n+1) == 2x + 5 in Z_n[X] / (X^2 - xX + 1). Same cost class as
    one Lucas test; no known counterexample.
    """
    check_word(n)
    if n < 7:
        return n in (2, 3, 5)
    if (n & 1) == 0 or n == config.word_max():
        return False

    x = 0
    while x < _FU_MAX_X:
        if x not in _FU_SKIP:
            j = jacobi(x * x - 4, n)
            if j == -1:
                break
            if j == 0 or (x == 20 and is_perfect_square(n)):
                return False
        x += 1
    else:
        raise InvalidBaseError(f"Frobenius-Underwood found no usable x for n={n}")

    g = gcd(n, (x + 4) * (2 * x + 5))
    if g != 1 and g != n:
        return False

    np1 = n + 1
    a, b = 1, 2
    multiplier = addmod(x % n, 2, n)
    for bit in range(np1.bit_length() - 2, -1, -1):
        # (aX + b)^2 = a(xa + 2b) X + (b + a)(b - a)
        t = addmod(mulmod(a, x % n, n), addmod(b, b, n), n)
        na = mulmod(a, t, n)
        b = mulmod(addmod(b, a, n), submod(b, a, n), n)
        a = na
        if (np1 >> bit) & 1:
            # (aX + b)(X + 2) = (a(x + 2) + b) X + (2b - a)
            na = addmod(mulmod(a, multiplier, n), b, n)
            b = submod(addmod(b, b, n), a, n)
            a = na

    expected = addmod(addmod(x % n, x % n, n), 5 % n, n)
    verdict = a == 0 and b == expected
    logger.debug("frobenius-underwood n=%d x=%d %s", n, x,
                 "probably prime" if verdict else "composite")
    return verdict


def _witnesses_for(n: int) -> tuple[int, ...] | None:
    table = _MR_WITNESSES_64 if config.word_bits() == 64 else _MR_WITNESSES_32
    for bound, bases in table:
        if n < bound:
            return bases
    return None


def is_probable_prime(n: int) -> Primality:
    """
    Decide primality of a native word.

    Returns:
        Primality.PRIME when the answer is exact (always below the last
        deterministic Miller-Rabin threshold), Primality.PROBABLE_PRIME when
        n passed BPSW, Primality.COMPOSITE otherwise.
    """
    check_word(n)
    if n < 11:
        return Primality.PRIME if n in (2, 3, 5, 7) else Primality.COMPOSITE
    if n % 2 == 0 or n % 3 == 0 or n % 5 == 0 or n % 7 == 0:
        return Primality.COMPOSITE
    if n < 121:
        return Primality.PRIME
    for p in _SIEVE_PRIMES:
        if n % p == 0:
            return Primality.COMPOSITE
    if n < 3481:
        return Primality.PRIME
    if n <= SMALL_PRIMES_LIMIT:
        return Primality.PRIME if is_small_prime(n) else Primality.COMPOSITE

    bases = _witnesses_for(n)
    if bases is not None:
        return Primality.PRIME if miller_rabin(n, bases) else Primality.COMPOSITE

    if config.large_prime_test() == "mr7":
        return Primality.PRIME if miller_rabin(n, MR_BASES_64) else Primality.COMPOSITE
    if not is_bpsw_prime(n):
        return Primality.COMPOSITE
    return Primality.PROBABLE_PRIME


def is_prime(n: int) -> bool:
    """True when n is prime or a BPSW probable prime."""
    return is_probable_prime(n) != Primality.COMPOSITE
