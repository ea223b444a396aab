"""
Lucas sequences and the Lucas family of probable-prime tests.

The sequences U_k(P, Q), V_k(P, Q) and Q^k are computed mod n with a
left-to-right binary ladder:

    U_2k = U_k V_k            V_2k = V_k^2 - 2 Q^k
    U_2k+1 = (P U_2k + V_2k) / 2
    V_2k+1 = (D U_2k + P V_2k) / 2

Division by 2 mod odd n is (x + n) / 2 when x is odd. Three ladders share
these identities: a generic one, one for Q = 1 (Q^k stays 1, two mulmods
fewer per step) and one for P = 1, Q = -1 (Q^k is just a sign).

Parameter selection follows Selfridge's method A for the standard and strong
tests and Baillie's Q = 1, P = 3, 4, 5, ... for the extra strong tests.
"""
import logging
from enum import IntEnum

from .errors import InvalidBaseError, check_word
from .mulmod import addmod, muladdmod, mulmod, mulsubmod, powmod, sqrmod, submod
from .util import ctz, gcd, is_perfect_square, jacobi

logger = logging.getLogger(__name__)

# Give up on the parameter search here and check for a perfect square
_SQUARE_CHECK_D = 21


class LucasStrength(IntEnum):
    STANDARD = 0
    STRONG = 1
    EXTRA_STRONG = 2


def _halve(x: int, n: int) -> int:
    """x / 2 mod odd n, for 0 <= x < n."""
    return (n >> 1) + (x >> 1) + 1 if x & 1 else x >> 1


def _lucas_sequence_generic(n: int, P: int, Q: int, k: int) -> tuple[int, int, int]:
    """Reference ladder valid for every (P, Q); the fast paths must agree with it."""
    Pmod = P % n
    Qmod = Q % n
    Dmod = submod(mulmod(Pmod, Pmod, n), mulmod(4 % n, Qmod, n), n)
    U, V, Qk = 1, Pmod, Qmod
    for bit in range(k.bit_length() - 2, -1, -1):
        U = mulmod(U, V, n)
        V = mulsubmod(V, V, addmod(Qk, Qk, n), n)
        Qk = sqrmod(Qk, n)
        if (k >> bit) & 1:
            t2 = mulmod(U, Dmod, n)
            U = _halve(muladdmod(U, Pmod, V, n), n)
            V = _halve(muladdmod(V, Pmod, t2, n), n)
            Qk = mulmod(Qk, Qmod, n)
    return U, V, Qk


def _lucas_sequence_q1(n: int, P: int, k: int) -> tuple[int, int, int]:
    Pmod = P % n
    Dmod = submod(mulmod(Pmod, Pmod, n), 4 % n, n)
    two = 2 % n
    U, V = 1, Pmod
    for bit in range(k.bit_length() - 2, -1, -1):
        U = mulmod(U, V, n)
        V = mulsubmod(V, V, two, n)
        if (k >> bit) & 1:
            t2 = mulmod(U, Dmod, n)
            U = _halve(muladdmod(U, Pmod, V, n), n)
            V = _halve(muladdmod(V, Pmod, t2, n), n)
    return U, V, 1 % n


def _lucas_sequence_p1_qm1(n: int, k: int) -> tuple[int, int, int]:
    # D = 5, and Q^k is +1 or -1 so it is tracked as a sign
    Dmod = 5 % n
    two = 2 % n
    U, V = 1, 1 % n
    sign = -1
    for bit in range(k.bit_length() - 2, -1, -1):
        U = mulmod(U, V, n)
        if sign == 1:
            V = mulsubmod(V, V, two, n)
        else:
            V = muladdmod(V, V, two, n)
        sign = 1
        if (k >> bit) & 1:
            t2 = mulmod(U, Dmod, n)
            U = _halve(addmod(U, V, n), n)
            V = _halve(addmod(V, t2, n), n)
            sign = -1
    return U, V, (1 % n if sign == 1 else n - 1)


def lucas_sequence(n: int, P: int, Q: int, k: int) -> tuple[int, int, int]:
    """
    Compute (U_k, V_k, Q^k) mod n for the Lucas sequence with parameters P, Q.

    Args:
        n: Odd modulus >= 3
        P, Q: Sequence parameters (may be negative)
        k: Index >= 0

    Returns:
        (U_k mod n, V_k mod n, Q^k mod n)
    """
    if n < 3 or (n & 1) == 0:
        raise InvalidBaseError(f"Lucas sequence modulus must be odd and >= 3, got {n}")
    if k == 0:
        return 0, 2 % n, 1 % n
    Pmod = P % n
    Qmod = Q % n
    Dmod = submod(mulmod(Pmod, Pmod, n), mulmod(4 % n, Qmod, n), n)
    if Dmod == 0:
        # Repeated root P/2: U_k = k b^(k-1), V_k = 2 b^k
        b = _halve(Pmod, n)
        return (mulmod(k % n, powmod(b, k - 1, n), n),
                mulmod(2 % n, powmod(b, k, n), n),
                powmod(Qmod, k, n))
    if Q == 1:
        return _lucas_sequence_q1(n, P, k)
    if P == 1 and Q == -1:
        return _lucas_sequence_p1_qm1(n, k)
    return _lucas_sequence_generic(n, P, Q, k)


def lucas_v(P: int, k: int, n: int) -> int:
    """
    V_k(P, 1) mod n with the V-only Montgomery chain.

    Keeps (V_j, V_j+1) and uses V_2j = V_j^2 - 2, V_2j+1 = V_j V_j+1 - P.
    """
    if k == 0:
        return 2 % n
    P %= n
    two = 2 % n
    V = P
    W = mulsubmod(P, P, two, n)
    for bit in range(k.bit_length() - 2, -1, -1):
        if (k >> bit) & 1:
            V = mulsubmod(V, W, P, n)
            W = mulsubmod(W, W, two, n)
        else:
            W = mulsubmod(V, W, P, n)
            V = mulsubmod(V, V, two, n)
    return V


def _jacobi_rejects(D: int, n: int) -> bool:
    """A zero symbol proves n composite unless D is a multiple of n itself."""
    g = gcd(abs(D), n)
    return 1 < g < n


def selfridge_params(n: int) -> tuple[int, int, int] | None:
    """
    Selfridge method A: first D in 5, -7, 9, -11, ... with (D/n) = -1.

    Returns:
        (P, Q, D) with P = 1 and Q = (1 - D) / 4, or None when the search
        proves n composite (a shared factor with D, or a perfect square).
    """
    Du = 5
    sign = 1
    while True:
        D = Du * sign
        j = jacobi(D, n)
        if j == -1:
            break
        if j == 0 and _jacobi_rejects(D, n):
            return None
        if Du == _SQUARE_CHECK_D and is_perfect_square(n):
            return None
        Du += 2
        sign = -sign
    return 1, (1 - D) // 4, D


def extra_strong_params(n: int, increment: int = 1) -> tuple[int, int, int] | None:
    """
    Baillie's parameters for the extra strong test: Q = 1, P = 3, 3+inc, ...

    Returns:
        (P, 1, D) with D = P^2 - 4 and (D/n) = -1, or None when n is proven
        composite along the way.
    """
    if increment < 1 or increment > 256:
        raise InvalidBaseError(f"invalid Lucas parameter increment {increment}")
    P = 3
    while True:
        D = P * P - 4
        j = jacobi(D, n)
        if j == -1:
            break
        if j == 0 and _jacobi_rejects(D, n):
            return None
        if P == 3 + 20 * increment and is_perfect_square(n):
            return None
        P += increment
        if P > 65535:
            raise InvalidBaseError(f"extra strong parameter search overflowed for n={n}")
    return P, 1, D


def _small_lucas_verdict(n: int) -> bool | None:
    """Answer tiny and even n directly, None when the real test must run."""
    if n < 7:
        return n in (2, 3, 5)
    if (n & 1) == 0:
        return False
    return None


def is_lucas_pseudoprime(n: int, strength: LucasStrength = LucasStrength.STANDARD) -> bool:
    """
    Lucas probable prime test at the given strength.

    STANDARD: U_{n+1} == 0 with Selfridge parameters.
    STRONG: U_d == 0 or V_{d 2^r} == 0 for some 0 <= r < s, n + 1 = d 2^s.
    EXTRA_STRONG: Baillie parameters, U_d == 0 and V_d == +-2, or
    V_{d 2^r} == 0 for some 0 <= r < s - 1.
    """
    check_word(n)
    strength = LucasStrength(strength)
    small = _small_lucas_verdict(n)
    if small is not None:
        return small

    if strength == LucasStrength.EXTRA_STRONG:
        params = extra_strong_params(n)
    else:
        params = selfridge_params(n)
    if params is None:
        return False
    P, Q, D = params
    logger.debug("lucas %s n=%d P=%d Q=%d D=%d", strength.name, n, P, Q, D)

    m = n + 1
    if strength == LucasStrength.STANDARD:
        U, _, _ = lucas_sequence(n, P, Q, m)
        return U == 0

    s = ctz(m)
    d = m >> s
    U, V, Qk = lucas_sequence(n, P, Q, d)

    if strength == LucasStrength.STRONG:
        if U == 0:
            return True
        while s:
            s -= 1
            if V == 0:
                return True
            if s:
                V = mulsubmod(V, V, addmod(Qk, Qk, n), n)
                Qk = sqrmod(Qk, n)
        return False

    if U == 0 and (V == 2 or V == n - 2):
        return True
    s -= 1
    while s:
        s -= 1
        if V == 0:
            return True
        if s:
            V = mulsubmod(V, V, 2, n)
    return False


def is_almost_extra_strong_lucas_pseudoprime(n: int, increment: int = 1) -> bool:
    """
    Extra strong Lucas test using only the V sequence.

    Accepts V_d == +-2, or V_{d 2^r} == 0 for some 0 <= r < s - 1. Slightly
    weaker than the full extra strong test but needs no U.
    """
    check_word(n)
    if increment < 1 or increment > 256:
        raise InvalidBaseError(f"invalid Lucas parameter increment {increment}")
    small = _small_lucas_verdict(n)
    if small is not None:
        return small

    # Large increments would skip every valid P for small primes
    if (increment >= 16 and n <= 331) or (increment > 148 and n <= 631):
        from .primality import is_probable_prime
        return bool(is_probable_prime(n))

    params = extra_strong_params(n, increment)
    if params is None:
        return False
    P = params[0]

    d = n + 1
    s = ctz(d)
    d >>= s

    V = lucas_v(P, d, n)
    if V == 2 or V == n - 2:
        return True
    while s > 1:
        s -= 1
        if V == 0:
            return True
        V = mulsubmod(V, V, 2, n)
        if V == 2:
            return False
    return False
