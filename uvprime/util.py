"""
Integer helpers shared by the primality and factoring code.

Roots, perfect square/power detection, bit scans and the Jacobi symbol.
"""
import math

from .errors import InvalidBaseError

# Quadratic residue filters. A square is a residue modulo every one of these,
# which rejects ~99% of non-squares before the isqrt.
_QR64 = frozenset((i * i) % 64 for i in range(64))
_QR63 = frozenset((i * i) % 63 for i in range(63))
_QR65 = frozenset((i * i) % 65 for i in range(65))
_QR11 = frozenset((i * i) % 11 for i in range(11))


def isqrt(n: int) -> int:
    return math.isqrt(n)


def icbrt(n: int) -> int:
    """Floor of the cube root, bit by bit (three bits per step)."""
    root = 0
    s = ((n.bit_length() + 2) // 3) * 3
    while s >= 0:
        root += root
        b = 3 * root * (root + 1) + 1
        if (n >> s) >= b:
            n -= b << s
            root += 1
        s -= 3
    return root


def is_perfect_square(n: int) -> bool:
    if n < 0:
        return False
    if (n & 63) not in _QR64:
        return False
    if n % 63 not in _QR63 or n % 65 not in _QR65 or n % 11 not in _QR11:
        return False
    r = math.isqrt(n)
    return r * r == n


def sqrt_if_square(n: int) -> int | None:
    """Return the square root of n if n is a perfect square, else None."""
    if not is_perfect_square(n):
        return None
    return math.isqrt(n)


def rootof(n: int, k: int) -> int:
    """Floor of the k-th root of n, exact for any n."""
    if k == 1 or n < 2:
        return n
    if k == 2:
        return math.isqrt(n)
    if k >= n.bit_length():
        return 1
    r = int(round(n ** (1.0 / k)))
    # The float guess can be off by a little in either direction
    while r ** k > n:
        r -= 1
    while (r + 1) ** k <= n:
        r += 1
    return r


def log2floor(n: int) -> int:
    """Index of the highest set bit (0 for n == 0)."""
    return n.bit_length() - 1 if n else 0


def ctz(n: int) -> int:
    """Number of trailing zero bits of a nonzero n."""
    return (n & -n).bit_length() - 1


def gcd(a: int, b: int) -> int:
    return math.gcd(a, b)


def jacobi(a: int, n: int) -> int:
    """
    Jacobi symbol (a/n) for odd n > 0 and any integer a.

    Negative a is handled by reducing mod n first.
    """
    if n <= 0 or (n & 1) == 0:
        raise InvalidBaseError(f"Jacobi symbol needs an odd positive modulus, got {n}")
    a %= n
    result = 1
    while a:
        tz = (a & -a).bit_length() - 1
        if tz:
            a >>= tz
            if (tz & 1) and (n & 7) in (3, 5):
                result = -result
        # Quadratic reciprocity
        if (a & 3) == 3 and (n & 3) == 3:
            result = -result
        a, n = n % a, a
    return result if n == 1 else 0


def kronecker(a: int, n: int) -> int:
    """Kronecker symbol (a/n) for any integers a and n."""
    if n == 0:
        return 1 if a in (1, -1) else 0
    result = 1
    if n < 0:
        n = -n
        if a < 0:
            result = -1
    if (n & 1) == 0:
        if (a & 1) == 0:
            return 0
        tz = ctz(n)
        n >>= tz
        # (a/2) is -1 for a = 3, 5 mod 8
        if (tz & 1) and (a & 7) in (3, 5):
            result = -result
    return result * jacobi(a, n)


def is_perfect_power(n: int) -> bool:
    """
    True when n = a^b for some b >= 2 (0 and 1 count).

    Powers of two, squares and cubes are checked directly, then every prime
    exponent 5 <= b <= log2(n).
    """
    if n < 4:
        return n < 2
    if (n & (n - 1)) == 0:
        return True
    if is_perfect_square(n):
        return True
    c = icbrt(n)
    if c * c * c == n:
        return True
    from .sieve import primes_from
    for b in primes_from(5, log2floor(n)):
        r = rootof(n, b)
        if r ** b == n:
            return True
    return False
