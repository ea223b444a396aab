"""
Integer factorization of native words: trial division, then a cascade of
bounded probabilistic splitters.

CASCADE (each stage only runs when the previous one found nothing):
1. n < 10^7: complete trial division, nothing else needed
2. Strip every prime below 409
3. While the cofactor is >= 409^2 and composite:
   - Pollard rho, Brent's variant (1500 rounds, gcd batched every 64 steps)
   - Racing SQUFOF (16 multipliers)
   - Pollard p-1 (B1 = 8000, B2 = 120000)
   - Williams p+1 (B1 = 2000)
   - Hart's one line factorization
   - Pollard rho, Floyd cycle finding, as the catch-all
   The first split wins; one half is pushed on the to-factor stack.
4. If nothing splits it, trial divide from 409 upward.

Every splitter takes an odd n >= 3 plus a budget and returns [n] when the
budget runs out. A successful split is always [f, n // f] with f * (n // f)
checked against n.
"""
import logging
import math

from . import config
from .errors import InvariantError, WordOverflowError, check_word
from .lucas import lucas_v
from .mulmod import mulmod, powmod, sqraddmod, sqrmod, submod
from .primality import is_prime
from .sieve import NEXT_WHEEL30, WHEEL_ADVANCE30, primes_from
from .squfof import racing_squfof_factor, squfof_factor
from .trial import trial_division, trial_factor
from .util import gcd, sqrt_if_square
from ._split import found_factor, require_odd

logger = logging.getLogger(__name__)

MAX_FACTORS = 64

_TRIAL_ONLY_LIMIT = 10000000
_TRIAL_LIMIT = 409

_BRENT_INNER = 64
_PM1_STAGE1_CHECK = 32
_PM1_STAGE2_CHECK = 64
# Stage 2 gap powers bm^(2i) kept for gaps below 2 * _PM1_GAP_TABLE
_PM1_GAP_TABLE = 111
_PP1_CHECK = 16
_PP1_SEEDS = (7, 5, 9)


def pbrent_factor(n: int, rounds: int, a: int = 1) -> list[int]:
    """
    Pollard's rho with Brent's cycle detection.

    Iterates x -> x^2 + a mod n and multiplies |x_i - x_m| into a running
    product, taking one gcd per block of 64 steps. When a block overshoots
    (the gcd is n) the block is replayed one step at a time.

    Args:
        n: Odd composite >= 3
        rounds: Total number of x updates allowed
        a: Additive constant of the iteration

    Returns:
        [f, n // f] or [n]
    """
    check_word(n)
    require_odd(n, "pbrent_factor")
    a %= n

    Xi = 2
    Xm = 2
    r = 1
    f = 1
    while rounds > 0:
        rleft = min(r, rounds)
        saveXi = Xi
        while rleft > 0:
            dorounds = min(rleft, _BRENT_INNER)
            m = 1
            saveXi = Xi
            rleft -= dorounds
            rounds -= dorounds
            for _ in range(dorounds):
                Xi = sqraddmod(Xi, a, n)
                m = mulmod(m, Xi - Xm if Xi > Xm else Xm - Xi, n)
            f = gcd(m, n)
            if f != 1:
                break

        if f == 1:
            r *= 2
            Xm = Xi
            continue

        if f == n:
            # Back up to the start of the block and step singly
            Xi = saveXi
            while True:
                Xi = sqraddmod(Xi, a, n)
                f = gcd(Xi - Xm if Xi > Xm else Xm - Xi, n)
                if f != 1 or r == 0:
                    break
                r -= 1
        return found_factor(n, f)
    return [n]


def prho_factor(n: int, rounds: int) -> list[int]:
    """Pollard's rho with Floyd's tortoise and hare."""
    check_word(n)
    require_odd(n, "prho_factor")
    a = {0: 5, 1: 7, 2: 11, 3: 1}[n % 4] % n

    U = 7 % n
    V = 7 % n
    for _ in range(1, rounds):
        U = sqraddmod(U, a, n)
        V = sqraddmod(V, a, n)
        V = sqraddmod(V, a, n)
        f = gcd(U - V if U > V else V - U, n)
        if f == n:
            # Cycle closed mod n, later steps repeat it
            return [n]
        if f != 1:
            return found_factor(n, f)
    return [n]


def _prime_power_exponent(p: int, B1: int, sqrtB1: int) -> int:
    """Largest power of p not above B1 (just p once p exceeds sqrt(B1))."""
    k = p
    if p <= sqrtB1:
        kmin = B1 // p
        while k <= kmin:
            k *= p
    return k


def pminus1_factor(n: int, B1: int, B2: int = 0) -> list[int]:
    """
    Pollard's p-1 with the standard stage 2 continuation.

    Stage 1 raises 2 to every prime power <= B1, checking the gcd every 32
    primes. If the final gcd is n, stage 1 is replayed one prime at a time
    from the last good checkpoint. Stage 2 covers one more prime q in
    (B1, B2], stepping a = bm^q between consecutive primes with a table of
    precomputed bm^gap powers.

    Args:
        n: Odd composite >= 3
        B1: Stage 1 smoothness bound
        B2: Stage 2 bound, 0 (or <= B1) to skip stage 2
    """
    check_word(n)
    require_odd(n, "pminus1_factor")
    sqrtB1 = math.isqrt(B1)

    a = 2
    q = 2
    savea = 2
    saveq = 1
    j = 1
    for p in primes_from(2, B1):
        a = powmod(a, _prime_power_exponent(p, B1, sqrtB1), n)
        q = p
        if j % _PM1_STAGE1_CHECK == 0:
            if a == 0 or gcd(a - 1, n) != 1:
                break
            savea = a
            saveq = q
        j += 1

    if a == 0:
        return [n]
    f = gcd(submod(a, 1, n), n)

    if f == n:
        # More than one factor was caught in stage 1: single step
        a = savea
        for p in primes_from(saveq + 1, B1):
            a = powmod(a, _prime_power_exponent(p, B1, sqrtB1), n)
            f = gcd(submod(a, 1, n), n)
            if f != 1:
                break

    if f == 1 and B2 > B1:
        f = _pminus1_stage2(n, a, B1, B2)

    return found_factor(n, f)


def _pminus1_stage2(n: int, bm: int, B1: int, B2: int) -> int:
    gap_powers = [0] * _PM1_GAP_TABLE
    bm2 = sqrmod(bm, n)
    b = 1
    a = 0
    lastq = 0
    j = 1
    for q in primes_from(B1 + 1, B2):
        if lastq == 0:
            a = powmod(bm, q, n)
        else:
            gap = q - lastq
            idx = gap // 2 - 1
            if idx >= _PM1_GAP_TABLE:
                step = powmod(bm, gap, n)
            else:
                step = gap_powers[idx]
                if step == 0:
                    prev = gap_powers[idx - 1] if idx > 0 else 0
                    step = mulmod(prev, bm2, n) if prev else powmod(bm, gap, n)
                    gap_powers[idx] = step
            a = mulmod(a, step, n)
        lastq = q
        if a == 0:
            break
        b = mulmod(b, a - 1, n)
        if j % _PM1_STAGE2_CHECK == 0:
            if b == 0 or gcd(b, n) != 1:
                break
        j += 1
    return gcd(b, n)


def pplus1_factor(n: int, B1: int) -> list[int]:
    """
    Williams' p+1 using the V-only Lucas chain.

    For each seed P, V <- V_k(V) over the prime powers k <= B1; a factor p
    shows up in gcd(V - 2, n) when p - (D/p) is B1-smooth, D = P^2 - 4.
    """
    check_word(n)
    require_odd(n, "pplus1_factor")
    sqrtB1 = math.isqrt(B1)

    for seed in _PP1_SEEDS:
        V = seed % n
        f = 1
        j = 1
        for p in primes_from(2, B1):
            V = lucas_v(V, _prime_power_exponent(p, B1, sqrtB1), n)
            if j % _PP1_CHECK == 0:
                f = gcd(submod(V, 2 % n, n), n)
                if f != 1:
                    break
            j += 1
        f = gcd(submod(V, 2 % n, n), n)
        if 1 < f < n:
            return found_factor(n, f)
    return [n]


def holf_factor(n: int, rounds: int) -> list[int]:
    """
    Hart's one line factorization.

    For i = 1, 2, ...: s = ceil(sqrt(n i)), m = s^2 mod n. When m is a square
    t^2, gcd(s - t, n) is usually a factor. Stops once n i leaves the word.
    """
    check_word(n)
    require_odd(n, "holf_factor")
    top = config.word_max()

    for i in range(1, rounds + 1):
        ni = n * i
        if ni > top:
            break
        s = math.isqrt(ni)
        if s * s != ni:
            s += 1
        m = sqrmod(s % n, n)
        t = sqrt_if_square(m)
        if t is not None:
            f = gcd(s - t if s > t else t - s, n)
            if 1 < f < n:
                return found_factor(n, f)
    return [n]


def fermat_factor(n: int, rounds: int) -> list[int]:
    """
    Fermat's method as Knuth's algorithm C (TAOCP vol. 2, 4.5.4).

    Works only with additions, so it is very fast when the two factors are
    close together and hopeless otherwise.
    """
    check_word(n)
    require_odd(n, "fermat_factor")

    sqn = math.isqrt(n)
    x = 2 * sqn + 1
    y = 1
    r = sqn * sqn - n
    steps = 0
    while r != 0:
        steps += 1
        if steps > rounds:
            return [n]
        r += x
        x += 2
        while True:
            r -= y
            y += 2
            if r <= 0:
                break
    return found_factor(n, (x - y) // 2)


def _split_cofactor(n: int) -> tuple[str, list[int]]:
    """Run the splitter cascade on a composite n, first success wins."""
    split = pbrent_factor(n, 1500, 1)
    if len(split) == 2:
        return "pbrent", split
    split = racing_squfof_factor(n, 256 * 1024)
    if len(split) == 2:
        return "squfof", split
    split = pminus1_factor(n, 8000, 120000)
    if len(split) == 2:
        return "pminus1", split
    split = pplus1_factor(n, 2000)
    if len(split) == 2:
        return "pplus1", split
    split = holf_factor(n, 256 * 1024)
    if len(split) == 2:
        return "holf", split
    return "prho", prho_factor(n, 256 * 1024)


def _trial_from(n: int, start: int, factors: list[int]) -> int:
    """Wheel trial division from start (a mod-30 spoke) until n is prime or 1."""
    f = start
    m = f % 30
    limit = math.isqrt(n)
    while f <= limit:
        if n % f == 0:
            while n % f == 0:
                n //= f
                factors.append(f)
            limit = math.isqrt(n)
        f += WHEEL_ADVANCE30[m]
        m = NEXT_WHEEL30[m]
    return n


def _push(stack: list[int], value: int) -> None:
    if len(stack) >= MAX_FACTORS:
        raise InvariantError(f"more than {MAX_FACTORS} factors")
    stack.append(value)


def _selection_sort(values: list[int]) -> list[int]:
    for i in range(len(values) - 1):
        lo = i
        for j in range(i + 1, len(values)):
            if values[j] < values[lo]:
                lo = j
        if lo != i:
            values[i], values[lo] = values[lo], values[i]
    return values


def factor(n: int) -> list[int]:
    """
    Factorize n into primes.

    Args:
        n: Unsigned word

    Returns:
        Prime factors in ascending order, with multiplicity. factor(0) is [0]
        and factor(1) is [1].
    """
    check_word(n)
    if n < _TRIAL_ONLY_LIMIT:
        return trial_factor(n, 0)

    small, n = trial_division(n, _TRIAL_LIMIT)
    factors: list[int] = []
    for p in small:
        _push(factors, p)
    to_factor: list[int] = []

    while True:
        while n >= _TRIAL_LIMIT * _TRIAL_LIMIT and not is_prime(n):
            method, split = _split_cofactor(n)
            if len(split) == 2:
                logger.debug("%s split %d = %d * %d", method, n, split[0], split[1])
                _push(to_factor, split[0])
                n = split[1]
            else:
                logger.info("no splitter worked, trial dividing %d", n)
                found: list[int] = []
                n = _trial_from(n, _TRIAL_LIMIT, found)
                for p in found:
                    _push(factors, p)
                break
        if n != 1:
            _push(factors, n)
        if not to_factor:
            break
        n = to_factor.pop()

    return _selection_sort(factors)


def factor_exp(n: int) -> list[tuple[int, int]]:
    """
    Factorization as (prime, exponent) pairs in ascending order.

    factor_exp(1) is [] and factor_exp(0) is [(0, 1)].
    """
    if n == 1:
        check_word(n)
        return []
    pairs: list[tuple[int, int]] = []
    for p in factor(n):
        if pairs and pairs[-1][0] == p:
            pairs[-1] = (p, pairs[-1][1] + 1)
        else:
            pairs.append((p, 1))
    return pairs


def divisors(n: int) -> list[int]:
    """All positive divisors of n in ascending order. divisors(0) is []."""
    check_word(n)
    if n == 0:
        return []
    divs = [1]
    for p, e in factor_exp(n):
        pk = 1
        current = list(divs)
        for _ in range(e):
            pk *= p
            divs.extend(d * pk for d in current)
    divs.sort()
    return divs


def divisor_sum(n: int, k: int = 1) -> int:
    """
    sigma_k(n), the sum of the k-th powers of the divisors of n.

    k = 0 counts the divisors. divisor_sum(0, k) is 0.

    Raises:
        WordOverflowError: the sum does not fit the word
    """
    check_word(n)
    if k < 0:
        raise ValueError(f"divisor_sum power must be >= 0, got {k}")
    if n == 0:
        return 0
    total = 1
    for p, e in factor_exp(n):
        pk = p ** k
        term = 1
        acc = 1
        for _ in range(e):
            term *= pk
            acc += term
        total *= acc
    if total > config.word_max():
        raise WordOverflowError(f"divisor_sum({n}, {k}) does not fit the word")
    return total


__all__ = [
    "MAX_FACTORS",
    "factor",
    "factor_exp",
    "divisors",
    "divisor_sum",
    "pbrent_factor",
    "prho_factor",
    "pminus1_factor",
    "pplus1_factor",
    "holf_factor",
    "fermat_factor",
    "squfof_factor",
    "racing_squfof_factor",
]
