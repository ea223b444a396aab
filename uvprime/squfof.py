"""
Shanks' square form factorization.

Two flavours:
1. squfof_factor: one multiplier, with the queue of small forms that marks
   improper squares. The queue lives in the call, not in the module.
2. racing_squfof_factor: sixteen multipliers (Gower and Wagstaff 2008,
   section 5.3) advanced round-robin in slices of about (n*mult)^(1/4) / 3
   iterations. The first lane that reaches a usable symmetry point wins.

Both return [n] when they give up, [f, n // f] (smaller first) on success.
"""
import logging
import math
from dataclasses import dataclass

from . import config
from .errors import check_word
from .util import gcd, is_perfect_square
from ._split import found_factor, require_odd

logger = logging.getLogger(__name__)

_SQUFOF_MULTIPLIERS = (
    3 * 5 * 7 * 11, 3 * 5 * 7, 3 * 5 * 11, 3 * 5, 3 * 7 * 11, 3 * 7, 5 * 7 * 11, 5 * 7,
    3 * 11, 3, 5 * 11, 5, 7 * 11, 7, 11, 1,
)

_QUEUE_SIZE = 100
# A lane whose symmetry search runs this long is dropped
_SYMMETRY_LIMIT = 2000000


def squfof_factor(n: int, rounds: int) -> list[int]:
    """
    Single-multiplier SQUFOF.

    Args:
        n: Odd composite >= 3
        rounds: Forward iteration budget; the reverse cycle gets rounds // 16

    Returns:
        [f, n // f] or [n] when no proper square form appeared in time
    """
    check_word(n)
    require_odd(n, "squfof_factor")

    s = math.isqrt(n)
    p = s
    q = n - s * s
    if q == 0:
        return found_factor(n, s)

    qlast = 1
    ll = 1 + 2 * math.isqrt(p + p)
    l2 = ll // 2
    queue: list[int] = []
    r = 0
    found = False

    for jter in range(rounds):
        iq = (s + p) // q
        pnext = iq * q - p
        if q <= ll:
            if (q & 1) == 0:
                queue.append(q // 2)
            elif q <= l2:
                queue.append(q)
            if len(queue) >= _QUEUE_SIZE:
                return [n]

        t = qlast + iq * (p - pnext)
        qlast = q
        q = t
        p = pnext
        # Square test on even iterations only
        if jter & 1:
            continue
        if not is_perfect_square(q):
            continue
        r = math.isqrt(q)
        if r in queue:
            continue
        found = True
        break

    if not found:
        return [n]

    # Reverse cycle from the square root form to the symmetry point
    qlast = r
    p = p + r * ((s - p) // r)
    q = (n - p * p) // qlast
    for _ in range(rounds // 16):
        iq = (s + p) // q
        pnext = iq * q - p
        if p == pnext:
            break
        t = qlast + iq * (p - pnext)
        qlast = q
        q = t
        p = pnext
    else:
        return [n]

    # q is the factor or twice it
    if (q & 1) == 0:
        q //= 2
    return found_factor(n, gcd(q, n))


@dataclass
class SqufofLane:
    """Continued fraction state of one racing multiplier."""
    mult: int
    valid: bool = True
    P: int = 0
    bn: int = 0
    Qn: int = 0
    Q0: int = 1
    b0: int = 0
    it: int = 0
    imax: int = 0


def _squfof_unit(nn: int, lane: SqufofLane) -> int:
    """
    Advance one lane by its slice of iterations.

    Returns a factor > 1 of nn when a symmetry point gave one, else 0 with
    the lane state saved (or the lane marked invalid).
    """
    P, bn, Qn, Q0, b0, i = lane.P, lane.bn, lane.Qn, lane.Q0, lane.b0, lane.it
    imax = i + lane.imax

    while True:
        if i & 1:
            t1 = P
            P = bn * Qn - P
            t2 = Qn
            Qn = Q0 + bn * (t1 - P)
            Q0 = t2
            bn = (b0 + P) // Qn
            i += 1

        while True:
            if i >= imax:
                lane.P, lane.bn, lane.Qn, lane.Q0, lane.it = P, bn, Qn, Q0, i
                return 0

            t1 = P
            P = bn * Qn - P
            t2 = Qn
            Qn = Q0 + bn * (t1 - P)
            Q0 = t2
            bn = (b0 + P) // Qn
            i += 1

            if is_perfect_square(Qn):
                break

            t1 = P
            P = bn * Qn - P
            t2 = Qn
            Qn = Q0 + bn * (t1 - P)
            Q0 = t2
            bn = (b0 + P) // Qn
            i += 1

        S = math.isqrt(Qn)
        # Reduce to the principal cycle, then walk to the symmetry point
        Ro = P + S * ((b0 - P) // S)
        So = (nn - Ro * Ro) // S
        bbn = (b0 + Ro) // So

        j = 0
        while True:
            t1 = Ro
            Ro = bbn * So - Ro
            t2 = So
            So = S + bbn * (t1 - Ro)
            S = t2
            bbn = (b0 + Ro) // So
            if Ro == t1:
                break
            j += 1
            if j > _SYMMETRY_LIMIT:
                lane.valid = False
                return 0

        f = gcd(Ro, nn)
        if f > 1:
            return f


def _start_lane(n: int, lane: SqufofLane, rounds: int) -> int:
    """Initialise a lane. Returns a factor if n * mult is already a square."""
    nn = n * lane.mult
    lane.b0 = math.isqrt(nn)
    lane.imax = max(20, int(math.sqrt(lane.b0) / 3))
    lane.imax = min(lane.imax, rounds)
    lane.Q0 = 1
    lane.P = lane.b0
    lane.Qn = nn - lane.b0 * lane.b0
    if lane.Qn == 0:
        return gcd(lane.b0, n)
    lane.bn = (lane.b0 + lane.P) // lane.Qn
    lane.it = 0
    return 0


def racing_squfof_factor(n: int, rounds: int) -> list[int]:
    """
    SQUFOF racing sixteen multipliers round-robin.

    n above word_max() / 4 is not attempted. Each lane runs until its
    iteration slice is spent, then yields to the next one; the whole race
    stops after about `rounds` iterations per lane or when every lane is dead.
    """
    check_word(n)
    require_odd(n, "racing_squfof_factor")
    big = config.word_max()
    if n > (big >> 2):
        return [n]

    lanes = [SqufofLane(mult) for mult in _SQUFOF_MULTIPLIERS]
    started = [False] * len(lanes)
    rounds_done = 0

    while True:
        still_racing = False
        slice_size = 0
        for idx, lane in enumerate(lanes):
            if not lane.valid:
                continue
            if not started[idx]:
                started[idx] = True
                if big // lane.mult < n:
                    lane.valid = False
                    continue
                f = _start_lane(n, lane, rounds)
                if f:
                    if 1 < f < n:
                        return found_factor(n, f)
                    lane.valid = False
                    continue

            f = _squfof_unit(n * lane.mult, lane)
            if f > 1:
                if f != lane.mult:
                    f //= gcd(f, lane.mult)
                    if 1 < f < n:
                        logger.debug("squfof lane %d split %d", lane.mult, n)
                        return found_factor(n, f)
                # Only the multiplier came out: this lane is useless
                lane.valid = False
            if lane.valid:
                still_racing = True
                slice_size = max(slice_size, lane.imax)

        rounds_done += slice_size
        if not still_racing or rounds_done >= rounds:
            return [n]
