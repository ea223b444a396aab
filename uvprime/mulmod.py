"""
Overflow-safe modular arithmetic for native words.

Every routine here is exact for any modulus in [1, UV_MAX] and assumes its
operands are already reduced mod m.

STRATEGIES (selected once, re-selected when the configuration changes):
1. widen: form the double-width product and reduce. Python ints are
   arbitrary precision, so this is always available and is what "auto" picks.
2. binary: software long multiplication. Partial products are accumulated
   with addmod so no intermediate ever leaves the word.
3. halfword: direct product when both operands are below 2^(bits/2),
   binary ladder otherwise.

Callers only ever see mulmod/sqrmod/powmod; which strategy runs is invisible
to them.
"""
import logging

from . import config

logger = logging.getLogger(__name__)


def addmod(a: int, b: int, m: int) -> int:
    """(a + b) mod m without forming a sum larger than m."""
    return a + b if (m - a) > b else a + b - m


def submod(a: int, b: int, m: int) -> int:
    """(a - b) mod m."""
    return a - b if a >= b else m - b + a


def _mulmod_widen(a: int, b: int, m: int) -> int:
    return (a * b) % m


def _mulmod_binary(a: int, b: int, m: int) -> int:
    # Add shifted copies of a, each step reduced: r = (r + a) % m, a = 2a % m
    r = 0
    a %= m
    b %= m
    while b > 0:
        if b & 1:
            r = r + a if (m - r) > a else r + a - m
        b >>= 1
        if b:
            a = a + a if (m - a) > a else a + a - m
    return r


def _mulmod_halfword(a: int, b: int, m: int) -> int:
    if (a | b) < _half_word:
        return (a * b) % m
    return _mulmod_binary(a, b, m)


_STRATEGY_FUNCS = {
    "widen": _mulmod_widen,
    "binary": _mulmod_binary,
    "halfword": _mulmod_halfword,
}

_mulmod_impl = _mulmod_widen
_strategy = "widen"
_half_word = config.half_word()


def _probe_strategy() -> str:
    """Pick the fastest exact strategy the platform offers."""
    # A double-width product must survive the round trip for the widen path
    top = config.word_max()
    if (top * top) // top == top:
        return "widen"
    return "binary"


def _select_strategy() -> None:
    global _mulmod_impl, _strategy, _half_word
    _half_word = config.half_word()
    name = config.mulmod_strategy_setting()
    if name == "auto":
        name = _probe_strategy()
    _mulmod_impl = _STRATEGY_FUNCS[name]
    _strategy = name
    logger.debug("mulmod strategy %s for %d-bit words", name, config.word_bits())


def mulmod_strategy() -> str:
    """Name of the active mulmod strategy."""
    return _strategy


def mulmod_with(strategy: str, a: int, b: int, m: int) -> int:
    """Run one named strategy directly (used to cross-check strategies)."""
    return _STRATEGY_FUNCS[strategy](a, b, m)


def mulmod(a: int, b: int, m: int) -> int:
    """(a * b) mod m."""
    return _mulmod_impl(a, b, m)


def sqrmod(a: int, m: int) -> int:
    """(a * a) mod m."""
    return _mulmod_impl(a, a, m)


def sqraddmod(a: int, c: int, m: int) -> int:
    """(a^2 + c) mod m."""
    return addmod(_mulmod_impl(a, a, m), c, m)


def muladdmod(a: int, b: int, c: int, m: int) -> int:
    """(a * b + c) mod m."""
    return addmod(_mulmod_impl(a, b, m), c, m)


def mulsubmod(a: int, b: int, c: int, m: int) -> int:
    """(a * b - c) mod m."""
    return submod(_mulmod_impl(a, b, m), c, m)


def powmod(a: int, e: int, m: int) -> int:
    """
    a^e mod m by square-and-multiply.

    Moduli below the half word take the direct path, larger ones go through
    the active mulmod strategy.
    """
    t = 1 % m
    a %= m
    if m < _half_word:
        while e:
            if e & 1:
                t = (t * a) % m
            e >>= 1
            if e:
                a = (a * a) % m
    else:
        mm = _mulmod_impl
        while e:
            if e & 1:
                t = mm(t, a, m)
            e >>= 1
            if e:
                a = mm(a, a, m)
    return t


def powaddmod(a: int, e: int, c: int, m: int) -> int:
    """(a^e + c) mod m."""
    return addmod(powmod(a, e, m), c, m)


_select_strategy()
config.on_change(_select_strategy)
