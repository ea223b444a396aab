"""Exception types raised by uvprime."""
from . import config


class UvPrimeError(Exception):
    """Base class for every uvprime error."""


class WordOverflowError(UvPrimeError, OverflowError):
    """Input is negative or does not fit the configured native word."""


class InvalidBaseError(UvPrimeError, ValueError):
    """A test parameter (base, increment, modulus shape) is out of range."""


class InvariantError(UvPrimeError, AssertionError):
    """An internal postcondition failed. This is a bug, not bad input."""


def check_word(n: int, name: str = "n") -> int:
    """Return n unchanged if it is a valid unsigned word, else raise."""
    if n < 0 or n > config.word_max():
        raise WordOverflowError(
            f"{name}={n} is outside the {config.word_bits()}-bit unsigned word range"
        )
    return n


def check_split(n: int, f: int) -> None:
    """Verify f * (n // f) == n after a claimed split."""
    if f == 0 or f * (n // f) != n:
        raise InvariantError(f"found factor {f} does not divide {n}")
