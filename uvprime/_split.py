"""Result helpers shared by the factoring algorithms."""
from .errors import InvalidBaseError, check_split


def found_factor(n: int, f: int) -> list[int]:
    """
    Turn a candidate factor into a split of n.

    Returns [min, max] of (f, n // f), or [n] when f is 1 or n.

    Raises:
        InvariantError: f does not divide n
    """
    if f <= 1 or f >= n:
        return [n]
    check_split(n, f)
    g = n // f
    return [f, g] if f < g else [g, f]


def require_odd(n: int, name: str) -> None:
    """Splitters only accept odd n >= 3; the orchestrator strips the rest."""
    if n < 3 or (n & 1) == 0:
        raise InvalidBaseError(f"{name} needs an odd n >= 3, got {n}")
