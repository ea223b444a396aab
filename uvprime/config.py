"""
Runtime configuration for the native-word engine.

All settings are plain module globals, read once from the environment at
import time and changeable afterwards through the setters below.

ENVIRONMENT:
- UVPRIME_WORD_BITS: 32 or 64 (default 64). Every public entry point rejects
  inputs above 2^bits - 1.
- UVPRIME_MULMOD: auto, widen, binary or halfword (default auto).
- UVPRIME_LARGE_TEST: bpsw or mr7 (default bpsw). Test used above the last
  deterministic Miller-Rabin threshold.
- UVPRIME_LUCAS: standard, strong, extra_strong or almost_extra_strong
  (default strong). Lucas half of BPSW.
- UVPRIME_VERBOSE: integer verbosity (default 0).
- UVPRIME_JIT: set to 0 to keep the numba kernels switched off.
"""
import logging
import os

MULMOD_STRATEGIES = ("auto", "widen", "binary", "halfword")
LARGE_PRIME_TESTS = ("bpsw", "mr7")
LUCAS_VARIANTS = ("standard", "strong", "extra_strong", "almost_extra_strong")

_logger = logging.getLogger("uvprime")

_word_bits: int = 64
_mulmod_strategy: str = "auto"
_large_prime_test: str = "bpsw"
_lucas_variant: str = "strong"
_verbose: int = 0
_jit_enabled: bool = True

# Observers notified when the word size or mulmod strategy changes
_listeners = []


def on_change(callback) -> None:
    """Register a callable invoked after any arithmetic setting changes."""
    _listeners.append(callback)


def _notify() -> None:
    for callback in _listeners:
        callback()


def word_bits() -> int:
    return _word_bits


def set_word_bits(bits: int) -> None:
    """Select the native word width (32 or 64 bits)."""
    global _word_bits
    if bits not in (32, 64):
        raise ValueError(f"word size must be 32 or 64 bits, not {bits}")
    _word_bits = bits
    _notify()


def word_max() -> int:
    """Largest representable unsigned word (UV_MAX)."""
    return (1 << _word_bits) - 1


def half_word() -> int:
    """Operands below this can be multiplied without leaving the word."""
    return 1 << (_word_bits // 2)


def mulmod_strategy_setting() -> str:
    return _mulmod_strategy


def set_mulmod_strategy(name: str) -> None:
    global _mulmod_strategy
    if name not in MULMOD_STRATEGIES:
        raise ValueError(f"unknown mulmod strategy {name!r}, expected one of {MULMOD_STRATEGIES}")
    _mulmod_strategy = name
    _notify()


def large_prime_test() -> str:
    return _large_prime_test


def set_large_prime_test(name: str) -> None:
    global _large_prime_test
    if name not in LARGE_PRIME_TESTS:
        raise ValueError(f"unknown large prime test {name!r}, expected one of {LARGE_PRIME_TESTS}")
    _large_prime_test = name


def lucas_variant() -> str:
    return _lucas_variant


def set_lucas_variant(name: str) -> None:
    global _lucas_variant
    if name not in LUCAS_VARIANTS:
        raise ValueError(f"unknown Lucas variant {name!r}, expected one of {LUCAS_VARIANTS}")
    _lucas_variant = name


def get_verbose() -> int:
    return _verbose


def set_verbose(level: int) -> None:
    """
    Set the diagnostic verbosity.

    0 leaves the uvprime logger at WARNING, 1 selects INFO and anything
    higher selects DEBUG. Verbosity never changes a result.
    """
    global _verbose
    _verbose = int(level)
    if _verbose <= 0:
        _logger.setLevel(logging.WARNING)
    elif _verbose == 1:
        _logger.setLevel(logging.INFO)
    else:
        _logger.setLevel(logging.DEBUG)


def jit_enabled() -> bool:
    return _jit_enabled


def set_jit_enabled(enabled: bool) -> None:
    global _jit_enabled
    _jit_enabled = bool(enabled)


def _load_environment() -> None:
    """Apply UVPRIME_* environment variables (called once at import)."""
    global _jit_enabled
    bits = os.environ.get("UVPRIME_WORD_BITS")
    if bits:
        set_word_bits(int(bits))
    strategy = os.environ.get("UVPRIME_MULMOD")
    if strategy:
        set_mulmod_strategy(strategy.strip().lower())
    large = os.environ.get("UVPRIME_LARGE_TEST")
    if large:
        set_large_prime_test(large.strip().lower())
    lucas = os.environ.get("UVPRIME_LUCAS")
    if lucas:
        set_lucas_variant(lucas.strip().lower())
    verbose = os.environ.get("UVPRIME_VERBOSE")
    if verbose:
        set_verbose(int(verbose))
    if os.environ.get("UVPRIME_JIT", "1").strip() == "0":
        _jit_enabled = False


_load_environment()
