"""
uvprime: primality and factorization for native word integers.

Deterministic Miller-Rabin and BPSW primality, Lucas tests, AKS, and a
factoring cascade of trial division, Pollard rho, SQUFOF, p-1, p+1 and HOLF.
"""
import logging

from .aks import is_prime_aks
from .config import (
    get_verbose,
    set_jit_enabled,
    set_large_prime_test,
    set_lucas_variant,
    set_mulmod_strategy,
    set_verbose,
    set_word_bits,
    word_bits,
    word_max,
)
from .errors import InvalidBaseError, InvariantError, UvPrimeError, WordOverflowError
from .factorization import (
    MAX_FACTORS,
    divisor_sum,
    divisors,
    factor,
    factor_exp,
    fermat_factor,
    holf_factor,
    pbrent_factor,
    pminus1_factor,
    pplus1_factor,
    prho_factor,
)
from .lucas import (
    LucasStrength,
    is_almost_extra_strong_lucas_pseudoprime,
    is_lucas_pseudoprime,
    lucas_sequence,
)
from .mulmod import addmod, mulmod, powmod, sqrmod, submod
from .primality import (
    Primality,
    is_bpsw_prime,
    is_frobenius_underwood_pseudoprime,
    is_prime,
    is_probable_prime,
    is_strong_pseudoprime,
)
from .squfof import racing_squfof_factor, squfof_factor
from .trial import trial_division, trial_factor

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
