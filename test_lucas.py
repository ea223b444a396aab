import random
import unittest

from sympy import isprime, jacobi_symbol

from uvprime.errors import InvalidBaseError
from uvprime.lucas import (
    LucasStrength,
    _lucas_sequence_generic,
    extra_strong_params,
    is_almost_extra_strong_lucas_pseudoprime,
    is_lucas_pseudoprime,
    lucas_sequence,
    lucas_v,
    selfridge_params,
)
from uvprime.util import jacobi, kronecker


def reference_lucas(P, Q, k, n):
    """Plain recurrence U_{j+1} = P U_j - Q U_{j-1}, for checking the ladders."""
    U0, U1 = 0, 1
    V0, V1 = 2, P
    for _ in range(k):
        U0, U1 = U1, P * U1 - Q * U0
        V0, V1 = V1, P * V1 - Q * V0
    return U0 % n, V0 % n, pow(Q, k, n)


class TestLucasSequence(unittest.TestCase):
    """Test the three ladders against the recurrence and against each other"""

    def test_matches_recurrence(self):
        for n in (7, 15, 97, 1001, 65537):
            for P, Q in ((1, -1), (3, 1), (1, -2), (5, 3), (-2, 7), (4, 1)):
                for k in (0, 1, 2, 3, 10, 57, 128):
                    self.assertEqual(lucas_sequence(n, P, Q, k), reference_lucas(P, Q, k, n),
                                     f"n={n} P={P} Q={Q} k={k}")

    def test_fast_paths_equal_generic(self):
        rng = random.Random(31337)
        for _ in range(200):
            n = rng.randrange(3, 2**64) | 1
            k = rng.randrange(1, 2**64)
            for P, Q in ((1, -1), (3, 1), (7, 1)):
                self.assertEqual(lucas_sequence(n, P, Q, k), _lucas_sequence_generic(n, P, Q, k),
                                 f"n={n} P={P} Q={Q} k={k}")

    def test_zero_discriminant(self):
        # P = 2, Q = 1: D = 0, U_k = k, V_k = 2
        for k in (1, 2, 5, 100):
            self.assertEqual(lucas_sequence(101, 2, 1, k), reference_lucas(2, 1, k, 101))

    def test_v_chain(self):
        for n in (97, 1000003, 2**64 - 59):
            for P in (3, 5, 9):
                for k in (0, 1, 2, 17, 1000, 123456789):
                    self.assertEqual(lucas_v(P, k, n), lucas_sequence(n, P, 1, k)[1] if k else 2 % n)

    def test_invalid_modulus(self):
        with self.assertRaises(InvalidBaseError):
            lucas_sequence(10, 1, -1, 5)
        with self.assertRaises(InvalidBaseError):
            lucas_sequence(1, 1, -1, 5)


class TestParameters(unittest.TestCase):
    """Test Selfridge and Baillie parameter selection"""

    def test_selfridge(self):
        # D = 5 has (5/7) = -1
        self.assertEqual(selfridge_params(7), (1, -1, 5))
        # 5, -7 and 9 are residues mod 11 and -11 is 11 itself
        self.assertEqual(selfridge_params(11), (1, -3, 13))

    def test_selfridge_rejects_squares(self):
        for p in (101, 1009):
            self.assertIsNone(selfridge_params(p * p))

    def test_extra_strong(self):
        # D = 5 for P = 3
        self.assertEqual(extra_strong_params(7), (3, 1, 5))

    def test_extra_strong_increment(self):
        with self.assertRaises(InvalidBaseError):
            extra_strong_params(101, 0)
        with self.assertRaises(InvalidBaseError):
            extra_strong_params(101, 257)


class TestSymbols(unittest.TestCase):
    """Test the Jacobi and Kronecker symbols"""

    def test_jacobi_matches_sympy(self):
        for n in range(1, 200, 2):
            for a in range(-60, 60):
                self.assertEqual(jacobi(a, n), jacobi_symbol(a % n, n), f"({a}/{n})")

    def test_jacobi_even_modulus(self):
        with self.assertRaises(InvalidBaseError):
            jacobi(3, 10)

    def test_kronecker_equals_jacobi_on_odd_moduli(self):
        for n in range(1, 200, 2):
            for a in range(-30, 30):
                self.assertEqual(kronecker(a, n), jacobi(a, n))

    def test_kronecker_special_moduli(self):
        self.assertEqual(kronecker(1, 0), 1)
        self.assertEqual(kronecker(-1, 0), 1)
        self.assertEqual(kronecker(5, 0), 0)
        self.assertEqual(kronecker(7, 2), 1)
        self.assertEqual(kronecker(3, 2), -1)
        self.assertEqual(kronecker(4, 2), 0)
        self.assertEqual(kronecker(2, -1), 1)
        self.assertEqual(kronecker(-1, -1), -1)
        self.assertEqual(kronecker(5, 12), -1)
        self.assertEqual(kronecker(3, 8), -1)
        self.assertEqual(kronecker(-5, -7), -1)

    def test_kronecker_multiplicative_in_modulus(self):
        moduli = [m for m in range(-12, 13) if m]
        for a in range(-20, 21):
            for m in moduli:
                for n in moduli:
                    self.assertEqual(kronecker(a, m * n), kronecker(a, m) * kronecker(a, n),
                                     f"a={a} m={m} n={n}")


class TestLucasPseudoprimes(unittest.TestCase):
    """Test each strength against known pseudoprimes and primes"""

    LUCAS_PSP = [323, 377, 1159, 1829, 3827, 5459, 5777, 9071, 9179, 10877]
    STRONG_LUCAS_PSP = [5459, 5777, 10877, 16109, 18971, 22499, 24569, 25199, 40309, 58519]
    EXTRA_STRONG_LUCAS_PSP = [989, 3239, 5777, 10877, 27971, 29681, 30739, 31631, 39059, 72389]

    def test_standard(self):
        for c in self.LUCAS_PSP:
            self.assertTrue(is_lucas_pseudoprime(c, LucasStrength.STANDARD), c)

    def test_strong(self):
        for c in self.STRONG_LUCAS_PSP:
            self.assertTrue(is_lucas_pseudoprime(c, LucasStrength.STRONG), c)
        # Lucas pseudoprimes that are not strong ones
        for c in (323, 377, 1159):
            self.assertFalse(is_lucas_pseudoprime(c, LucasStrength.STRONG), c)

    def test_extra_strong(self):
        for c in self.EXTRA_STRONG_LUCAS_PSP:
            self.assertTrue(is_lucas_pseudoprime(c, LucasStrength.EXTRA_STRONG), c)

    def test_almost_extra_strong_accepts_extra_strong_psp(self):
        for c in self.EXTRA_STRONG_LUCAS_PSP:
            self.assertTrue(is_almost_extra_strong_lucas_pseudoprime(c), c)

    def test_strong_implies_standard(self):
        for n in range(3, 30000, 2):
            if is_lucas_pseudoprime(n, LucasStrength.STRONG):
                self.assertTrue(is_lucas_pseudoprime(n, LucasStrength.STANDARD), n)

    def test_primes_pass_every_strength(self):
        rng = random.Random(8)
        primes = [p for p in range(3, 5000) if isprime(p)]
        while len(primes) < 400:
            n = rng.randrange(2**32, 2**64) | 1
            if isprime(n):
                primes.append(n)
        for p in primes:
            for strength in LucasStrength:
                self.assertTrue(is_lucas_pseudoprime(p, strength), f"{p} {strength.name}")
            self.assertTrue(is_almost_extra_strong_lucas_pseudoprime(p), p)
            self.assertTrue(is_almost_extra_strong_lucas_pseudoprime(p, 2), p)

    def test_composites_mostly_rejected(self):
        psp = set(self.LUCAS_PSP)
        for n in range(9, 11000, 2):
            if not isprime(n) and n not in psp:
                self.assertFalse(is_lucas_pseudoprime(n, LucasStrength.STANDARD), n)

    def test_small_and_even(self):
        for strength in LucasStrength:
            self.assertFalse(is_lucas_pseudoprime(1, strength))
            self.assertTrue(is_lucas_pseudoprime(2, strength))
            self.assertFalse(is_lucas_pseudoprime(100, strength))
        self.assertTrue(is_almost_extra_strong_lucas_pseudoprime(5))

    def test_large_increment_small_n(self):
        for p in (7, 11, 13, 101, 331, 607):
            self.assertTrue(is_almost_extra_strong_lucas_pseudoprime(p, 200), p)
        self.assertFalse(is_almost_extra_strong_lucas_pseudoprime(9, 200))


if __name__ == '__main__':
    unittest.main(verbosity=2)
