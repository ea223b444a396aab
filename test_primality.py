import random
import unittest

from sympy import isprime

from uvprime import config
from uvprime.errors import InvalidBaseError, WordOverflowError
from uvprime.primality import (
    MR_BASES_64,
    Primality,
    is_bpsw_prime,
    is_frobenius_underwood_pseudoprime,
    is_prime,
    is_probable_prime,
    is_strong_pseudoprime,
    miller_rabin,
)
from uvprime.sieve import SMALL_PRIMES_LIMIT, get_small_primes, is_small_prime, next_prime, primes_from


class TestPrimalityCascade(unittest.TestCase):
    """Test the three-valued primality cascade"""

    def test_small_primes(self):
        """Test known small primes"""
        small_primes = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59]
        for p in small_primes:
            self.assertEqual(is_probable_prime(p), Primality.PRIME, f"{p} should be prime")

    def test_small_composites(self):
        """Test known small composites"""
        composites = [0, 1, 4, 6, 8, 9, 10, 12, 14, 15, 16, 18, 20, 21, 22, 24, 25, 121, 3481]
        for c in composites:
            self.assertEqual(is_probable_prime(c), Primality.COMPOSITE, f"{c} should be composite")

    def test_exhaustive_against_sympy(self):
        """Every n below 20000, covering the sieve and table stages"""
        for n in range(20000):
            self.assertEqual(is_prime(n), isprime(n), f"disagreement at {n}")

    def test_around_table_limit(self):
        """Numbers on both sides of the small prime table boundary"""
        for n in range(SMALL_PRIMES_LIMIT - 500, SMALL_PRIMES_LIMIT + 500):
            self.assertEqual(is_prime(n), isprime(n), f"disagreement at {n}")

    def test_deterministic_range_is_exact(self):
        """Below the last witness threshold the answer is PRIME, never PROBABLE_PRIME"""
        for p in (104729, 1299709, 15485863, 982451653, 2147483647, 4759123141 - 2,
                  999999999989, 3071837692357849 - 8):
            verdict = is_probable_prime(p)
            if isprime(p):
                self.assertEqual(verdict, Primality.PRIME, p)
            else:
                self.assertEqual(verdict, Primality.COMPOSITE, p)

    def test_random_deterministic_range(self):
        rng = random.Random(2024)
        for _ in range(2000):
            n = rng.randrange(SMALL_PRIMES_LIMIT, 3071837692357849) | 1
            self.assertEqual(is_prime(n), isprime(n), f"disagreement at {n}")

    def test_random_full_word(self):
        rng = random.Random(77)
        for _ in range(1000):
            n = rng.randrange(3071837692357849, 2**64) | 1
            self.assertEqual(is_prime(n), isprime(n), f"disagreement at {n}")

    def test_large_primes_are_probable(self):
        """Above the thresholds BPSW answers PROBABLE_PRIME"""
        for p in (2**61 - 1, 18446744073709551557):
            self.assertEqual(is_probable_prime(p), Primality.PROBABLE_PRIME)

    def test_mr7_gives_exact_answers(self):
        config.set_large_prime_test("mr7")
        try:
            self.assertEqual(is_probable_prime(2**61 - 1), Primality.PRIME)
            self.assertEqual(is_probable_prime(18446744073709551557), Primality.PRIME)
            self.assertEqual(is_probable_prime(3825123056546413051), Primality.COMPOSITE)
        finally:
            config.set_large_prime_test("bpsw")

    def test_carmichael_numbers(self):
        """Carmichael numbers fool the Fermat test but not this cascade"""
        carmichael = [561, 1105, 1729, 2465, 2821, 6601, 8911, 10585, 15841, 29341, 41041,
                      46657, 52633, 62745, 63973, 75361, 101101, 115921, 126217, 162401,
                      172081, 188461, 252601, 278545, 294409, 314821, 334153, 340561]
        for c in carmichael:
            self.assertEqual(is_probable_prime(c), Primality.COMPOSITE, f"{c} is a Carmichael number")

    def test_strong_pseudoprimes(self):
        """Strong pseudoprimes to many small bases are still caught"""
        spsp = [2047, 3277, 4033, 4681, 8321, 3215031751, 2152302898747, 3474749660383,
                341550071728321, 3825123056546413051]
        for c in spsp:
            self.assertFalse(is_prime(c), f"{c} should be composite")

    def test_mersenne(self):
        self.assertFalse(is_prime(2047))
        self.assertFalse(is_prime(8388607))
        self.assertTrue(is_prime(2147483647))
        self.assertTrue(is_prime(2**61 - 1))
        self.assertFalse(is_prime(2**64 - 1))

    def test_word_overflow(self):
        with self.assertRaises(WordOverflowError):
            is_probable_prime(2**64)
        with self.assertRaises(WordOverflowError):
            is_probable_prime(-7)

    def test_32_bit_tables(self):
        config.set_word_bits(32)
        try:
            self.assertEqual(is_probable_prime(4294967291), Primality.PRIME)
            self.assertEqual(is_probable_prime(4294967279), Primality.PRIME)
            self.assertEqual(is_probable_prime(4294967295), Primality.COMPOSITE)
            with self.assertRaises(WordOverflowError):
                is_probable_prime(2**32 + 15)
        finally:
            config.set_word_bits(64)


class TestMillerRabin(unittest.TestCase):
    """Test the strong probable prime test"""

    def test_base_two_pseudoprimes(self):
        for c in (2047, 3277, 4033, 4681, 8321):
            self.assertTrue(is_strong_pseudoprime(c, 2), c)
            self.assertFalse(is_strong_pseudoprime(c, 3), c)

    def test_multi_base_pseudoprime(self):
        # Strong pseudoprime to bases 2, 3, 5 and 7, caught by 11
        self.assertTrue(is_strong_pseudoprime(3215031751, 2, 3, 5, 7))
        self.assertFalse(is_strong_pseudoprime(3215031751, 2, 3, 5, 7, 11))

    def test_primes_pass_every_base(self):
        for p in (5, 7, 101, 65537, 999999937):
            for a in (2, 3, p - 1):
                self.assertTrue(is_strong_pseudoprime(p, a))

    def test_tiny_and_even(self):
        self.assertTrue(is_strong_pseudoprime(2, 5))
        self.assertFalse(is_strong_pseudoprime(1, 5))
        self.assertFalse(is_strong_pseudoprime(100, 3))

    def test_invalid_bases(self):
        with self.assertRaises(InvalidBaseError):
            is_strong_pseudoprime(101, 1)
        with self.assertRaises(InvalidBaseError):
            is_strong_pseudoprime(101, 101)
        with self.assertRaises(InvalidBaseError):
            is_strong_pseudoprime(101)
        # Also a ValueError for callers that do not know the taxonomy
        with self.assertRaises(ValueError):
            is_strong_pseudoprime(101, 0)

    def test_seven_bases_exact_on_known_psp(self):
        self.assertFalse(miller_rabin(3825123056546413051, MR_BASES_64))
        self.assertTrue(miller_rabin(18446744073709551557, MR_BASES_64))


class TestBpswAndFrobenius(unittest.TestCase):
    """Test BPSW with each Lucas variant and the Frobenius-Underwood test"""

    def test_bpsw_variants_agree(self):
        rng = random.Random(5)
        samples = [rng.randrange(3, 2**64) | 1 for _ in range(300)]
        samples += [5459, 5777, 10877, 989, 3239, 2047, 3825123056546413051]
        for variant in config.LUCAS_VARIANTS:
            config.set_lucas_variant(variant)
            try:
                for n in samples:
                    self.assertEqual(is_bpsw_prime(n), isprime(n), f"{variant} at {n}")
            finally:
                config.set_lucas_variant("strong")

    def test_frobenius_underwood_small(self):
        for n in range(1, 20000):
            self.assertEqual(is_frobenius_underwood_pseudoprime(n), isprime(n), f"disagreement at {n}")

    def test_frobenius_underwood_large(self):
        rng = random.Random(11)
        for _ in range(300):
            n = rng.randrange(2**40, 2**64) | 1
            self.assertEqual(is_frobenius_underwood_pseudoprime(n), isprime(n), f"disagreement at {n}")
        self.assertTrue(is_frobenius_underwood_pseudoprime(18446744073709551557))

    def test_frobenius_underwood_squares(self):
        for p in (101, 65537, 999983):
            self.assertFalse(is_frobenius_underwood_pseudoprime(p * p))


class TestSmallPrimeServices(unittest.TestCase):
    """Test the prime table, the small prime oracle and the generators"""

    def test_table(self):
        primes = get_small_primes()
        self.assertEqual(primes[:10], (2, 3, 5, 7, 11, 13, 17, 19, 23, 29))
        self.assertEqual(len(primes), 6542)
        self.assertEqual(primes[-1], 65521)

    def test_oracle(self):
        self.assertTrue(is_small_prime(65521))
        self.assertFalse(is_small_prime(65535))
        with self.assertRaises(ValueError):
            is_small_prime(SMALL_PRIMES_LIMIT + 1)

    def test_primes_from_crosses_table(self):
        got = list(primes_from(65500, 66000))
        expected = [n for n in range(65500, 66001) if isprime(n)]
        self.assertEqual(got, expected)

    def test_primes_from_empty(self):
        self.assertEqual(list(primes_from(24, 28)), [])
        self.assertEqual(list(primes_from(10, 5)), [])

    def test_next_prime(self):
        self.assertEqual(next_prime(0), 2)
        self.assertEqual(next_prime(2), 3)
        self.assertEqual(next_prime(65521), 65537)
        self.assertEqual(next_prime(1000000), 1000003)
        self.assertEqual(next_prime(2**32 - 6), 2**32 - 5)


if __name__ == '__main__':
    unittest.main(verbosity=2)
