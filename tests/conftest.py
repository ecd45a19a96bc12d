"""Shared fixtures: RSA keys are slow to generate, so build them once."""

import math

import pytest
from Crypto.Util.number import getPrime

from tumblebit_setup import RsaKey

EXPONENT = 65537

_keys = {}


def _get_key(bits: int) -> RsaKey:
    if bits not in _keys:
        _keys[bits] = RsaKey.generate(bits, e=EXPONENT)
    return _keys[bits]


def _coprime_prime(bits: int, e: int = EXPONENT) -> int:
    """Random prime p of `bits` bits with gcd(e, p - 1) = 1."""
    while True:
        p = getPrime(bits)
        if math.gcd(e, p - 1) == 1:
            return p


def _small_factor_primes(small_prime: int, bits: int, e: int = EXPONENT) -> tuple[int, int]:
    """
    Factors (small_prime, q) of a modulus with a small prime factor.

    q is chosen so that both e and N*e stay invertible, which lets the
    prover run to completion on the bad modulus.
    """
    while True:
        q = getPrime(bits)
        n = small_prime * q
        if math.gcd(e * n, math.lcm(small_prime - 1, q - 1)) == 1:
            return small_prime, q


@pytest.fixture(scope="session")
def get_key():
    """Cached key generator: get_key(bits) -> RsaKey."""
    return _get_key


@pytest.fixture(scope="session")
def coprime_prime():
    return _coprime_prime


@pytest.fixture(scope="session")
def small_factor_primes():
    return _small_factor_primes


@pytest.fixture(scope="session")
def key_1024() -> RsaKey:
    return _get_key(1024)


@pytest.fixture(scope="session")
def key_2048() -> RsaKey:
    return _get_key(2048)


@pytest.fixture(scope="session")
def other_key_1024() -> RsaKey:
    return RsaKey.generate(1024, e=EXPONENT)
