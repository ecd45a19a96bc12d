"""
TumbleBit setup: proofs that an RSA public key was generated honestly.

Two non-interactive protocols let the holder of an RSA private key convince
a verifier holding only (N, e) that the modulus is safe to use in an
RSA-based puzzle-solver / payment hub:

- permutation_test: N has no prime factor below a bound alpha and
  x -> x^e is a permutation of Z_N
- poupard_stern: the prover knows the factorization of N

Both derive their challenges from MGF1/SHA-256 over the public key and a
public string, so a proof can be checked by anybody without interaction.

Usage:
    key = RsaKey.generate(2048)
    setup = PermutationTestSetup(b"session-1", alpha=997, key_size=2048)
    proof = key.create_permutation_test_proof(setup)
    assert key.public_key.verify_permutation_test(proof, setup)
"""

from . import permutation_test
from . import poupard_stern
from .errors import (
    BadModulusError,
    EncodingError,
    EncodingTooShortError,
    NegativeInputError,
    ProofFormatError,
    SearchExhaustedError,
    SetupError,
)
from .keys import RsaKey, RsaPubKey
from .messages import PermutationTestProof, PoupardSternProof
from .params import PermutationTestSetup, PoupardSternSetup

__version__ = "0.1.0"
__all__ = [
    "permutation_test",
    "poupard_stern",
    "RsaKey",
    "RsaPubKey",
    "PermutationTestSetup",
    "PoupardSternSetup",
    "PermutationTestProof",
    "PoupardSternProof",
    "SetupError",
    "EncodingError",
    "EncodingTooShortError",
    "NegativeInputError",
    "BadModulusError",
    "SearchExhaustedError",
    "ProofFormatError",
]
