"""
Setup parameters shared by prover and verifier.

Key parameters:
- public_string: Context string bound into every hash (e.g. a session id)
- alpha: Prime roughness bound; the permutation test shows N has no prime
  factor below alpha
- key_size: Declared bit length of the RSA modulus
- security_parameter: k, soundness error is about 2^{-k}

Setups are frozen. A verifier that wants to check a proof against a different
declared parameter derives a copy with replace() and leaves the original as
it was.
"""

import dataclasses
from dataclasses import dataclass

DEFAULT_SECURITY_PARAMETER = 128
DEFAULT_PUBLIC_STRING = b"public string"


@dataclass(frozen=True)
class PermutationTestSetup:
    """Parameters for the permutation test protocol."""

    public_string: bytes
    alpha: int  # Roughness bound (prime)
    key_size: int  # Declared bit length of N
    security_parameter: int = DEFAULT_SECURITY_PARAMETER

    def __post_init__(self):
        if not isinstance(self.public_string, (bytes, bytearray)):
            raise TypeError("public_string must be bytes")
        if self.alpha <= 1:
            raise ValueError("alpha must be greater than 1")
        if self.key_size < 1:
            raise ValueError("key_size must be at least 1")
        if self.security_parameter < 1:
            raise ValueError("security_parameter must be at least 1")
        object.__setattr__(self, "public_string", bytes(self.public_string))

    def replace(self, **changes) -> "PermutationTestSetup":
        """Copy of this setup with some fields changed."""
        return dataclasses.replace(self, **changes)

    def clone(self) -> "PermutationTestSetup":
        return self.replace()


@dataclass(frozen=True)
class PoupardSternSetup:
    """Parameters for the Poupard-Stern protocol."""

    public_string: bytes
    key_size: int  # Declared bit length of N
    # Bounded by the SHA-256 digest the challenge w is cut from
    security_parameter: int = DEFAULT_SECURITY_PARAMETER

    def __post_init__(self):
        if not isinstance(self.public_string, (bytes, bytearray)):
            raise TypeError("public_string must be bytes")
        if self.key_size < 1:
            raise ValueError("key_size must be at least 1")
        if not 1 <= self.security_parameter <= 256:
            raise ValueError("security_parameter must be in [1, 256]")
        object.__setattr__(self, "public_string", bytes(self.public_string))

    @property
    def big_k(self) -> int:
        """Number of sampled bases, K = k + 1."""
        return self.security_parameter + 1

    def replace(self, **changes) -> "PoupardSternSetup":
        """Copy of this setup with some fields changed."""
        return dataclasses.replace(self, **changes)

    def clone(self) -> "PoupardSternSetup":
        return self.replace()
