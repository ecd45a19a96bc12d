"""
Read-only views over RSA key material.

RsaPubKey is what a verifier holds: (N, e) and a canonical byte encoding of
the public key. RsaKey is what a prover holds: the primes p, q and the
derived private exponent.

The canonical encoding is the DER SubjectPublicKeyInfo structure. It depends
only on (N, e), so a verifier that rebuilds the key from those two integers
hashes exactly the bytes the prover hashed.

Raw RSA (no padding) is implemented here on top of the key components; the
protocols need it for values that are not messages, such as the rho values
of the permutation test, and for exponents such as N*e that a standard RSA
key would refuse.
"""

import math

from Crypto.PublicKey import RSA
from Crypto.Util.number import inverse

from .errors import BadModulusError
from .utils import byte_length, i2osp, os2ip


class RsaPubKey:
    """RSA public key (N, e)."""

    def __init__(self, modulus: int, exponent: int):
        """
        Build a public key view.

        No consistency checks are applied: verifiers must be able to hold
        (and reject proofs for) malformed moduli.

        Args:
            modulus: RSA modulus N
            exponent: Public exponent e
        """
        if modulus < 1 or exponent < 1:
            raise ValueError("modulus and exponent must be positive")
        self._key = RSA.construct((modulus, exponent), consistency_check=False)
        self._encoded = None

    @classmethod
    def from_pycryptodome(cls, key: RSA.RsaKey) -> "RsaPubKey":
        """Wrap a pycryptodome key (public or private)."""
        return cls(key.n, key.e)

    @property
    def modulus(self) -> int:
        return self._key.n

    @property
    def exponent(self) -> int:
        return self._key.e

    @property
    def bit_length(self) -> int:
        """Bit length of N."""
        return self.modulus.bit_length()

    @property
    def byte_length(self) -> int:
        """Width in octets of an RSA block for this key."""
        return byte_length(self.bit_length)

    def to_bytes(self) -> bytes:
        """DER SubjectPublicKeyInfo encoding of (N, e)."""
        if self._encoded is None:
            self._encoded = self._key.export_key(format="DER")
        return self._encoded

    def with_exponent(self, exponent: int) -> "RsaPubKey":
        """Public key with the same modulus and a different exponent."""
        return RsaPubKey(self.modulus, exponent)

    def encrypt(self, data: bytes) -> bytes:
        """
        Raw RSA encryption: data^e mod N.

        Args:
            data: Block whose integer value is below N

        Returns:
            Result encoded in exactly byte_length octets
        """
        value = os2ip(data)
        if value >= self.modulus:
            raise ValueError("block is not smaller than the modulus")
        return i2osp(pow(value, self.exponent, self.modulus), self.byte_length)

    def verify_permutation_test(self, proof, setup) -> bool:
        """Check a PermutationTestProof against this key and a setup."""
        from . import permutation_test

        return permutation_test.verify(
            self,
            proof.signatures,
            setup.alpha,
            setup.key_size,
            setup.public_string,
            setup.security_parameter,
        )

    def verify_poupard_stern(self, proof, setup) -> bool:
        """Check a PoupardSternProof against this key and a setup."""
        from . import poupard_stern

        return poupard_stern.verify(
            self,
            proof.x_values,
            proof.y,
            setup.key_size,
            setup.public_string,
            setup.security_parameter,
        )

    def __eq__(self, other):
        if not isinstance(other, RsaPubKey):
            return NotImplemented
        return self.modulus == other.modulus and self.exponent == other.exponent

    def __hash__(self):
        return hash((self.modulus, self.exponent))

    def __repr__(self) -> str:
        return f"RsaPubKey(bits={self.bit_length}, e={self.exponent})"


class RsaKey:
    """
    RSA private key built from two primes.

    Instances are never mutated. Keys sharing p and q but using another
    exponent are obtained with with_exponent(), which returns a separate
    object.
    """

    def __init__(self, key: RSA.RsaKey):
        """
        Wrap a pycryptodome private key.

        Args:
            key: Private RSA key with p, q, d and u available
        """
        if not key.has_private():
            raise ValueError("RsaKey needs a private key")
        self._key = key
        self._public_key = None

    @classmethod
    def generate(cls, bits: int, e: int = 65537) -> "RsaKey":
        """Generate a fresh key pair with a modulus of exactly `bits` bits."""
        return cls(RSA.generate(bits, e=e))

    @classmethod
    def from_pycryptodome(cls, key: RSA.RsaKey) -> "RsaKey":
        return cls(key)

    @classmethod
    def from_factors(cls, p: int, q: int, e: int) -> "RsaKey":
        """
        Derive the private key for exponent e from the primes p and q.

        d is the inverse of e modulo lcm(p-1, q-1).

        Raises:
            BadModulusError: if e is not invertible or p, q are unusable
        """
        if p < 2 or q < 2 or p == q:
            raise BadModulusError("p and q must be two distinct primes")
        try:
            d = inverse(e, math.lcm(p - 1, q - 1))
            u = inverse(p, q)
        except ValueError as exc:
            raise BadModulusError(
                f"exponent {e} has no inverse for the given factors"
            ) from exc
        return cls(RSA.construct((p * q, e, d, p, q, u), consistency_check=False))

    @property
    def p(self) -> int:
        return self._key.p

    @property
    def q(self) -> int:
        return self._key.q

    @property
    def modulus(self) -> int:
        return self._key.n

    @property
    def exponent(self) -> int:
        return self._key.e

    @property
    def bit_length(self) -> int:
        return self.modulus.bit_length()

    @property
    def public_key(self) -> RsaPubKey:
        if self._public_key is None:
            self._public_key = RsaPubKey(self.modulus, self.exponent)
        return self._public_key

    def with_exponent(self, exponent: int) -> "RsaKey":
        """Independent key over the same primes with another public exponent."""
        return RsaKey.from_factors(self.p, self.q, exponent)

    def decrypt(self, data: bytes) -> bytes:
        """
        Raw RSA decryption (signing): data^d mod N, computed with the CRT.

        Args:
            data: Block whose integer value is below N

        Returns:
            Result encoded in exactly byte_length(|N|) octets
        """
        value = os2ip(data)
        if value >= self.modulus:
            raise ValueError("block is not smaller than the modulus")
        key = self._key
        m_p = pow(value, key.dp, key.p)
        m_q = pow(value, key.dq, key.q)
        h = ((m_q - m_p) * key.u) % key.q
        return i2osp(m_p + h * key.p, byte_length(self.bit_length))

    def create_permutation_test_proof(self, setup):
        """Prove the permutation test claim for this key under `setup`."""
        from . import permutation_test
        from .messages import PermutationTestProof

        signatures = permutation_test.prove(
            self.p,
            self.q,
            self.exponent,
            setup.alpha,
            setup.public_string,
            setup.security_parameter,
        )
        return PermutationTestProof(signatures)

    def create_poupard_stern_proof(self, setup):
        """Prove knowledge of the factorization of N under `setup`."""
        from . import poupard_stern
        from .messages import PoupardSternProof

        x_values, y = poupard_stern.prove(
            self.p,
            self.q,
            self.exponent,
            setup.key_size,
            setup.public_string,
            setup.security_parameter,
        )
        return PoupardSternProof(x_values, y)

    def __repr__(self) -> str:
        return f"RsaKey(bits={self.bit_length}, e={self.exponent})"
