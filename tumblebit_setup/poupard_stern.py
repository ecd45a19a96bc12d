"""
Poupard-Stern proof of knowledge of the factorization of an RSA modulus.

Non-interactive (Fiat-Shamir) version of the Poupard-Stern protocol. The
prover shows knowledge of phi(N) = (p-1)(q-1), which is equivalent to
knowing the factorization of N:

1. Derive K = k + 1 bases z_i in Z_N^* from public data.
2. Pick a secret r in [0, A) with A = 2^{|N|-1}, commit x_i = z_i^r mod N.
3. Challenge w = leading k bits of SHA-256(pub_key || public_string || x_0 || ... ).
4. Respond y = r + (N - phi(N)) * w, retrying with a fresh r unless y < A.

The verifier recomputes w and checks z_i^{y - N*w} = x_i for every i, which
holds because y - N*w = r - phi(N)*w.
"""

import logging
import math
import secrets

from .errors import BadModulusError, SearchExhaustedError
from .keys import RsaKey, RsaPubKey
from .mgf import MAX_SAMPLING_ATTEMPTS, sample_below, sha256_truncated
from .params import DEFAULT_SECURITY_PARAMETER
from .utils import byte_length, combine, i2osp, octet_length, os2ip

logger = logging.getLogger(__name__)

# Ceiling on r resamplings in prove(). A modulus that passes the checks in
# prove() accepts each r with probability > 1 - 2^{-k+1}.
MAX_PROVE_ATTEMPTS = 1000

# prove() refuses a modulus shorter than this many bits per bit of k
MIN_BITS_PER_SECURITY_BIT = 4


def get_k(k: int) -> int:
    """Number of bases, K = k + 1."""
    return k + 1


def sample_from_zn_star(
    pub_key: RsaPubKey,
    public_string: bytes,
    i: int,
    big_k: int,
    key_bit_length: int,
    max_attempts: int = MAX_SAMPLING_ATTEMPTS,
) -> int:
    """
    Derive the base z_i in Z_N^*.

    z_i is the first MGF1 output of
    pub_key || public_string || I2OSP(i, octet_length(K - 1)) || I2OSP(j, ...)
    (j = 2, 3, ...) that is below N and coprime to N.

    Args:
        pub_key: Public key (N, e)
        public_string: Public string from the setup
        i: Index of the base, 0 <= i < K
        big_k: K
        key_bit_length: Size of each candidate in bits
        max_attempts: Ceiling on candidates tried

    Returns:
        z_i
    """
    n = pub_key.modulus
    prefix = combine(pub_key.to_bytes(), public_string, i2osp(i, octet_length(big_k - 1)))
    candidate = sample_below(
        prefix,
        n,
        key_bit_length,
        accept=lambda z: math.gcd(z, n) == 1,
        max_attempts=max_attempts,
    )
    return os2ip(candidate)


def get_r(key_bit_length: int) -> int:
    """
    Secret commitment exponent, uniform in [0, 2^{key_bit_length-1}).

    SEC: This is the only non-deterministic value in either protocol and
    must never be revealed.
    """
    return secrets.randbelow(1 << (key_bit_length - 1))


def get_w(
    pub_key: RsaPubKey,
    public_string: bytes,
    x_values: list[int],
    k: int,
    key_bit_length: int,
) -> int:
    """
    Fiat-Shamir challenge.

    Args:
        pub_key: Public key (N, e)
        public_string: Public string from the setup
        x_values: Commitments x_0, ..., x_{K-1}
        k: Security parameter (challenge size in bits)
        key_bit_length: Declared bit length of N

    Returns:
        w in [0, 2^k)
    """
    width = byte_length(key_bit_length)
    encoded = combine(*(i2osp(x, width) for x in x_values))
    return sha256_truncated(combine(pub_key.to_bytes(), public_string, encoded), k)


def _check_modulus(n: int, phi: int, key_bit_length: int, k: int) -> None:
    if n.bit_length() != key_bit_length:
        raise BadModulusError(
            f"modulus has {n.bit_length()} bits, setup declares {key_bit_length}"
        )
    if n <= 1 << (key_bit_length - 1):
        raise BadModulusError("modulus must exceed 2^(key_size-1)")
    if key_bit_length < MIN_BITS_PER_SECURITY_BIT * k:
        raise BadModulusError(
            f"{key_bit_length}-bit modulus is too small for k={k}"
        )
    # SEC: y = r + (N - phi) * w must hide phi, which needs (N - phi) * 2^k
    # to be small next to the range of r
    if (n - phi) << k >= n:
        raise BadModulusError("(N - phi(N)) * 2^k must be smaller than N")


def prove(
    p: int,
    q: int,
    e: int,
    key_bit_length: int,
    public_string: bytes,
    k: int = DEFAULT_SECURITY_PARAMETER,
    max_attempts: int = MAX_PROVE_ATTEMPTS,
) -> tuple[list[int], int]:
    """
    Produce a Poupard-Stern proof.

    Args:
        p: First prime factor of N
        q: Second prime factor of N
        e: Public exponent
        key_bit_length: Declared bit length of N
        public_string: Public string from the setup
        k: Security parameter
        max_attempts: Ceiling on r resamplings

    Returns:
        (x_values, y)

    Raises:
        BadModulusError: if N cannot support the proof
        SearchExhaustedError: if no r yields an in-range y
    """
    key = RsaKey.from_factors(p, q, e)
    pub_key = key.public_key
    n = key.modulus
    phi = (p - 1) * (q - 1)

    _check_modulus(n, phi, key_bit_length, k)

    big_k = get_k(k)
    upper_limit = 1 << (key_bit_length - 1)

    z_values = [
        sample_from_zn_star(pub_key, public_string, i, big_k, key_bit_length)
        for i in range(big_k)
    ]

    for attempt in range(1, max_attempts + 1):
        r = get_r(key_bit_length)
        x_values = [pow(z, r, n) for z in z_values]
        w = get_w(pub_key, public_string, x_values, k, key_bit_length)
        y = r + (n - phi) * w
        if 0 <= y < upper_limit:
            logger.debug("poupard-stern prove: K=%d accepted after %d attempts", big_k, attempt)
            return x_values, y

    raise SearchExhaustedError(f"no valid response after {max_attempts} attempts")


def verify(
    pub_key: RsaPubKey,
    x_values: list[int],
    y: int,
    key_bit_length: int,
    public_string: bytes,
    k: int = DEFAULT_SECURITY_PARAMETER,
) -> bool:
    """
    Verify a Poupard-Stern proof.

    Args:
        pub_key: Public key (N, e)
        x_values: Commitments from prove()
        y: Response from prove()
        key_bit_length: Declared bit length of N
        public_string: Public string from the setup
        k: Security parameter

    Returns:
        True if the proof is accepted, False otherwise
    """
    n = pub_key.modulus
    upper_limit = 1 << (key_bit_length - 1)

    if not 0 <= y < upper_limit:
        return False

    # 2^{L-1} < N < 2^L
    if n <= upper_limit or n.bit_length() != key_bit_length:
        return False

    big_k = get_k(k)
    if len(x_values) != big_k:
        return False
    if any(not 0 <= x < n for x in x_values):
        return False

    w = get_w(pub_key, public_string, x_values, k, key_bit_length)
    # Usually negative; pow() inverts z_i modulo N, which is defined on Z_N^*
    r_prime = y - n * w

    for i, x in enumerate(x_values):
        try:
            z = sample_from_zn_star(pub_key, public_string, i, big_k, key_bit_length)
        except SearchExhaustedError:
            logger.debug("poupard-stern verify: z_%d sampling exhausted", i)
            return False
        if pow(z, r_prime, n) != x:
            return False
    return True
