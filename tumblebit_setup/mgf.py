"""
Hash-derived sampling for the setup protocols.

All "randomness" inside the proofs (the rho values of the permutation test
and the z values of Poupard-Stern) is derived from MGF1 over SHA-256 applied
to public data, so anybody holding the public key can recompute it:

    candidate_j = MGF1(prefix || I2OSP(j, octet_length(j)), output_bits)

for j = 2, 3, ... until a candidate is accepted.

SEC: j starts at 2. Peers that start elsewhere derive different values
and every verification fails.
"""

from typing import Callable, Iterator

from Crypto.Hash import SHA256
from Crypto.Signature.pss import MGF1

from .errors import SearchExhaustedError
from .utils import byte_length, i2osp, octet_length, os2ip, truncate_to_bits

# First sub-index tried for every sampled element
FIRST_SUB_INDEX = 2

# Ceiling on candidates tried per sampled element. For a modulus whose bit
# length matches the requested output length each candidate is accepted with
# probability > 1/2, so hitting this means the inputs are malformed.
MAX_SAMPLING_ATTEMPTS = 1000


def mgf1_sha256(seed: bytes, output_bits: int) -> bytes:
    """
    MGF1 mask generation function instantiated with SHA-256.

    Args:
        seed: Input seed
        output_bits: Requested output size in bits

    Returns:
        byte_length(output_bits) pseudorandom octets
    """
    return MGF1(seed, byte_length(output_bits), SHA256)


def sha256_truncated(data: bytes, bits: int) -> int:
    """
    Hash `data` with SHA-256 and keep the leading `bits` bits.

    Args:
        data: Input to hash
        bits: Number of leading digest bits to keep (1-256)

    Returns:
        Integer in [0, 2^bits)
    """
    if not 0 < bits <= 8 * SHA256.digest_size:
        raise ValueError(f"cannot take {bits} bits of a SHA-256 digest")
    digest = truncate_to_bits(SHA256.new(data).digest(), bits)
    return os2ip(digest) >> (8 * len(digest) - bits)


def hash_candidates(
    prefix: bytes,
    output_bits: int,
    max_attempts: int = MAX_SAMPLING_ATTEMPTS,
) -> Iterator[tuple[int, bytes]]:
    """
    Lazily produce the candidate sequence for one sampled element.

    Args:
        prefix: Public key bytes || public string || encoded index
        output_bits: Size of each candidate in bits
        max_attempts: Number of candidates to produce before stopping

    Yields:
        (j, candidate) pairs for j = 2, 3, ...
    """
    for j in range(FIRST_SUB_INDEX, FIRST_SUB_INDEX + max_attempts):
        yield j, mgf1_sha256(prefix + i2osp(j, octet_length(j)), output_bits)


def sample_below(
    prefix: bytes,
    bound: int,
    output_bits: int,
    accept: Callable[[int], bool] | None = None,
    max_attempts: int = MAX_SAMPLING_ATTEMPTS,
) -> bytes:
    """
    Return the first candidate whose value is below `bound`.

    Args:
        prefix: Public key bytes || public string || encoded index
        bound: Exclusive upper bound on the candidate value (usually N)
        output_bits: Size of each candidate in bits
        accept: Optional extra predicate on the candidate value
        max_attempts: Ceiling on the number of candidates tried

    Returns:
        The accepted candidate as an octet string

    Raises:
        SearchExhaustedError: if no candidate is accepted
    """
    for _, candidate in hash_candidates(prefix, output_bits, max_attempts):
        value = os2ip(candidate)
        if value >= bound:
            continue
        if accept is not None and not accept(value):
            continue
        return candidate
    raise SearchExhaustedError(
        f"no acceptable candidate after {max_attempts} attempts"
    )
