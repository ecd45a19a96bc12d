"""
Utility functions for the setup protocols.

Octet-string conversions follow RFC 8017 (I2OSP / OS2IP). Every byte string
produced here is fed to SHA-256 on both the prover and the verifier side, so
the encodings must stay bit-for-bit stable.
"""

import math
from typing import Iterator

from .errors import EncodingTooShortError, NegativeInputError


def octet_length(x: int) -> int:
    """
    Minimal number of octets able to represent x.

    Zero still occupies one octet, so an index of 0 has a non-empty
    encoding.

    Args:
        x: Non-negative integer

    Returns:
        Number of octets, at least 1
    """
    if x < 0:
        raise NegativeInputError(f"octet length undefined for {x}")
    return max(1, (x.bit_length() + 7) // 8)


def byte_length(bits: int) -> int:
    """Number of octets needed to hold `bits` bits (rounded up)."""
    return (bits + 7) // 8


def i2osp(x: int, length: int) -> bytes:
    """
    Convert a non-negative integer to a big-endian octet string.

    Args:
        x: Non-negative integer
        length: Exact length of the output in octets

    Returns:
        x encoded in exactly `length` octets, zero-padded on the left
    """
    if x < 0:
        raise NegativeInputError("only non-negative integers can be encoded")
    if x >> (8 * length):
        raise EncodingTooShortError(f"integer too large for {length} octets")
    return x.to_bytes(length, "big")


def os2ip(data: bytes) -> int:
    """Convert a big-endian octet string to a non-negative integer."""
    return int.from_bytes(data, "big")


def combine(*parts: bytes) -> bytes:
    """Concatenate octet strings in order."""
    return b"".join(parts)


def truncate_to_bits(data: bytes, bits: int) -> bytes:
    """
    Keep the leading octets of `data` that cover `bits` bits.

    Callers that need an exact bit count mask the last octet themselves.
    """
    return data[:byte_length(bits)]


def primes_up_to(bound: int) -> Iterator[int]:
    """
    Generate the primes <= bound in increasing order.

    Odd-only sieve of Eratosthenes. Primes are yielded as soon as they are
    known, so a caller may stop early without sieving past the point it
    needs for the small primes.

    Args:
        bound: Inclusive upper bound

    Yields:
        Primes p with 2 <= p <= bound
    """
    if bound < 2:
        return
    yield 2

    # Slot i stands for the odd number 2*i + 3
    composite = bytearray((bound - 1) // 2)
    limit = (math.isqrt(bound) - 1) // 2
    for i in range(limit):
        if composite[i]:
            continue
        prime = 2 * i + 3
        yield prime
        # Cross out odd multiples starting at prime^2
        for j in range((prime * prime - 3) // 2, len(composite), prime):
            composite[j] = 1

    for i in range(limit, len(composite)):
        if not composite[i]:
            yield 2 * i + 3
