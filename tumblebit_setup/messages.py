"""
Proof messages sent from prover to verifier.

Wire format (all integers big-endian):

    tag (4 bytes) || count (uint32) || count * (length (uint32) || data)

PermutationTestProof carries the signatures as data. PoupardSternProof
carries the x values followed by y, each as its minimal octet encoding,
so its count is K + 1.
"""

import struct
from dataclasses import dataclass

from .errors import ProofFormatError
from .utils import i2osp, octet_length, os2ip

_COUNT = struct.Struct("!I")


def _pack(tag: bytes, items: list[bytes]) -> bytes:
    parts = [tag, _COUNT.pack(len(items))]
    for item in items:
        parts.append(_COUNT.pack(len(item)))
        parts.append(item)
    return b"".join(parts)


def _unpack(tag: bytes, data: bytes) -> list[bytes]:
    if data[:len(tag)] != tag:
        raise ProofFormatError(f"expected tag {tag!r}")
    pos = len(tag)
    try:
        (count,) = _COUNT.unpack_from(data, pos)
        pos += _COUNT.size
        items = []
        for _ in range(count):
            (length,) = _COUNT.unpack_from(data, pos)
            pos += _COUNT.size
            item = data[pos:pos + length]
            if len(item) != length:
                raise ProofFormatError("truncated proof element")
            items.append(item)
            pos += length
    except struct.error as exc:
        raise ProofFormatError("truncated proof header") from exc
    if pos != len(data):
        raise ProofFormatError(f"{len(data) - pos} trailing bytes after proof")
    return items


def _int_to_bytes(value: int) -> bytes:
    return i2osp(value, octet_length(value))


@dataclass(frozen=True)
class PermutationTestProof:
    """
    Permutation test proof.

    Attributes:
        signatures: m2 raw RSA signatures, each as wide as the modulus
    """

    signatures: tuple[bytes, ...]

    TAG = b"PTP1"

    def __post_init__(self):
        object.__setattr__(self, "signatures", tuple(bytes(s) for s in self.signatures))

    def __len__(self) -> int:
        return len(self.signatures)

    def to_bytes(self) -> bytes:
        return _pack(self.TAG, list(self.signatures))

    @classmethod
    def from_bytes(cls, data: bytes) -> "PermutationTestProof":
        return cls(tuple(_unpack(cls.TAG, data)))


@dataclass(frozen=True)
class PoupardSternProof:
    """
    Poupard-Stern proof.

    Attributes:
        x_values: K = k + 1 commitments x_i = z_i^r mod N
        y: Response r + (N - phi(N)) * w
    """

    x_values: tuple[int, ...]
    y: int

    TAG = b"PSP1"

    def __post_init__(self):
        object.__setattr__(self, "x_values", tuple(int(x) for x in self.x_values))
        if self.y < 0 or any(x < 0 for x in self.x_values):
            raise ValueError("proof values must be non-negative")

    def to_bytes(self) -> bytes:
        items = [_int_to_bytes(x) for x in self.x_values]
        items.append(_int_to_bytes(self.y))
        return _pack(self.TAG, items)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PoupardSternProof":
        items = _unpack(cls.TAG, data)
        if not items:
            raise ProofFormatError("missing y value")
        return cls(tuple(os2ip(x) for x in items[:-1]), os2ip(items[-1]))
