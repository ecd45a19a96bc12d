"""
Exceptions raised by the setup protocols.

Verification never raises these for properties of a proof or key; it
returns False. They surface from proving and from misuse of the codec.
"""


class SetupError(Exception):
    """Base class for all errors raised by this package."""


class EncodingError(SetupError, ValueError):
    """An integer could not be encoded as an octet string."""


class NegativeInputError(EncodingError):
    """Octet encodings are only defined for non-negative integers."""


class EncodingTooShortError(EncodingError):
    """The integer does not fit in the requested number of octets."""


class BadModulusError(SetupError, ValueError):
    """The RSA modulus (or its factors) cannot support a sound proof."""


class SearchExhaustedError(SetupError, RuntimeError):
    """A bounded sample-and-retry loop reached its attempt ceiling."""


class ProofFormatError(SetupError, ValueError):
    """A serialized proof could not be decoded."""
