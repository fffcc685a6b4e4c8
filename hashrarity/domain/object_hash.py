"""
ObjectHash domain object for hashrarity.

An ObjectHash is the raw digest naming one object in a git object store.
Both hash schemes git knows about are supported:
- SHA-1 repositories: 20-byte names
- SHA-256 repositories: 32-byte names

The length travels with each value, so the same code path handles
either scheme.
"""

from dataclasses import dataclass

SHA1_LENGTH = 20
SHA256_LENGTH = 32
SUPPORTED_LENGTHS = (SHA1_LENGTH, SHA256_LENGTH)

# Name reported by `git rev-parse --show-object-format` -> digest length
OBJECT_FORMATS = {
    'sha1': SHA1_LENGTH,
    'sha256': SHA256_LENGTH,
}


class InvalidHashLength(ValueError):
    """Raised when a digest is not one of the supported lengths."""

    def __init__(self, length: int):
        super().__init__(
            f"Object hash must be one of {SUPPORTED_LENGTHS} bytes, got {length}"
        )
        self.length = length


@dataclass(frozen=True)
class ObjectHash:
    """
    Immutable digest of one stored object.

    Examples:
        ObjectHash.from_hex("00ab" + "ff" * 18).leading_zero_bits()  -> 8
        ObjectHash(bytes(32)).leading_zero_bits()                    -> 256

    Attributes:
        digest: Raw hash bytes, most significant byte first
    """

    digest: bytes

    def __post_init__(self):
        if not isinstance(self.digest, bytes):
            object.__setattr__(self, 'digest', bytes(self.digest))
        if len(self.digest) not in SUPPORTED_LENGTHS:
            raise InvalidHashLength(len(self.digest))

    @classmethod
    def from_hex(cls, text: str) -> 'ObjectHash':
        """
        Parse a hex string into an ObjectHash.

        Raises:
            ValueError: If text is not valid hex
            InvalidHashLength: If the decoded digest has the wrong size
        """
        return cls(bytes.fromhex(text.strip()))

    @property
    def hex(self) -> str:
        return self.digest.hex()

    @property
    def bit_length(self) -> int:
        return len(self.digest) * 8

    def leading_zero_bits(self) -> int:
        """
        Count consecutive zero bits from the most significant bit.

        The digest is read as one big-endian integer; the number of
        leading zeros is the width minus the integer's bit length.
        """
        value = int.from_bytes(self.digest, 'big')
        return self.bit_length - value.bit_length()

    def __str__(self) -> str:
        return self.hex

    def __repr__(self) -> str:
        return f"ObjectHash({self.hex!r})"
