"""
Wire Framing Handlers

Each class here is both an InputHandler and an OutputHandler for one wire
format. None of them touches key agreement, derivation or the cipher.

Formats:
    concat           ephemeral_pub (uncompressed) | ciphertext | tag     (default)
    compressed       ephemeral_pub (compressed)   | ciphertext | tag
    length-prefixed  pub_len (2) | ephemeral_pub | ct_len (4) | ciphertext | tag
    envelope         EncryptedEnvelope object (length-prefixed when serialized)

The ephemeral key length always follows from the configured curve; the tag
length is fixed by the cipher. Neither is written on the wire for the
concat formats, so both sides must agree on them in advance.
"""

import struct
from dataclasses import dataclass
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec

from ..core_crypto.key_agreement import (
    resolve_curve,
    encode_public_key,
    uncompressed_point_size,
    compressed_point_size,
)
from ..core_crypto.aes_gcm import TAG_SIZE
from ..errors import InputError, ConfigurationError
from .handlers import ParsedCiphertext, InputHandler, OutputHandler


# Length prefix sizes for the length-prefixed format
POINT_LEN_SIZE = 2
CIPHERTEXT_LEN_SIZE = 4


def _as_bytes(data) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InputError(f"Expected bytes, got {type(data).__name__}")
    return bytes(data)


# ============================================================================
# Fixed-layout framing
# ============================================================================

class ConcatFraming(InputHandler, OutputHandler):
    """
    ephemeral public key | ciphertext | tag, with no length prefixes.

    The canonical ECIES wire format.
    """

    compressed = False

    def __init__(self, curve: str, tag_size: int = TAG_SIZE):
        self._curve = resolve_curve(curve)
        self._tag_size = tag_size
        if self.compressed:
            self._point_size = compressed_point_size(self._curve)
        else:
            self._point_size = uncompressed_point_size(self._curve)

    @property
    def point_size(self) -> int:
        return self._point_size

    @property
    def min_length(self) -> int:
        return self._point_size + self._tag_size

    def parse(self, data) -> ParsedCiphertext:
        """
        Split wire data into ephemeral key, ciphertext and tag.

        Raises:
            InputError: If data is shorter than point size + tag size
        """
        data = _as_bytes(data)
        if len(data) < self.min_length:
            raise InputError(
                f"Ciphertext too short: {len(data)} bytes, need at least {self.min_length}"
            )
        return ParsedCiphertext(
            ephemeral_public_key=data[:self._point_size],
            ciphertext=data[self._point_size:len(data) - self._tag_size],
            tag=data[len(data) - self._tag_size:],
        )

    def frame(self, ephemeral_public_key: ec.EllipticCurvePublicKey,
              ciphertext: bytes, tag: bytes) -> bytes:
        return encode_public_key(ephemeral_public_key, self.compressed) + ciphertext + tag


class CompressedPointFraming(ConcatFraming):
    """Same layout as ConcatFraming with a compressed ephemeral point."""

    compressed = True


# ============================================================================
# Length-prefixed framing
# ============================================================================

def pack_length_prefixed(point: bytes, ciphertext: bytes, tag: bytes) -> bytes:
    """Serialize as pub_len | pub | ct_len | ct | tag."""
    return (
        struct.pack('>H', len(point)) +
        point +
        struct.pack('>I', len(ciphertext)) +
        ciphertext +
        tag
    )


def unpack_length_prefixed(data: bytes, tag_size: int = TAG_SIZE) -> ParsedCiphertext:
    """
    Deserialize pub_len | pub | ct_len | ct | tag.

    Raises:
        InputError: If a length field runs past the data or the trailing
            tag has the wrong size
    """
    offset = 0

    if len(data) < POINT_LEN_SIZE:
        raise InputError("Ciphertext too short for point length field")
    point_len = struct.unpack('>H', data[offset:offset + POINT_LEN_SIZE])[0]
    offset += POINT_LEN_SIZE

    if len(data) < offset + point_len + CIPHERTEXT_LEN_SIZE:
        raise InputError("Ciphertext too short for ephemeral public key")
    point = data[offset:offset + point_len]
    offset += point_len

    ct_len = struct.unpack('>I', data[offset:offset + CIPHERTEXT_LEN_SIZE])[0]
    offset += CIPHERTEXT_LEN_SIZE

    if len(data) != offset + ct_len + tag_size:
        raise InputError(
            f"Length fields do not match data size ({len(data)} bytes)"
        )
    ciphertext = data[offset:offset + ct_len]
    offset += ct_len

    return ParsedCiphertext(point, ciphertext, data[offset:])


class LengthPrefixedFraming(InputHandler, OutputHandler):
    """
    Self-describing layout with explicit point and ciphertext lengths.
    """

    def __init__(self, curve: str, tag_size: int = TAG_SIZE):
        self._curve = resolve_curve(curve)
        self._tag_size = tag_size

    @property
    def min_length(self) -> int:
        return (POINT_LEN_SIZE + uncompressed_point_size(self._curve) +
                CIPHERTEXT_LEN_SIZE + self._tag_size)

    def parse(self, data) -> ParsedCiphertext:
        data = _as_bytes(data)
        if len(data) < self.min_length:
            raise InputError(
                f"Ciphertext too short: {len(data)} bytes, need at least {self.min_length}"
            )
        return unpack_length_prefixed(data, self._tag_size)

    def frame(self, ephemeral_public_key: ec.EllipticCurvePublicKey,
              ciphertext: bytes, tag: bytes) -> bytes:
        return pack_length_prefixed(encode_public_key(ephemeral_public_key), ciphertext, tag)


# ============================================================================
# Envelope framing
# ============================================================================

@dataclass(frozen=True)
class EncryptedEnvelope:
    """
    Container for ECIES output components.

    Format when serialized: [pub_len | ephemeral_pub | ct_len | ciphertext | tag]
    """
    ephemeral_public_key: bytes   # uncompressed point
    ciphertext: bytes             # Variable length
    tag: bytes                    # 16 bytes

    def to_bytes(self) -> bytes:
        """Serialize to bytes with length prefixes."""
        return pack_length_prefixed(self.ephemeral_public_key, self.ciphertext, self.tag)

    @classmethod
    def from_bytes(cls, data: bytes, tag_size: int = TAG_SIZE) -> 'EncryptedEnvelope':
        """Deserialize from bytes."""
        parsed = unpack_length_prefixed(_as_bytes(data), tag_size)
        return cls(parsed.ephemeral_public_key, parsed.ciphertext, parsed.tag)

    def to_hex(self) -> str:
        """Serialize to hex string."""
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> 'EncryptedEnvelope':
        """Deserialize from hex string."""
        try:
            data = bytes.fromhex(hex_str)
        except ValueError:
            raise InputError("Envelope is not valid hex") from None
        return cls.from_bytes(data)


class EnvelopeFraming(InputHandler, OutputHandler):
    """Produces EncryptedEnvelope objects; accepts envelopes or their bytes."""

    def __init__(self, curve: str, tag_size: int = TAG_SIZE):
        self._curve = resolve_curve(curve)
        self._tag_size = tag_size
        self._point_size = uncompressed_point_size(self._curve)

    @property
    def min_length(self) -> int:
        return self._point_size + self._tag_size

    def parse(self, data: Union[EncryptedEnvelope, bytes]) -> ParsedCiphertext:
        if not isinstance(data, EncryptedEnvelope):
            data = EncryptedEnvelope.from_bytes(data, self._tag_size)
        if len(data.ephemeral_public_key) != self._point_size or len(data.tag) != self._tag_size:
            raise InputError("Envelope fields have unexpected sizes")
        return ParsedCiphertext(data.ephemeral_public_key, data.ciphertext, data.tag)

    def frame(self, ephemeral_public_key: ec.EllipticCurvePublicKey,
              ciphertext: bytes, tag: bytes) -> EncryptedEnvelope:
        return EncryptedEnvelope(encode_public_key(ephemeral_public_key), ciphertext, tag)


# ============================================================================
# Factory
# ============================================================================

FRAMINGS = {
    "concat": ConcatFraming,
    "compressed": CompressedPointFraming,
    "length-prefixed": LengthPrefixedFraming,
    "envelope": EnvelopeFraming,
}


def get_framing(name: str, curve: str, tag_size: int = TAG_SIZE):
    """
    Build a framing handler by name.

    Raises:
        ConfigurationError: For unknown framing names
    """
    try:
        framing_cls = FRAMINGS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown framing '{name}', expected one of {sorted(FRAMINGS)}"
        ) from None
    return framing_cls(curve, tag_size)
