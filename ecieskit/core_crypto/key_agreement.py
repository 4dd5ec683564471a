"""
Elliptic Curve Key Agreement Module

Implements ECDH key agreement over a small registry of named curves:
- secp256r1 (P-256, prime256v1)
- secp256k1
- secp384r1 (P-384)
- secp521r1 (P-521)

Key formats:
    Public key:  X9.62 point, uncompressed (0x04 || X || Y) by default
    Private key: raw big-endian scalar, padded to the field size

The curve arithmetic itself comes from the `cryptography` package.
Point decoding there rejects points that are not on the curve, which is
the check that keeps invalid-curve attacks out of the shared secret.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import (
    UnsupportedCurve,
    InvalidPublicKey,
    InvalidPrivateKey,
)


# ============================================================================
# Curve Registry
# ============================================================================

DEFAULT_CURVE = "secp256r1"

CURVES: Dict[str, type] = {
    "secp256r1": ec.SECP256R1,
    "secp256k1": ec.SECP256K1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
}

# Lookup is case-insensitive; keys are lower case.
CURVE_ALIASES: Dict[str, str] = {
    "prime256v1": "secp256r1",
    "p-256": "secp256r1",
    "p256": "secp256r1",
    "nistp256": "secp256r1",
    "p-256k": "secp256k1",
    "p256k": "secp256k1",
    "p-384": "secp384r1",
    "p384": "secp384r1",
    "nistp384": "secp384r1",
    "p-521": "secp521r1",
    "p521": "secp521r1",
    "nistp521": "secp521r1",
}


def resolve_curve(name: str) -> str:
    """
    Resolve a curve name or alias to its canonical identifier.

    Args:
        name: Curve name, e.g. "prime256v1", "P-384", "secp521r1"

    Returns:
        Canonical curve name

    Raises:
        UnsupportedCurve: If the name is not in the registry
    """
    if not isinstance(name, str):
        raise UnsupportedCurve(f"Invalid EC curve name: {name!r}")
    key = name.strip().lower()
    if key in CURVES:
        return key
    if key in CURVE_ALIASES:
        return CURVE_ALIASES[key]
    raise UnsupportedCurve(f"Invalid EC curve name: {name}")


def get_curve(name: str) -> ec.EllipticCurve:
    """Get a `cryptography` curve instance for a curve name or alias."""
    return CURVES[resolve_curve(name)]()


def field_size(name: str) -> int:
    """Byte length of a field element (and of the shared secret)."""
    return (get_curve(name).key_size + 7) // 8


def uncompressed_point_size(name: str) -> int:
    """Byte length of an uncompressed point: tag + X + Y."""
    return 1 + 2 * field_size(name)


def compressed_point_size(name: str) -> int:
    """Byte length of a compressed point: tag + X."""
    return 1 + field_size(name)


# ============================================================================
# Key Encoding
# ============================================================================

PublicKeyInput = Union[ec.EllipticCurvePublicKey, bytes, bytearray]
PrivateKeyInput = Union[ec.EllipticCurvePrivateKey, bytes, bytearray]


def encode_public_key(public_key: ec.EllipticCurvePublicKey,
                      compressed: bool = False) -> bytes:
    """Encode a public key as an X9.62 point."""
    point_format = (
        serialization.PublicFormat.CompressedPoint if compressed
        else serialization.PublicFormat.UncompressedPoint
    )
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=point_format
    )


def load_public_key(data: PublicKeyInput, curve: str) -> ec.EllipticCurvePublicKey:
    """
    Load and validate a peer public key.

    Accepts either a key object or an encoded point (compressed or
    uncompressed). The key must lie on `curve`.

    Args:
        data: Public key object or X9.62 point bytes
        curve: Expected curve name or alias

    Returns:
        Validated public key object

    Raises:
        InvalidPublicKey: If the point is malformed, off-curve or on
            a different curve
    """
    canonical = resolve_curve(curve)

    if isinstance(data, ec.EllipticCurvePublicKey):
        if data.curve.name != canonical:
            raise InvalidPublicKey(
                f"Public key is on {data.curve.name}, expected {canonical}"
            )
        return data

    if not isinstance(data, (bytes, bytearray)):
        raise InvalidPublicKey(f"Unsupported public key type: {type(data).__name__}")

    data = bytes(data)
    try:
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(CURVES[canonical](), data)
    except ValueError:
        raise InvalidPublicKey(f"Point is not a valid {canonical} public key") from None

    # Reject hybrid (0x06/0x07) and other non-canonical encodings
    compressed = data[0] in (0x02, 0x03)
    if encode_public_key(public_key, compressed) != data:
        raise InvalidPublicKey(f"Point is not canonically encoded for {canonical}")
    return public_key


def load_private_key(data: PrivateKeyInput, curve: str) -> ec.EllipticCurvePrivateKey:
    """
    Load a private key from a key object or a raw big-endian scalar.

    Raises:
        InvalidPrivateKey: If the scalar is empty, oversized or out of range
    """
    canonical = resolve_curve(curve)

    if isinstance(data, ec.EllipticCurvePrivateKey):
        if data.curve.name != canonical:
            raise InvalidPrivateKey(
                f"Private key is on {data.curve.name}, expected {canonical}"
            )
        return data

    if not isinstance(data, (bytes, bytearray)):
        raise InvalidPrivateKey(f"Unsupported private key type: {type(data).__name__}")

    if not data or len(data) > field_size(canonical):
        raise InvalidPrivateKey(f"Private scalar has invalid length {len(data)}")

    try:
        return ec.derive_private_key(int.from_bytes(data, "big"), CURVES[canonical]())
    except ValueError:
        raise InvalidPrivateKey(f"Private scalar is out of range for {canonical}") from None


# ============================================================================
# Key Pair
# ============================================================================

@dataclass(frozen=True)
class KeyPair:
    """EC key pair container. `private_key` is None for public-only pairs."""
    curve: str
    private_key: Optional[ec.EllipticCurvePrivateKey]
    public_key: ec.EllipticCurvePublicKey

    @classmethod
    def generate(cls, curve: str = DEFAULT_CURVE) -> 'KeyPair':
        """Generate a new key pair on `curve`."""
        canonical = resolve_curve(curve)
        private_key = ec.generate_private_key(CURVES[canonical]())
        return cls(canonical, private_key, private_key.public_key())

    def public_bytes(self, compressed: bool = False) -> bytes:
        """Get public key as an X9.62 point."""
        return encode_public_key(self.public_key, compressed)

    def private_bytes(self) -> bytes:
        """Get the raw private scalar, big-endian, padded to the field size."""
        if self.private_key is None:
            raise InvalidPrivateKey("Key pair has no private key")
        value = self.private_key.private_numbers().private_value
        return value.to_bytes(field_size(self.curve), "big")

    @classmethod
    def from_private_bytes(cls, data: bytes, curve: str = DEFAULT_CURVE) -> 'KeyPair':
        """Rebuild a key pair from a raw private scalar."""
        private_key = load_private_key(data, curve)
        return cls(resolve_curve(curve), private_key, private_key.public_key())

    @classmethod
    def from_public_bytes(cls, data: bytes, curve: str = DEFAULT_CURVE) -> 'KeyPair':
        """Create KeyPair from public key bytes (public key only)."""
        return cls(resolve_curve(curve), None, load_public_key(data, curve))


def generate_key_pair(curve: str = DEFAULT_CURVE) -> KeyPair:
    """Generate a key pair; unknown curve names fail before key generation."""
    return KeyPair.generate(curve)


# ============================================================================
# ECDH
# ============================================================================

def compute_shared_secret(own_private: PrivateKeyInput,
                          peer_public: PublicKeyInput,
                          curve: str = DEFAULT_CURVE) -> bytes:
    """
    Compute the ECDH shared secret.

    Args:
        own_private: Own private key object or raw scalar
        peer_public: Peer public key object or encoded point
        curve: Curve both keys must lie on

    Returns:
        X-coordinate of the shared point, big-endian, field size bytes

    Raises:
        InvalidPublicKey: If the peer key is not a valid point on `curve`
        InvalidPrivateKey: If the private scalar is invalid
    """
    private_key = load_private_key(own_private, curve)
    public_key = load_public_key(peer_public, curve)
    return private_key.exchange(ec.ECDH(), public_key)


class KeyAgreement:
    """
    ECDH bound to one canonical curve.

    Holds no key material, so one instance can serve any number of
    concurrent operations.
    """

    def __init__(self, curve: str = DEFAULT_CURVE):
        """
        Args:
            curve: Curve name or alias; resolved immediately

        Raises:
            UnsupportedCurve: For unknown curve names
        """
        self._curve = resolve_curve(curve)

    @property
    def curve(self) -> str:
        """Canonical curve name."""
        return self._curve

    @property
    def secret_size(self) -> int:
        return field_size(self._curve)

    @property
    def point_size(self) -> int:
        return uncompressed_point_size(self._curve)

    def generate_key_pair(self) -> KeyPair:
        return KeyPair.generate(self._curve)

    def load_public_key(self, data: PublicKeyInput) -> ec.EllipticCurvePublicKey:
        return load_public_key(data, self._curve)

    def compute_shared_secret(self, own_private: PrivateKeyInput,
                              peer_public: PublicKeyInput) -> bytes:
        """Compute the shared secret on this instance's curve."""
        return compute_shared_secret(own_private, peer_public, self._curve)
