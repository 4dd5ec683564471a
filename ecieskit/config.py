"""
ECIES Configuration

Algorithm parameters for an engine: curve, KDF hash, AES key size and how
the GCM IV is obtained. Curve and hash names are resolved to canonical
identifiers when the configuration is built, so an unknown name fails
before any key is generated.

IV modes:
    derived  KDF output is key || IV (key_size + iv_size bytes)
    zero     KDF output is the key only; IV is 16 zero bytes (legacy)
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any

from .core_crypto.key_agreement import resolve_curve, get_curve, DEFAULT_CURVE
from .core_crypto.x963kdf import resolve_hash, DEFAULT_HASH
from .core_crypto.aes_gcm import AES_KEY_SIZES, MIN_IV_SIZE, MAX_IV_SIZE, TAG_SIZE
from .errors import ConfigurationError


# Constants
AES_KEY_SIZE = 16       # 128 bits
IV_SIZE = 16            # 128-bit IV, as derived by the KDF
ZERO_IV_SIZE = 16
IV_DERIVED = "derived"
IV_ZERO = "zero"
IV_MODES = (IV_DERIVED, IV_ZERO)


@dataclass(frozen=True)
class EciesConfig:
    """
    Immutable ECIES parameters.

    Raises ConfigurationError (or its UnsupportedCurve/UnsupportedHash
    subclasses) on construction if any parameter is invalid.
    """
    curve: str = DEFAULT_CURVE
    hash_name: str = DEFAULT_HASH
    key_size: int = AES_KEY_SIZE
    iv_size: int = IV_SIZE
    iv_mode: str = IV_DERIVED

    def __post_init__(self):
        # frozen dataclass: canonical names are written back via object.__setattr__
        object.__setattr__(self, 'curve', resolve_curve(self.curve))
        object.__setattr__(self, 'hash_name', resolve_hash(self.hash_name))

        if self.key_size not in AES_KEY_SIZES:
            raise ConfigurationError(
                f"AES key size must be one of {AES_KEY_SIZES}, got {self.key_size}"
            )
        if self.iv_mode not in IV_MODES:
            raise ConfigurationError(f"Unknown IV mode: {self.iv_mode}")
        if self.iv_mode == IV_ZERO:
            object.__setattr__(self, 'iv_size', ZERO_IV_SIZE)
        elif not MIN_IV_SIZE <= self.iv_size <= MAX_IV_SIZE:
            raise ConfigurationError(
                f"IV size must be {MIN_IV_SIZE}-{MAX_IV_SIZE} bytes, got {self.iv_size}"
            )

    @property
    def tag_size(self) -> int:
        return TAG_SIZE

    @property
    def kdf_length(self) -> int:
        """Bytes requested from the KDF."""
        if self.iv_mode == IV_ZERO:
            return self.key_size
        return self.key_size + self.iv_size

    @classmethod
    def for_curve(cls, curve: str, hash_name: str = DEFAULT_HASH) -> 'EciesConfig':
        """
        Pick the AES key size from the curve size.

        128-bit AES for curves up to 256 bits, 256-bit AES above.
        """
        key_size = 16 if get_curve(curve).key_size <= 256 else 32
        return cls(curve=curve, hash_name=hash_name, key_size=key_size)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EciesConfig':
        """Create config from dictionary; missing keys take defaults."""
        unknown = set(data) - {'curve', 'hash_name', 'key_size', 'iv_size', 'iv_mode'}
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


# ============================================================================
# Presets
# ============================================================================

# Key and IV both come from the KDF; ephemeral public key is the shared info.
STANDARD_VARIABLE_IV_X963_SHA256_AESGCM = EciesConfig()

# Legacy variant: KDF yields only the AES key, IV is all zero.
STANDARD_X963_SHA256_AESGCM = EciesConfig(iv_mode=IV_ZERO)

DEFAULT_CONFIG = STANDARD_VARIABLE_IV_X963_SHA256_AESGCM
