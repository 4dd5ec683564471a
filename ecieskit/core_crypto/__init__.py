# Core Cryptography Module
"""
Core ECIES building blocks:
- ECDH key agreement over named curves
- ANSI X9.63 key derivation
- AES-GCM authenticated encryption

Each component is a leaf: none of them depends on the others.
"""

from .key_agreement import (
    KeyPair,
    KeyAgreement,
    generate_key_pair,
    compute_shared_secret,
    load_public_key,
    load_private_key,
    encode_public_key,
    resolve_curve,
    get_curve,
    field_size,
    uncompressed_point_size,
    compressed_point_size,
    CURVES,
    CURVE_ALIASES,
    DEFAULT_CURVE,
)

from .x963kdf import (
    X963KDF,
    x963kdf,
    resolve_hash,
    HASH_ALGORITHMS,
    DEFAULT_HASH,
    MAX_COUNTER,
)

from .aes_gcm import (
    AESGCMCipher,
    TAG_SIZE,
)

__all__ = [
    'KeyPair',
    'KeyAgreement',
    'generate_key_pair',
    'compute_shared_secret',
    'load_public_key',
    'load_private_key',
    'encode_public_key',
    'resolve_curve',
    'get_curve',
    'field_size',
    'uncompressed_point_size',
    'compressed_point_size',
    'CURVES',
    'CURVE_ALIASES',
    'DEFAULT_CURVE',
    'X963KDF',
    'x963kdf',
    'resolve_hash',
    'HASH_ALGORITHMS',
    'DEFAULT_HASH',
    'MAX_COUNTER',
    'AESGCMCipher',
    'TAG_SIZE',
]
