# ecieskit
"""
Elliptic Curve Integrated Encryption Scheme (ECIES).

ECDH key agreement + ANSI X9.63 KDF + AES-GCM, composed by an immutable
pipeline with pluggable wire framing.

    from ecieskit import KeyPair, ecies_encrypt, ecies_decrypt

    recipient = KeyPair.generate("secp256r1")
    wire = ecies_encrypt(b"secret", recipient.public_key)
    assert ecies_decrypt(wire, recipient.private_key) == b"secret"
"""

from .errors import (
    EciesError,
    ConfigurationError,
    UnsupportedCurve,
    UnsupportedHash,
    HandlerNotConfigured,
    InvalidKeyArguments,
    SequencingError,
    InputError,
    CryptoError,
    AuthenticationFailure,
    CounterOverflow,
    InvalidPublicKey,
    InvalidPrivateKey,
)
from .config import (
    EciesConfig,
    DEFAULT_CONFIG,
    STANDARD_VARIABLE_IV_X963_SHA256_AESGCM,
    STANDARD_X963_SHA256_AESGCM,
)
from .core_crypto import (
    KeyPair,
    KeyAgreement,
    X963KDF,
    AESGCMCipher,
    generate_key_pair,
    compute_shared_secret,
)
from .engine import (
    ECIESEngine,
    create_engine,
    ecies_encrypt,
    ecies_decrypt,
)

__version__ = "1.0.0"

__all__ = [
    'EciesError',
    'ConfigurationError',
    'UnsupportedCurve',
    'UnsupportedHash',
    'HandlerNotConfigured',
    'InvalidKeyArguments',
    'SequencingError',
    'InputError',
    'CryptoError',
    'AuthenticationFailure',
    'CounterOverflow',
    'InvalidPublicKey',
    'InvalidPrivateKey',
    'EciesConfig',
    'DEFAULT_CONFIG',
    'STANDARD_VARIABLE_IV_X963_SHA256_AESGCM',
    'STANDARD_X963_SHA256_AESGCM',
    'KeyPair',
    'KeyAgreement',
    'X963KDF',
    'AESGCMCipher',
    'generate_key_pair',
    'compute_shared_secret',
    'ECIESEngine',
    'create_engine',
    'ecies_encrypt',
    'ecies_decrypt',
]
