# ECIES Engine Module
"""
ECIES pipeline and its handlers:
- ECIESEngine: immutable stage-by-stage pipeline
- Handler interfaces (Input, Output, KDF, Cipher)
- Framing handlers: concat (default), compressed, length-prefixed, envelope

Default wire format: [ephemeral_pub (uncompressed) | ciphertext | tag (16 bytes)]
"""

from .handlers import (
    ParsedCiphertext,
    KeyDerivationHandler,
    CipherHandler,
    InputHandler,
    OutputHandler,
)

from .framing import (
    ConcatFraming,
    CompressedPointFraming,
    LengthPrefixedFraming,
    EnvelopeFraming,
    EncryptedEnvelope,
    get_framing,
    FRAMINGS,
)

from .pipeline import (
    ECIESEngine,
    Direction,
    SharedSecret,
    DerivedKeyMaterial,
    CipherResult,
    create_engine,
    ecies_encrypt,
    ecies_decrypt,
)

__all__ = [
    'ParsedCiphertext',
    'KeyDerivationHandler',
    'CipherHandler',
    'InputHandler',
    'OutputHandler',
    'ConcatFraming',
    'CompressedPointFraming',
    'LengthPrefixedFraming',
    'EnvelopeFraming',
    'EncryptedEnvelope',
    'get_framing',
    'FRAMINGS',
    'ECIESEngine',
    'Direction',
    'SharedSecret',
    'DerivedKeyMaterial',
    'CipherResult',
    'create_engine',
    'ecies_encrypt',
    'ecies_decrypt',
]
