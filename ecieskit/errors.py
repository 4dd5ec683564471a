"""
ECIES Error Taxonomy

Every failure raised by ecieskit derives from EciesError:

    EciesError
    ├── ConfigurationError   (unknown curve/hash, missing handler, bad sizes)
    ├── InvalidKeyArguments  (both or neither key supplied)
    ├── SequencingError      (stage value of the wrong kind or direction)
    ├── CryptoError          (authentication, KDF overflow, invalid keys)
    └── InputError           (ciphertext too short to parse)

Errors abort the current operation. Nothing is retried.
"""


class EciesError(Exception):
    """Base class for all ECIES errors."""
    pass


# ============================================================================
# Configuration
# ============================================================================

class ConfigurationError(EciesError):
    """Raised when the engine or one of its components is misconfigured."""
    pass


class UnsupportedCurve(ConfigurationError):
    """Raised for a curve name that is not in the curve registry."""
    pass


class UnsupportedHash(ConfigurationError):
    """Raised for a hash name the KDF does not know."""
    pass


class HandlerNotConfigured(ConfigurationError):
    """Raised when a pipeline stage needs a handler that was not supplied."""
    pass


# ============================================================================
# Usage
# ============================================================================

class InvalidKeyArguments(EciesError, ValueError):
    """Raised when compute_secret gets both keys, or neither."""
    pass


class SequencingError(EciesError):
    """Raised when a stage receives a value produced by the wrong stage."""
    pass


class InputError(EciesError):
    """Raised when ciphertext is too short to hold the ephemeral key and tag."""
    pass


# ============================================================================
# Cryptographic failures
# ============================================================================

class CryptoError(EciesError):
    """Base class for cryptographic failures."""
    pass


class AuthenticationFailure(CryptoError):
    """
    Raised when decryption fails.

    Bad tag, wrong key and malformed ephemeral key all surface as this
    one error with the same message.
    """
    pass


class CounterOverflow(CryptoError):
    """Raised when the KDF would need more than 2^32 - 1 rounds."""
    pass


class InvalidPublicKey(CryptoError):
    """Raised when a public point is malformed or not on the expected curve."""
    pass


class InvalidPrivateKey(CryptoError):
    """Raised when a private scalar is out of range for the curve."""
    pass
