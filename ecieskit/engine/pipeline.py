"""
ECIES Engine

Composes key agreement, X9.63 key derivation and AES-GCM behind pluggable
Input/Output/KDF/Cipher handlers.

Encryption:
    1. Generate an ephemeral key pair on the configured curve
    2. ECDH with the recipient's public key
    3. X9.63 KDF, shared info = uncompressed ephemeral public key
    4. Split the KDF output into AES key (leading bytes) and IV (trailing bytes)
    5. AES-GCM encrypt
    6. Output handler frames ephemeral_pub | ciphertext | tag

Decryption runs the same stages with the recipient's private key and the
ephemeral key taken from the wire by the Input handler.

Each stage is a method that takes the previous stage's value and returns a
new frozen value:

    compute_secret -> SharedSecret
    derive_key     -> DerivedKeyMaterial
    encrypt_payload / decrypt_payload -> CipherResult
    output         -> wire data (encrypt) or plaintext (decrypt)

The engine itself never changes after construction, so one instance can be
used from many threads at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cryptography.hazmat.primitives.asymmetric import ec

from ..config import EciesConfig, DEFAULT_CONFIG, IV_ZERO
from ..core_crypto.key_agreement import (
    KeyPair,
    KeyAgreement,
    encode_public_key,
    load_private_key,
)
from ..core_crypto.x963kdf import X963KDF
from ..core_crypto.aes_gcm import AESGCMCipher, DECRYPTION_FAILED
from ..errors import (
    EciesError,
    CryptoError,
    AuthenticationFailure,
    HandlerNotConfigured,
    InvalidKeyArguments,
    SequencingError,
)
from ..integration.event_logger import (
    EventLogger,
    EventType,
    emit,
    key_fingerprint,
    new_operation_id,
)
from .framing import get_framing
from .handlers import (
    ParsedCiphertext,
    KeyDerivationHandler,
    CipherHandler,
    InputHandler,
    OutputHandler,
)


# ============================================================================
# Stage Values
# ============================================================================

class Direction(Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


@dataclass(frozen=True)
class SharedSecret:
    """Result of key agreement. `payload` is set on the decrypt path only."""
    direction: Direction
    operation_id: str
    value: bytes = field(repr=False)
    ephemeral_public_key: ec.EllipticCurvePublicKey
    payload: Optional[ParsedCiphertext] = None

    @property
    def ephemeral_public_bytes(self) -> bytes:
        """Uncompressed ephemeral point, the default KDF shared info."""
        return encode_public_key(self.ephemeral_public_key)


@dataclass(frozen=True)
class DerivedKeyMaterial:
    """Symmetric key and IV split from the KDF output."""
    direction: Direction
    operation_id: str
    key: bytes = field(repr=False)
    iv: bytes = field(repr=False)
    ephemeral_public_key: ec.EllipticCurvePublicKey
    payload: Optional[ParsedCiphertext] = None


@dataclass(frozen=True)
class CipherResult:
    """Output of the cipher stage. `plaintext` is set on the decrypt path only."""
    direction: Direction
    operation_id: str
    ephemeral_public_key: ec.EllipticCurvePublicKey
    ciphertext: bytes
    tag: bytes
    plaintext: Optional[bytes] = field(default=None, repr=False)


def _require(value: Any, expected: type, direction: Optional[Direction], stage: str) -> None:
    if not isinstance(value, expected):
        raise SequencingError(
            f"{stage} needs a {expected.__name__}, got {type(value).__name__}"
        )
    if direction is not None and value.direction != direction:
        raise SequencingError(
            f"{stage} cannot continue a {value.direction.value} operation"
        )


# ============================================================================
# Engine
# ============================================================================

class ECIESEngine:
    """
    ECIES pipeline with pluggable handlers.

    Handlers left as None make the stages that need them fail with
    HandlerNotConfigured; use create_engine() for a fully wired engine.

    Example:
        engine = create_engine()
        recipient = KeyPair.generate()

        wire = engine.encrypt(b"Hello Bob!", recipient.public_key)
        plaintext = engine.decrypt(wire, recipient.private_key)
    """

    def __init__(self,
                 config: Optional[EciesConfig] = None,
                 kdf: Optional[KeyDerivationHandler] = None,
                 cipher: Optional[CipherHandler] = None,
                 input_handler: Optional[InputHandler] = None,
                 output_handler: Optional[OutputHandler] = None):
        """
        Args:
            config: Algorithm parameters (defaults to P-256/SHA-256/AES-128,
                16-byte derived IV)
            kdf: Key derivation handler
            cipher: Authenticated cipher handler
            input_handler: Parses received wire data
            output_handler: Frames encryption output
        """
        self._config = config or DEFAULT_CONFIG
        self._agreement = KeyAgreement(self._config.curve)
        self._kdf = kdf
        self._cipher = cipher
        self._input_handler = input_handler
        self._output_handler = output_handler

    @property
    def config(self) -> EciesConfig:
        return self._config

    @property
    def curve(self) -> str:
        return self._config.curve

    # ========================================================================
    # Stages
    # ========================================================================

    def compute_secret(self,
                       peer_public_key: Any = None,
                       own_private_key: Any = None,
                       ciphertext: Any = None,
                       observer: Optional[EventLogger] = None,
                       operation_id: Optional[str] = None) -> SharedSecret:
        """
        Agree a shared secret.

        Pass exactly one of:
            peer_public_key  encrypt path; a fresh ephemeral key pair is generated
            own_private_key  decrypt path; `ciphertext` must be given and the
                             Input handler extracts the ephemeral public key

        Raises:
            InvalidKeyArguments: If both or neither key is supplied
            HandlerNotConfigured: Decrypt path without an Input handler
            InputError: If the ciphertext is too short or malformed
            InvalidPublicKey: If a public point is invalid
        """
        if (peer_public_key is None) == (own_private_key is None):
            raise InvalidKeyArguments(
                "Pass either a peer public key or an own private key to compute the shared secret"
            )
        operation_id = operation_id or new_operation_id()

        if peer_public_key is not None:
            if ciphertext is not None:
                raise InvalidKeyArguments("Ciphertext is only used with an own private key")
            peer = self._agreement.load_public_key(peer_public_key)
            ephemeral = self._agreement.generate_key_pair()
            emit(observer, EventType.KEY_PAIR_GENERATED, operation_id,
                 curve=self.curve,
                 fingerprint=key_fingerprint(ephemeral.public_bytes()))
            value = self._agreement.compute_shared_secret(ephemeral.private_key, peer)
            secret = SharedSecret(Direction.ENCRYPT, operation_id, value, ephemeral.public_key)
        else:
            if self._input_handler is None:
                raise HandlerNotConfigured("Set an input handler before computing a shared secret")
            if ciphertext is None:
                raise InvalidKeyArguments("Ciphertext is required with an own private key")
            payload = self._input_handler.parse(ciphertext)
            ephemeral_public = self._agreement.load_public_key(payload.ephemeral_public_key)
            value = self._agreement.compute_shared_secret(own_private_key, ephemeral_public)
            secret = SharedSecret(Direction.DECRYPT, operation_id, value,
                                  ephemeral_public, payload)

        emit(observer, EventType.SECRET_COMPUTED, operation_id,
             direction=secret.direction.value,
             curve=self.curve,
             secret_size=len(secret.value),
             fingerprint=key_fingerprint(secret.ephemeral_public_bytes))
        return secret

    def derive_key(self, secret: SharedSecret, shared_info: bytes = b"",
                   observer: Optional[EventLogger] = None) -> DerivedKeyMaterial:
        """
        Derive the AES key and IV from a shared secret.

        Raises:
            SequencingError: If `secret` is not a SharedSecret
            HandlerNotConfigured: If no KDF handler is set
            CryptoError: If the KDF returns the wrong number of bytes
        """
        _require(secret, SharedSecret, None, "derive_key")
        if self._kdf is None:
            raise HandlerNotConfigured("Set a KDF handler before deriving a key")

        length = self._config.kdf_length
        material = self._kdf.derive(secret.value, length, shared_info or b"")
        if len(material) != length:
            raise CryptoError(f"KDF returned {len(material)} bytes, expected {length}")

        key_size = self._config.key_size
        key = material[:key_size]
        if self._config.iv_mode == IV_ZERO:
            iv = b"\x00" * self._config.iv_size
        else:
            iv = material[key_size:]

        emit(observer, EventType.KEY_DERIVED, secret.operation_id,
             hash=self._config.hash_name,
             length=length,
             shared_info_size=len(shared_info or b""))
        return DerivedKeyMaterial(secret.direction, secret.operation_id, key, iv,
                                  secret.ephemeral_public_key, secret.payload)

    def encrypt_payload(self, material: DerivedKeyMaterial, plaintext: bytes,
                        observer: Optional[EventLogger] = None) -> CipherResult:
        """
        Encrypt plaintext with the derived key and IV.

        Raises:
            SequencingError: If `material` is not encrypt-path key material
            HandlerNotConfigured: If no cipher handler is set
        """
        _require(material, DerivedKeyMaterial, Direction.ENCRYPT, "encrypt_payload")
        if self._cipher is None:
            raise HandlerNotConfigured("Set a cipher handler before encrypting")

        ciphertext, tag = self._cipher.encrypt(material.key, material.iv, plaintext)

        emit(observer, EventType.PAYLOAD_ENCRYPTED, material.operation_id,
             plaintext_size=len(plaintext),
             ciphertext_size=len(ciphertext))
        return CipherResult(Direction.ENCRYPT, material.operation_id,
                            material.ephemeral_public_key, ciphertext, tag)

    def decrypt_payload(self, material: DerivedKeyMaterial,
                        observer: Optional[EventLogger] = None) -> CipherResult:
        """
        Verify and decrypt the ciphertext carried by decrypt-path key material.

        Raises:
            SequencingError: If `material` is not decrypt-path key material
            HandlerNotConfigured: If no cipher handler is set
            AuthenticationFailure: If the tag does not verify
        """
        _require(material, DerivedKeyMaterial, Direction.DECRYPT, "decrypt_payload")
        if self._cipher is None:
            raise HandlerNotConfigured("Set a cipher handler before decrypting")

        payload = material.payload
        plaintext = self._cipher.decrypt(material.key, material.iv,
                                         payload.ciphertext, payload.tag)

        emit(observer, EventType.PAYLOAD_DECRYPTED, material.operation_id,
             plaintext_size=len(plaintext))
        return CipherResult(Direction.DECRYPT, material.operation_id,
                            material.ephemeral_public_key, payload.ciphertext,
                            payload.tag, plaintext)

    def output(self, result: CipherResult, observer: Optional[EventLogger] = None) -> Any:
        """
        Final stage: framed wire data for encryption, plaintext for decryption.

        Raises:
            SequencingError: If `result` is not a CipherResult
            HandlerNotConfigured: Encrypt path without an Output handler
        """
        _require(result, CipherResult, None, "output")
        if result.direction == Direction.DECRYPT:
            return result.plaintext

        if self._output_handler is None:
            raise HandlerNotConfigured("Set an output handler before producing output")
        framed = self._output_handler.frame(result.ephemeral_public_key,
                                            result.ciphertext, result.tag)

        emit(observer, EventType.OUTPUT_FRAMED, result.operation_id,
             handler=type(self._output_handler).__name__)
        return framed

    # ========================================================================
    # One-shot operations
    # ========================================================================

    def encrypt(self, plaintext: bytes, recipient_public_key: Any,
                shared_info: Optional[bytes] = None,
                observer: Optional[EventLogger] = None) -> Any:
        """
        Encrypt plaintext to a recipient public key.

        Args:
            plaintext: Data to encrypt, may be empty
            recipient_public_key: Public key object, encoded point or KeyPair
            shared_info: KDF shared info; None uses the uncompressed
                ephemeral public key
            observer: Optional event logger for this operation

        Returns:
            Framed output (bytes for the default framing)
        """
        if isinstance(recipient_public_key, KeyPair):
            recipient_public_key = recipient_public_key.public_key

        operation_id = new_operation_id()
        try:
            secret = self.compute_secret(peer_public_key=recipient_public_key,
                                         observer=observer, operation_id=operation_id)
            info = secret.ephemeral_public_bytes if shared_info is None else shared_info
            material = self.derive_key(secret, info, observer)
            result = self.encrypt_payload(material, plaintext, observer)
            return self.output(result, observer)
        except EciesError as e:
            emit(observer, EventType.OPERATION_FAILED, operation_id,
                 direction=Direction.ENCRYPT.value, reason=type(e).__name__)
            raise

    def decrypt(self, data: Any, recipient_private_key: Any,
                shared_info: Optional[bytes] = None,
                observer: Optional[EventLogger] = None) -> bytes:
        """
        Decrypt data produced by encrypt().

        Args:
            data: Wire data in the engine's framing
            recipient_private_key: Private key object, raw scalar or KeyPair
            shared_info: Must match the value used for encryption
            observer: Optional event logger for this operation

        Returns:
            Decrypted plaintext

        Raises:
            InputError: If data is too short to parse
            AuthenticationFailure: For any cryptographic failure
                (bad tag, wrong key, invalid ephemeral point)
        """
        if isinstance(recipient_private_key, KeyPair):
            recipient_private_key = recipient_private_key.private_key
        # A bad local key is the caller's bug, not a property of the ciphertext
        private_key = load_private_key(recipient_private_key, self.curve)

        operation_id = new_operation_id()
        try:
            secret = self.compute_secret(own_private_key=private_key, ciphertext=data,
                                         observer=observer, operation_id=operation_id)
            info = secret.ephemeral_public_bytes if shared_info is None else shared_info
            material = self.derive_key(secret, info, observer)
            result = self.decrypt_payload(material, observer)
            return self.output(result, observer)
        except CryptoError:
            emit(observer, EventType.OPERATION_FAILED, operation_id,
                 direction=Direction.DECRYPT.value, reason="decryption_failed")
            raise AuthenticationFailure(DECRYPTION_FAILED) from None
        except EciesError as e:
            emit(observer, EventType.OPERATION_FAILED, operation_id,
                 direction=Direction.DECRYPT.value, reason=type(e).__name__)
            raise


# ============================================================================
# Convenience Functions
# ============================================================================

def create_engine(config: Optional[EciesConfig] = None,
                  framing: str = "concat") -> ECIESEngine:
    """
    Create an engine wired with X9.63 KDF, AES-GCM and a framing handler.

    Args:
        config: Algorithm parameters; defaults to DEFAULT_CONFIG
        framing: "concat", "compressed", "length-prefixed" or "envelope"
    """
    config = config or DEFAULT_CONFIG
    handler = get_framing(framing, config.curve, config.tag_size)
    return ECIESEngine(
        config=config,
        kdf=X963KDF(config.hash_name),
        cipher=AESGCMCipher(),
        input_handler=handler,
        output_handler=handler,
    )


def ecies_encrypt(plaintext: bytes, recipient_public_key: Any,
                  config: Optional[EciesConfig] = None,
                  framing: str = "concat",
                  observer: Optional[EventLogger] = None) -> Any:
    """One-shot ECIES encryption."""
    return create_engine(config, framing).encrypt(plaintext, recipient_public_key,
                                                  observer=observer)


def ecies_decrypt(data: Any, recipient_private_key: Any,
                  config: Optional[EciesConfig] = None,
                  framing: str = "concat",
                  observer: Optional[EventLogger] = None) -> bytes:
    """One-shot ECIES decryption."""
    return create_engine(config, framing).decrypt(data, recipient_private_key,
                                                  observer=observer)
