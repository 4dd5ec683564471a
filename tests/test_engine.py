"""
Unit tests for the ECIES engine.

Tests:
- Round trip on every curve
- Stage-by-stage pipeline
- Wire format against a manual reconstruction
- Handler and sequencing errors
"""

import pytest
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ecieskit.config import EciesConfig, STANDARD_X963_SHA256_AESGCM
from ecieskit.core_crypto.key_agreement import (
    KeyPair, CURVES, compute_shared_secret, uncompressed_point_size
)
from ecieskit.core_crypto.x963kdf import X963KDF, x963kdf
from ecieskit.core_crypto.aes_gcm import AESGCMCipher, TAG_SIZE
from ecieskit.engine.framing import ConcatFraming
from ecieskit.engine.pipeline import (
    ECIESEngine, Direction, SharedSecret, DerivedKeyMaterial, CipherResult,
    create_engine, ecies_encrypt, ecies_decrypt
)
from ecieskit.errors import (
    InvalidKeyArguments, HandlerNotConfigured, SequencingError, CryptoError,
    InvalidPublicKey, InvalidPrivateKey
)


class ShortKDF:
    """KDF handler that returns one byte too few."""

    def derive(self, shared_secret, length, shared_info=b""):
        return X963KDF().derive(shared_secret, length - 1, shared_info)


class TestRoundTrip:
    """Encrypt/decrypt round trips."""

    def test_every_curve(self):
        """Round trip works on every supported curve."""
        for curve in CURVES:
            engine = create_engine(EciesConfig(curve=curve))
            recipient = KeyPair.generate(curve)
            for plaintext in (b"", b"x", b"Hello Bob!", os.urandom(1000)):
                wire = engine.encrypt(plaintext, recipient.public_key)
                assert engine.decrypt(wire, recipient.private_key) == plaintext

    def test_wire_length(self):
        """Wire = uncompressed point + ciphertext + 16-byte tag."""
        for curve in CURVES:
            engine = create_engine(EciesConfig(curve=curve))
            recipient = KeyPair.generate(curve)
            wire = engine.encrypt(b"12345", recipient.public_key)
            assert len(wire) == uncompressed_point_size(curve) + 5 + TAG_SIZE
            assert wire[0] == 0x04

    def test_key_inputs(self):
        """Recipient keys may be objects, encoded bytes or key pairs."""
        engine = create_engine()
        recipient = KeyPair.generate()

        wire = engine.encrypt(b"message", recipient.public_bytes())
        assert engine.decrypt(wire, recipient.private_bytes()) == b"message"

        wire = engine.encrypt(b"message", recipient)
        assert engine.decrypt(wire, recipient) == b"message"

    def test_one_shot_functions(self):
        recipient = KeyPair.generate("P-384")
        config = EciesConfig.for_curve("P-384")
        wire = ecies_encrypt(b"one-shot", recipient.public_key, config)
        assert ecies_decrypt(wire, recipient.private_key, config) == b"one-shot"

    def test_aes256_and_sha512(self):
        config = EciesConfig(curve="secp521r1", hash_name="sha512", key_size=32, iv_size=12)
        engine = create_engine(config)
        recipient = KeyPair.generate("secp521r1")
        wire = engine.encrypt(b"big curve", recipient.public_key)
        assert engine.decrypt(wire, recipient.private_key) == b"big curve"

    def test_zero_iv_preset(self):
        """Legacy preset round-trips and uses an all-zero IV."""
        engine = create_engine(STANDARD_X963_SHA256_AESGCM)
        recipient = KeyPair.generate()
        wire = engine.encrypt(b"legacy", recipient.public_key)
        assert engine.decrypt(wire, recipient.private_key) == b"legacy"

        secret = engine.compute_secret(peer_public_key=recipient.public_key)
        material = engine.derive_key(secret, secret.ephemeral_public_bytes)
        assert material.iv == b"\x00" * 16
        assert len(material.key) == 16

    def test_custom_shared_info(self):
        """Explicit shared info must match on both sides."""
        engine = create_engine()
        recipient = KeyPair.generate()
        wire = engine.encrypt(b"bound", recipient.public_key, shared_info=b"context")
        assert engine.decrypt(wire, recipient.private_key, shared_info=b"context") == b"bound"
        with pytest.raises(CryptoError):
            engine.decrypt(wire, recipient.private_key)


class TestWireFormat:
    """The default framing matches a manual ECIES reconstruction."""

    def test_manual_decrypt(self):
        """ECDH -> X9.63(shared info = ephemeral key) -> key || IV -> AES-GCM."""
        recipient = KeyPair.generate()
        plaintext = b"Interoperable ECIES message"
        wire = create_engine().encrypt(plaintext, recipient.public_key)

        ephemeral = wire[:65]
        ciphertext_and_tag = wire[65:]

        secret = compute_shared_secret(recipient.private_key, ephemeral)
        derived = x963kdf(secret, 32, ephemeral, "sha256")
        key, iv = derived[:16], derived[16:]

        assert AESGCM(key).decrypt(iv, ciphertext_and_tag, None) == plaintext

    def test_manual_encrypt(self):
        """Wire data built by hand decrypts with the engine."""
        recipient = KeyPair.generate()
        ephemeral = KeyPair.generate()
        ephemeral_bytes = ephemeral.public_bytes()

        secret = compute_shared_secret(ephemeral.private_key, recipient.public_key)
        derived = x963kdf(secret, 32, ephemeral_bytes)
        sealed = AESGCM(derived[:16]).encrypt(derived[16:], b"from another sender", None)

        wire = ephemeral_bytes + sealed
        assert create_engine().decrypt(wire, recipient.private_key) == b"from another sender"


class TestPipelineStages:
    """Stage-by-stage use of the engine."""

    def test_encrypt_stages(self):
        engine = create_engine()
        recipient = KeyPair.generate()

        secret = engine.compute_secret(peer_public_key=recipient.public_key)
        assert isinstance(secret, SharedSecret)
        assert secret.direction == Direction.ENCRYPT
        assert len(secret.value) == 32

        material = engine.derive_key(secret, secret.ephemeral_public_bytes)
        assert isinstance(material, DerivedKeyMaterial)
        assert len(material.key) == 16
        assert len(material.iv) == 16

        result = engine.encrypt_payload(material, b"staged")
        assert isinstance(result, CipherResult)
        assert len(result.tag) == 16

        wire = engine.output(result)
        assert engine.decrypt(wire, recipient.private_key) == b"staged"

    def test_decrypt_stages(self):
        engine = create_engine()
        recipient = KeyPair.generate()
        wire = engine.encrypt(b"staged", recipient.public_key)

        secret = engine.compute_secret(own_private_key=recipient.private_key, ciphertext=wire)
        assert secret.direction == Direction.DECRYPT
        assert secret.ephemeral_public_bytes == wire[:65]

        material = engine.derive_key(secret, secret.ephemeral_public_bytes)
        result = engine.decrypt_payload(material)
        assert engine.output(result) == b"staged"

    def test_key_material_split(self):
        """Key is the leading bytes, IV the trailing bytes of the KDF output."""
        engine = create_engine(EciesConfig(key_size=24, iv_size=12))
        recipient = KeyPair.generate()
        secret = engine.compute_secret(peer_public_key=recipient.public_key)

        material = engine.derive_key(secret, b"info")
        full = X963KDF().derive(secret.value, 36, b"info")
        assert material.key == full[:24]
        assert material.iv == full[24:]

    def test_default_shared_info_empty(self):
        engine = create_engine()
        secret = engine.compute_secret(peer_public_key=KeyPair.generate().public_key)
        material = engine.derive_key(secret)
        assert material.key + material.iv == X963KDF().derive(secret.value, 32)

    def test_stage_values_are_immutable(self):
        engine = create_engine()
        secret = engine.compute_secret(peer_public_key=KeyPair.generate().public_key)
        with pytest.raises(AttributeError):
            secret.value = b"\x00" * 32

    def test_secret_not_in_repr(self):
        engine = create_engine()
        secret = engine.compute_secret(peer_public_key=KeyPair.generate().public_key)
        assert secret.value.hex() not in repr(secret)


class TestEngineErrors:
    """Configuration and sequencing errors."""

    def test_both_keys_rejected(self):
        engine = create_engine()
        kp = KeyPair.generate()
        with pytest.raises(InvalidKeyArguments):
            engine.compute_secret(peer_public_key=kp.public_key, own_private_key=kp.private_key)

    def test_no_keys_rejected(self):
        with pytest.raises(InvalidKeyArguments):
            create_engine().compute_secret()

    def test_private_key_needs_ciphertext(self):
        with pytest.raises(InvalidKeyArguments):
            create_engine().compute_secret(own_private_key=KeyPair.generate().private_key)

    def test_missing_kdf(self):
        engine = ECIESEngine()
        secret = engine.compute_secret(peer_public_key=KeyPair.generate().public_key)
        with pytest.raises(HandlerNotConfigured):
            engine.derive_key(secret)

    def test_missing_cipher(self):
        engine = ECIESEngine(kdf=X963KDF())
        secret = engine.compute_secret(peer_public_key=KeyPair.generate().public_key)
        material = engine.derive_key(secret)
        with pytest.raises(HandlerNotConfigured):
            engine.encrypt_payload(material, b"data")

    def test_missing_output_handler(self):
        engine = ECIESEngine(kdf=X963KDF(), cipher=AESGCMCipher())
        with pytest.raises(HandlerNotConfigured):
            engine.encrypt(b"data", KeyPair.generate().public_key)

    def test_missing_input_handler(self):
        engine = ECIESEngine(kdf=X963KDF(), cipher=AESGCMCipher())
        kp = KeyPair.generate()
        with pytest.raises(HandlerNotConfigured):
            engine.compute_secret(own_private_key=kp.private_key, ciphertext=b"\x00" * 100)

    def test_out_of_order_stages(self):
        """Stage values only fit the stage that follows them."""
        engine = create_engine()
        recipient = KeyPair.generate()
        secret = engine.compute_secret(peer_public_key=recipient.public_key)
        material = engine.derive_key(secret)

        with pytest.raises(SequencingError):
            engine.derive_key(b"\x00" * 32)
        with pytest.raises(SequencingError):
            engine.encrypt_payload(secret, b"data")
        with pytest.raises(SequencingError):
            engine.output(material)

    def test_wrong_direction(self):
        """Encrypt-path material cannot be decrypted and vice versa."""
        engine = create_engine()
        recipient = KeyPair.generate()

        enc_material = engine.derive_key(engine.compute_secret(peer_public_key=recipient.public_key))
        with pytest.raises(SequencingError):
            engine.decrypt_payload(enc_material)

        wire = engine.encrypt(b"data", recipient.public_key)
        dec_secret = engine.compute_secret(own_private_key=recipient.private_key, ciphertext=wire)
        dec_material = engine.derive_key(dec_secret, dec_secret.ephemeral_public_bytes)
        with pytest.raises(SequencingError):
            engine.encrypt_payload(dec_material, b"data")

    def test_short_kdf_output_rejected(self):
        engine = ECIESEngine(kdf=ShortKDF(), cipher=AESGCMCipher(),
                             input_handler=ConcatFraming("secp256r1"),
                             output_handler=ConcatFraming("secp256r1"))
        with pytest.raises(CryptoError):
            engine.encrypt(b"data", KeyPair.generate().public_key)

    def test_invalid_recipient_public_key(self):
        with pytest.raises(InvalidPublicKey):
            create_engine().encrypt(b"data", b"\x04" + b"\x01" * 64)

    def test_recipient_key_on_wrong_curve(self):
        with pytest.raises(InvalidPublicKey):
            create_engine().encrypt(b"data", KeyPair.generate("secp384r1").public_key)

    def test_invalid_recipient_private_key(self):
        """A broken local key is reported as such, not as a decryption failure."""
        engine = create_engine()
        wire = engine.encrypt(b"data", KeyPair.generate().public_key)
        with pytest.raises(InvalidPrivateKey):
            engine.decrypt(wire, b"\x00" * 32)
