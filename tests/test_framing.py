"""
Unit tests for wire framing handlers.

Tests:
- Alternate framings round-trip without touching the crypto
- Length checks and malformed input
- Envelope serialization
"""

import pytest

from ecieskit.config import EciesConfig
from ecieskit.core_crypto.key_agreement import KeyPair, compressed_point_size
from ecieskit.engine.framing import (
    ConcatFraming, CompressedPointFraming, LengthPrefixedFraming, EnvelopeFraming,
    EncryptedEnvelope, get_framing, FRAMINGS
)
from ecieskit.engine.pipeline import create_engine
from ecieskit.errors import InputError, ConfigurationError


class TestConcatFraming:
    """Tests for the default framing."""

    def test_min_length(self):
        assert ConcatFraming("secp256r1").min_length == 65 + 16
        assert ConcatFraming("secp384r1").min_length == 97 + 16
        assert ConcatFraming("P-521").min_length == 133 + 16

    def test_parse(self):
        framing = ConcatFraming("secp256r1")
        data = bytes(range(65)) + b"ciphertext" + b"T" * 16
        parsed = framing.parse(data)
        assert parsed.ephemeral_public_key == bytes(range(65))
        assert parsed.ciphertext == b"ciphertext"
        assert parsed.tag == b"T" * 16

    def test_parse_empty_ciphertext(self):
        parsed = ConcatFraming("secp256r1").parse(b"\x04" * 65 + b"T" * 16)
        assert parsed.ciphertext == b""

    def test_too_short(self):
        framing = ConcatFraming("secp256r1")
        for length in (0, 1, 64, 65, 80):
            with pytest.raises(InputError):
                framing.parse(b"\x04" * length)

    def test_non_bytes_rejected(self):
        with pytest.raises(InputError):
            ConcatFraming("secp256r1").parse("not bytes" * 20)


class TestAlternateFramings:
    """Alternate wire formats through the same engine."""

    def test_all_framings_roundtrip(self):
        recipient = KeyPair.generate()
        for name in FRAMINGS:
            engine = create_engine(framing=name)
            for plaintext in (b"", b"framed message"):
                wire = engine.encrypt(plaintext, recipient.public_key)
                assert engine.decrypt(wire, recipient.private_key) == plaintext

    def test_compressed_point_length(self):
        for curve in ("secp256r1", "secp256k1", "secp384r1"):
            engine = create_engine(EciesConfig(curve=curve), framing="compressed")
            recipient = KeyPair.generate(curve)
            wire = engine.encrypt(b"abc", recipient.public_key)
            assert len(wire) == compressed_point_size(curve) + 3 + 16
            assert wire[0] in (0x02, 0x03)

    def test_length_prefixed_layout(self):
        engine = create_engine(framing="length-prefixed")
        recipient = KeyPair.generate()
        wire = engine.encrypt(b"abcd", recipient.public_key)

        assert wire[:2] == b"\x00\x41"             # 65-byte point
        assert wire[2] == 0x04
        assert wire[67:71] == b"\x00\x00\x00\x04"  # 4-byte ciphertext
        assert len(wire) == 2 + 65 + 4 + 4 + 16

    def test_length_prefixed_bad_lengths(self):
        framing = LengthPrefixedFraming("secp256r1")
        engine = create_engine(framing="length-prefixed")
        wire = bytearray(engine.encrypt(b"abcd", KeyPair.generate().public_key))

        wire[70] = 0x05   # ciphertext length now runs into the tag
        with pytest.raises(InputError):
            framing.parse(bytes(wire))
        with pytest.raises(InputError):
            framing.parse(b"\x00")

    def test_envelope(self):
        engine = create_engine(framing="envelope")
        recipient = KeyPair.generate()
        envelope = engine.encrypt(b"enveloped", recipient.public_key)

        assert isinstance(envelope, EncryptedEnvelope)
        assert len(envelope.ephemeral_public_key) == 65
        assert len(envelope.tag) == 16

        restored = EncryptedEnvelope.from_hex(envelope.to_hex())
        assert restored == envelope
        assert engine.decrypt(restored, recipient.private_key) == b"enveloped"
        assert engine.decrypt(envelope.to_bytes(), recipient.private_key) == b"enveloped"

    def test_envelope_wrong_sizes(self):
        framing = EnvelopeFraming("secp256r1")
        with pytest.raises(InputError):
            framing.parse(EncryptedEnvelope(b"\x04" * 33, b"", b"T" * 16))
        with pytest.raises(InputError):
            EncryptedEnvelope.from_hex("zz")

    def test_framing_is_independent_of_crypto(self):
        """Switching framing leaves the ciphertext and tag bytes unchanged."""
        recipient = KeyPair.generate()
        engine = create_engine()
        secret = engine.compute_secret(peer_public_key=recipient.public_key)
        material = engine.derive_key(secret, secret.ephemeral_public_bytes)
        result = engine.encrypt_payload(material, b"same payload")

        concat = ConcatFraming("secp256r1").frame(result.ephemeral_public_key,
                                                  result.ciphertext, result.tag)
        compressed = CompressedPointFraming("secp256r1").frame(result.ephemeral_public_key,
                                                               result.ciphertext, result.tag)
        assert concat[65:] == compressed[33:]

    def test_unknown_framing(self):
        with pytest.raises(ConfigurationError):
            get_framing("xml", "secp256r1")
