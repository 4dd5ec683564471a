"""
Handler interfaces for the ECIES pipeline.

The engine talks to four roles, each chosen at construction:

    KeyDerivationHandler  derive(secret, length, shared_info) -> bytes
    CipherHandler         encrypt(key, iv, plaintext) -> (ciphertext, tag)
                          decrypt(key, iv, ciphertext, tag) -> plaintext
    InputHandler          parse(data) -> ParsedCiphertext
    OutputHandler         frame(ephemeral_public_key, ciphertext, tag) -> wire

X963KDF and AESGCMCipher satisfy the first two structurally. Alternative
wire formats only need new Input/Output handlers.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Tuple

from cryptography.hazmat.primitives.asymmetric import ec


@dataclass(frozen=True)
class ParsedCiphertext:
    """Fields extracted from received wire data."""
    ephemeral_public_key: bytes   # encoded point, as found on the wire
    ciphertext: bytes
    tag: bytes


class KeyDerivationHandler(Protocol):
    def derive(self, shared_secret: bytes, length: int,
               shared_info: bytes = b"") -> bytes:
        ...


class CipherHandler(Protocol):
    def encrypt(self, key: bytes, iv: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
        ...

    def decrypt(self, key: bytes, iv: bytes, ciphertext: bytes, tag: bytes) -> bytes:
        ...


class InputHandler(Protocol):
    @property
    def min_length(self) -> int:
        """Shortest input that can hold an ephemeral key and a tag."""
        ...

    def parse(self, data: Any) -> ParsedCiphertext:
        """Split wire data; raises InputError if it is too short or malformed."""
        ...


class OutputHandler(Protocol):
    def frame(self, ephemeral_public_key: ec.EllipticCurvePublicKey,
              ciphertext: bytes, tag: bytes) -> Any:
        """Assemble the wire representation."""
        ...
