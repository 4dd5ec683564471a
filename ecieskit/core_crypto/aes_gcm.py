"""
AES-GCM Authenticated Cipher

Thin, stateless wrapper over `cryptography`'s AESGCM:
- encrypt(key, iv, plaintext)       -> (ciphertext, tag)
- decrypt(key, iv, ciphertext, tag) -> plaintext

Tag is always 16 bytes and no associated data is used. The key and IV are
passed per call, so the same cipher object can be shared by any number of
operations. On a tag mismatch no plaintext is returned; the comparison is
constant-time inside the library.
"""

from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import AuthenticationFailure


# Constants
TAG_SIZE = 16                  # 128-bit GCM tag
AES_KEY_SIZES = (16, 24, 32)   # AES-128/192/256
MIN_IV_SIZE = 8
MAX_IV_SIZE = 128

DECRYPTION_FAILED = "ECIES decryption failed"


def _check_key_iv(key: bytes, iv: bytes) -> None:
    if len(key) not in AES_KEY_SIZES:
        raise ValueError(f"AES key must be 16, 24 or 32 bytes, got {len(key)}")
    if not MIN_IV_SIZE <= len(iv) <= MAX_IV_SIZE:
        raise ValueError(
            f"GCM IV must be {MIN_IV_SIZE}-{MAX_IV_SIZE} bytes, got {len(iv)}"
        )


class AESGCMCipher:
    """
    AES-GCM with a detached 16-byte tag.

    Provides confidentiality, integrity, and authenticity.
    """

    tag_size = TAG_SIZE

    def encrypt(self, key: bytes, iv: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
        """
        Encrypt plaintext.

        Args:
            key: 16, 24 or 32 byte AES key
            iv: GCM IV (8-128 bytes)
            plaintext: Data to encrypt, may be empty

        Returns:
            Tuple of (ciphertext, tag)
        """
        _check_key_iv(key, iv)

        # GCM appends tag to ciphertext
        ciphertext_with_tag = AESGCM(key).encrypt(iv, plaintext, None)

        return ciphertext_with_tag[:-TAG_SIZE], ciphertext_with_tag[-TAG_SIZE:]

    def decrypt(self, key: bytes, iv: bytes, ciphertext: bytes, tag: bytes) -> bytes:
        """
        Verify and decrypt.

        Args:
            key: AES key
            iv: GCM IV used for encryption
            ciphertext: Encrypted data (without tag)
            tag: 16-byte authentication tag

        Returns:
            Decrypted plaintext

        Raises:
            AuthenticationFailure: If the tag does not verify
        """
        _check_key_iv(key, iv)

        if len(tag) != TAG_SIZE:
            raise AuthenticationFailure(DECRYPTION_FAILED)

        try:
            return AESGCM(key).decrypt(iv, ciphertext + tag, None)
        except InvalidTag:
            raise AuthenticationFailure(DECRYPTION_FAILED) from None
