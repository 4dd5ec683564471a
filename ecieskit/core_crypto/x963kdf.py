"""
ANSI X9.63 Key Derivation Function

Stretches an ECDH shared secret into symmetric key material:

    K(i) = Hash(Z || Counter_i || SharedInfo)    Counter_i = BE32(i), i = 1, 2, ...
    Output = K(1) || K(2) || ... truncated to the requested length

SharedInfo is left out of the hash input when empty. The counter is 32 bits,
so at most (2^32 - 1) rounds of output are available.

The hash primitive comes from `cryptography`; the counter construction is
implemented here.
"""

import struct
from typing import Dict

from cryptography.hazmat.primitives import hashes

from ..errors import CounterOverflow, UnsupportedHash


# Constants
DEFAULT_HASH = "sha256"
MAX_COUNTER = 2 ** 32 - 1

HASH_ALGORITHMS: Dict[str, type] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
}

HASH_ALIASES: Dict[str, str] = {
    "sha-1": "sha1",
    "sha-224": "sha224",
    "sha-256": "sha256",
    "sha-384": "sha384",
    "sha-512": "sha512",
    "sha3_256": "sha3-256",
    "sha3_384": "sha3-384",
    "sha3_512": "sha3-512",
}


def resolve_hash(name: str) -> str:
    """
    Resolve a hash name to its canonical identifier.

    Raises:
        UnsupportedHash: If the hash is unknown
    """
    if not isinstance(name, str):
        raise UnsupportedHash(f"Invalid hash name: {name!r}")
    key = name.strip().lower()
    key = HASH_ALIASES.get(key, key)
    if key not in HASH_ALGORITHMS:
        raise UnsupportedHash(f"Unsupported KDF hash: {name}")
    return key


def int_to_32be(value: int) -> bytes:
    """Encode the KDF counter as 4 big-endian bytes."""
    if not 0 <= value <= MAX_COUNTER:
        raise CounterOverflow(f"Counter {value} does not fit in 32 bits")
    return struct.pack('>I', value)


class X963KDF:
    """
    X9.63 KDF over a named hash.

    Stateless after construction: each derive() call builds its own
    hash contexts.

    Example:
        kdf = X963KDF("sha256")
        key_iv = kdf.derive(shared_secret, 32, ephemeral_public_key)
    """

    def __init__(self, hash_name: str = DEFAULT_HASH):
        """
        Args:
            hash_name: Hash to use, e.g. "sha256", "SHA-384"

        Raises:
            UnsupportedHash: For unknown hash names
        """
        self._hash_name = resolve_hash(hash_name)
        self._algorithm = HASH_ALGORITHMS[self._hash_name]()

    @property
    def hash_name(self) -> str:
        return self._hash_name

    @property
    def digest_size(self) -> int:
        return self._algorithm.digest_size

    @property
    def max_length(self) -> int:
        """Longest output the 32-bit counter allows."""
        return MAX_COUNTER * self.digest_size

    def derive(self, shared_secret: bytes, length: int,
               shared_info: bytes = b"") -> bytes:
        """
        Derive exactly `length` bytes.

        Args:
            shared_secret: Input secret Z (e.g. ECDH x-coordinate)
            length: Number of output bytes
            shared_info: Optional context bytes mixed into every round

        Returns:
            Key material of exactly `length` bytes

        Raises:
            ValueError: If length is negative
            CounterOverflow: If length needs more than 2^32 - 1 rounds
        """
        if length < 0:
            raise ValueError(f"Output length must be non-negative, got {length}")
        if length > self.max_length:
            raise CounterOverflow(
                f"Requested {length} bytes, {self._hash_name} KDF allows at most "
                f"{self.max_length}"
            )

        output = bytearray()
        counter = 1
        while len(output) < length:
            digest = hashes.Hash(self._algorithm)
            digest.update(shared_secret)
            digest.update(int_to_32be(counter))
            if shared_info:
                digest.update(shared_info)
            output += digest.finalize()
            counter += 1

        return bytes(output[:length])


def x963kdf(shared_secret: bytes, length: int, shared_info: bytes = b"",
            hash_name: str = DEFAULT_HASH) -> bytes:
    """One-shot X9.63 derivation."""
    return X963KDF(hash_name).derive(shared_secret, length, shared_info)
