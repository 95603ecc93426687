"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements full-content file digests using pluggable hash algorithms.

MD5 and SHA-256 come from hashlib, xxHash64 from the xxhash package.
Digests are returned as uppercase hex strings so they can be written to the audit log as-is.
"""

import hashlib
import logging
import xxhash
from dupefinder.core.models import DigestAlgorithm, DigestError
from dupefinder.core.interfaces import Hasher, HashAlgorithm

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB read buffer


# Use the same way to implement and use any other hashing algorithm
class Md5AlgorithmImpl(HashAlgorithm):
    name = "MD5"

    def new(self):
        return hashlib.md5()


class Sha256AlgorithmImpl(HashAlgorithm):
    name = "SHA-256"

    def new(self):
        return hashlib.sha256()


class XXHashAlgorithmImpl(HashAlgorithm):
    name = "XXH64"

    def new(self):
        return xxhash.xxh64()


_ALGORITHMS = {
    DigestAlgorithm.MD5: Md5AlgorithmImpl,
    DigestAlgorithm.SHA256: Sha256AlgorithmImpl,
    DigestAlgorithm.XXH64: XXHashAlgorithmImpl,
}


def get_algorithm(algorithm: DigestAlgorithm) -> HashAlgorithm:
    """Returns the implementation for the selected digest algorithm."""
    return _ALGORITHMS[algorithm]()


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Reads the whole file in chunks; never returns a partial digest.
    """

    def __init__(self, algorithm: HashAlgorithm, chunk_size: int = CHUNK_SIZE):
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def compute_digest(self, path: str) -> str:
        """
        Computes the digest of the file at path.

        Raises:
            DigestError: if the file cannot be opened or read.
        """
        h = self.algorithm.new()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    h.update(chunk)
        except OSError as e:
            logger.debug(f"Hash error for file {path}: {e}")
            raise DigestError(path, str(e)) from e
        return h.hexdigest().upper()
