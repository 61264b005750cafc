"""
Provides methods for checking the integrity of downloaded files.
"""

import hashlib
import logging
import os

log = logging.getLogger(__name__)

# Hex digest length -> hashlib algorithm
DIGESTS_BY_LENGTH = {
    40: "sha1",
    64: "sha256",
    128: "sha512",
}


class FileIntegrityChecker:
    """A collection of static methods for validating downloaded files."""

    @staticmethod
    def check_download(filepath: str) -> bool:
        """
        Checks that a transfer produced something usable.

        Args:
            filepath: Path to the downloaded file.

        Returns:
            True if the path exists, is a regular file and is not empty.
        """
        if not os.path.isfile(filepath):
            log.debug(f"Integrity check failed for '{filepath}': missing or not a file.")
            return False
        if os.path.getsize(filepath) == 0:
            log.debug(f"Integrity check failed for '{filepath}': file is empty.")
            return False
        return True

    @staticmethod
    def check_hash(filepath: str, expected: str) -> bool:
        """
        Compares a file against a hex digest.

        The algorithm is inferred from the digest length. Digests of an
        unknown length cannot be verified and are accepted.

        Args:
            filepath: Path to the downloaded file.
            expected: Hex digest published in the manifest.

        Returns:
            False only if the digest is recognised and does not match.
        """
        expected = (expected or "").strip().lower()
        algorithm = DIGESTS_BY_LENGTH.get(len(expected))
        if not algorithm:
            if expected:
                log.debug(
                    f"Cannot verify '{filepath}': unrecognised digest length "
                    f"{len(expected)}."
                )
            return True

        digest = hashlib.new(algorithm)
        with open(filepath, "rb") as f:
            for block in iter(lambda: f.read(1048576), b""):
                digest.update(block)

        if digest.hexdigest() != expected:
            log.warning(
                f"Hash mismatch for '{os.path.basename(filepath)}' ({algorithm})."
            )
            return False
        return True
