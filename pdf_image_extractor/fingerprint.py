"""Content fingerprints used as deduplication keys."""

from __future__ import annotations

import hashlib

DIGEST_SIZE = hashlib.sha256().digest_size


def fingerprint(data: bytes) -> bytes:
    """Return the SHA-256 digest of encoded image bytes."""

    return hashlib.sha256(data).digest()


__all__ = ["DIGEST_SIZE", "fingerprint"]
