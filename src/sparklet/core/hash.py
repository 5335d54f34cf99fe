"""Fast hashing for cache keys and definition fingerprints."""

from enum import Enum
import hashlib

import xxhash


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (cache keys)
    SHA256 = "sha256"      # Stable fingerprints shared with hosts


def hash_string(
    text: str,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None
) -> str:
    """
    Hash string to hex digest.

    Args:
        text: String to hash
        algorithm: Hash algorithm (default: xxhash64 for speed)
        truncate: Optional length to truncate digest (e.g., 16 for cache keys)

    Returns:
        Hex digest string
    """
    # Lone surrogates hash by their code units instead of failing
    data = text.encode("utf-8", errors="surrogatepass")
    if algorithm == Algorithm.XXHASH64:
        digest = xxhash.xxh64(data).hexdigest()
    elif algorithm == Algorithm.SHA256:
        digest = hashlib.sha256(data).hexdigest()
    else:
        raise ValueError(f"Unknown algorithm: {algorithm}")

    if truncate:
        return digest[:truncate]
    return digest


def hash_fields(*fields: str, algorithm: Algorithm = Algorithm.XXHASH64) -> str:
    """
    Hash multiple fields together (deterministic).

    Examples:
        >>> hash_fields("action", "return {}")
        '...'
    """
    combined = "\x00".join(fields)  # Null byte separator
    return hash_string(combined, algorithm)


__all__ = ["Algorithm", "hash_string", "hash_fields"]
