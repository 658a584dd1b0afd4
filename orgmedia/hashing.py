"""Content hashing used to tell duplicates from naming collisions."""

import hashlib
from pathlib import Path

from .config import FILE_READ_BUFFER_SIZE


def calculate_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    Calculate the hash of a file's content.

    Args:
        file_path (Path): Path to the file to hash
        algorithm (str): Hash algorithm to use (default: sha256)

    Returns:
        str: Lowercase hexadecimal digest

    Raises:
        OSError: If the file cannot be read
    """
    hash_obj = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        # 1 MiB chunks keep memory flat on large videos
        for chunk in iter(lambda: f.read(FILE_READ_BUFFER_SIZE), b""):
            hash_obj.update(chunk)
    return hash_obj.hexdigest()


def hash_prefix(digest: str, n: int) -> str:
    """Return the first `n` hex characters of `digest`, uppercased."""
    return digest[: max(0, min(n, len(digest)))].upper()
