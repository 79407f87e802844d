"""Content hashing for input images and generated traces.

Hashes let callers confirm that two runs over the same image produced
byte-identical traces without diffing the files.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union


def compute_content_hash(
    content: Union[bytes, str],
    algorithm: str = "sha256",
) -> str:
    """Compute a content hash for in-memory data.

    Args:
        content: Data to hash (bytes or string)
        algorithm: Hash algorithm (sha256, sha1, md5)

    Returns:
        Hexadecimal hash string
    """
    hasher = hashlib.new(algorithm)

    if isinstance(content, bytes):
        hasher.update(content)
    elif isinstance(content, str):
        hasher.update(content.encode("utf-8"))
    else:
        raise TypeError(f"Unsupported content type: {type(content)}")

    return hasher.hexdigest()


def compute_file_hash(path: Union[str, Path], algorithm: str = "sha256") -> str:
    """Compute hash of a file with chunked reading for large files.

    Args:
        path: Path to the file
        algorithm: Hash algorithm

    Returns:
        Hexadecimal hash string
    """
    hasher = hashlib.new(algorithm)

    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)

    return hasher.hexdigest()
