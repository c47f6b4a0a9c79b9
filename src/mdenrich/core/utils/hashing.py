"""SHA-256 content hashing for enriched output sidecars"""

import hashlib


def sha256(content: str) -> str:
    """Return the hex SHA-256 of content, used to tell whether an enriched document changed."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
