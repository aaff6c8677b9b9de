"""
Identifier generation for catalog records.

Ids are strings shaped like "ing_18d3c2f9a10_5f1e2b7c9a04": a type prefix,
the creation time in milliseconds (hex) and a random suffix. The same
format is used in exported JSON documents, so ids survive a round trip.
"""

import time
import uuid


def new_id(prefix: str) -> str:
    """
    Generate a new unique identifier.

    Args:
        prefix: Record type prefix (see ID_PREFIX_* in constants)

    Returns:
        Identifier string

    Example:
        >>> new_id("ing").startswith("ing_")
        True
    """
    millis = int(time.time() * 1000)
    return f"{prefix}_{millis:x}_{uuid.uuid4().hex[:12]}"
