"""Content fingerprint used to reject duplicate stickers.

A 32-bit rolling hash over the raw file bytes. Fast and deterministic but not
collision resistant: two different files can share a fingerprint, in which
case the second one is treated as a duplicate.
"""

_MASK = 0xFFFFFFFF


def content_hash(data: bytes) -> str:
    """Return the fingerprint of data as a decimal string."""
    h = 0
    for b in data:
        # (h << 5) - h + b, wrapped to 32 bits
        h = ((h << 5) - h + b) & _MASK
    if h & 0x80000000:
        h -= 0x100000000
    return str(h)
