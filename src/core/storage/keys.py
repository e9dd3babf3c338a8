"""
Object key generation and inspection.

An object key is ``<uuid4>_<original name>``. The same string is the
filename on the local tier and the object key on the remote tier.
"""

from typing import Optional
from uuid import uuid4

ObjectKey = str

# Extensions that fall back to the sample video rather than the placeholder image
VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "mkv", "webm"})


def new_object_key(original_name: Optional[str]) -> ObjectKey:
    """
    Build a fresh key for an upload.

    The original name is kept as-is. Uniqueness comes from the random
    prefix, so two uploads of ``notes.pdf`` never collide.
    """
    return f"{uuid4()}_{original_name or ''}"


def is_blank_key(key: Optional[str]) -> bool:
    return key is None or not key.strip()


def is_video_key(key: str) -> bool:
    """True if the key's extension is one of the known video formats."""
    if "." not in key:
        return False
    return key.rsplit(".", 1)[-1].lower() in VIDEO_EXTENSIONS
