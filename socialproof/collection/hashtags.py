"""
Hashtag Extraction
==================

Product detail pages are stored as base64-encoded rich text (HTML). Merchants
tag products inline (``#medicube #PDRN``); those tags drive query planning and
relevance matching.
"""

import base64
import binascii
import logging
import re
from typing import List, Optional

logger = logging.getLogger(__name__)

# '#' followed by word characters (Unicode letters, digits, underscore).
# Numeric HTML entities such as '&#39;' are not hashtags.
HASHTAG_PATTERN = re.compile(r"(?<![&\w])#(\w+)")


def decode_detail_blob(blob: Optional[str]) -> str:
    """Decode a base64 rich-text blob. Raises ValueError if malformed."""
    if not blob:
        return ""
    try:
        raw = base64.b64decode(blob, validate=False)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Malformed detail blob: {e}") from e


def extract_hashtags_from_text(text: str) -> List[str]:
    """
    Extract hashtag tokens from text.

    Leading '#' is stripped, tokens are de-duplicated case-insensitively and
    the first-seen spelling and order are preserved.
    """
    seen = set()
    hashtags = []
    for match in HASHTAG_PATTERN.finditer(text or ""):
        tag = match.group(1)
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        hashtags.append(tag)
    return hashtags


def extract_hashtags(blob: Optional[str]) -> List[str]:
    """
    Decode a product detail blob and extract its hashtags.

    A missing or malformed blob yields an empty list.
    """
    if not blob:
        return []
    try:
        text = decode_detail_blob(blob)
    except ValueError as e:
        logger.warning(f"Hashtag extraction failed: {e}")
        return []
    return extract_hashtags_from_text(text)
