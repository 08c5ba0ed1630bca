"""Slug generation utilities."""
from __future__ import annotations

import re
import unicodedata

MAX_SLUG_LENGTH = 160


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Convert a category name to a URL-friendly slug.

    "Toaster & Kettle Sets" becomes "toaster-and-kettle-sets". Accented
    letters are folded to ASCII; anything else outside ``[a-z0-9-]`` is
    dropped. The result never starts or ends with a hyphen and is cut at a
    hyphen boundary when longer than ``max_length``.
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = text.replace("&", " and ")
    text = re.sub(r"[\s_/]+", "-", text)
    text = re.sub(r"[^a-z0-9\-]", "", text)
    text = re.sub(r"-+", "-", text).strip("-")

    if len(text) > max_length:
        cut = text[:max_length]
        text = cut.rsplit("-", 1)[0] if "-" in cut else cut
    return text
