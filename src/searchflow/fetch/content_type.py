from typing import Optional

ALLOWED_TYPES = frozenset({
    "text/html",
    "text/plain",
    "application/json",
    "application/xml",
    "text/xml",
})


def is_text_like(media_type: Optional[str]) -> bool:
    """Whether a declared Content-Type is text we can hand to the summarizer.
    Parameters such as ``charset`` are ignored; structured subtypes
    (``application/rss+xml``, ``application/ld+json`` ...) are accepted.
    """
    if not media_type:
        return False
    mime = media_type.split(";", 1)[0].strip().lower()
    if mime in ALLOWED_TYPES:
        return True
    return mime.endswith("+xml") or mime.endswith("+json")
