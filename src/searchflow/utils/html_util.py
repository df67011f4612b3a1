from typing import Optional

from bs4 import BeautifulSoup


def looks_like_html(text: str) -> bool:
    head = text[:1024].lstrip().lower()
    return head.startswith("<!doctype html") or "<html" in head or "<body" in head


def html_to_text(content: str, max_length: Optional[int] = None) -> str:
    """Reduce an HTML document to its visible text, one block per line."""
    soup = BeautifulSoup(content, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    body = soup.body or soup
    text = body.get_text("\n", strip=True)
    return text[:max_length] if max_length else text
