"""Normalization of scraped text into identifiers and numbers."""

import math
import re
from typing import Optional

ASIN_PATTERN = re.compile(r"^[A-Z0-9]{10}$")

_ASIN_URL_PATTERNS = [
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/asin/([A-Z0-9]{10})", re.IGNORECASE),
]

# /gp/bestsellers/electronics, /zgbs/electronics/502394
_URL_SLUG_PATTERN = re.compile(r"(?:zgbs|bestsellers)/([a-z0-9-]+)", re.IGNORECASE)

# /zgbs/electronics/502394 (department + numeric node id)
CATEGORY_URL_PATTERN = re.compile(r"zgbs/[^/]+/\d+")


def slugify(text: Optional[str]) -> str:
    """Lowercase, collapse non-alphanumerics to '-', trim dashes."""
    if not text:
        return ""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def extract_slug_from_url(url: Optional[str]) -> str:
    """Return the department slug embedded in a bestseller URL, or ''."""
    if not url:
        return ""
    match = _URL_SLUG_PATTERN.search(url)
    return match.group(1) if match else ""


def is_category_url(url: Optional[str]) -> bool:
    return bool(url) and bool(CATEGORY_URL_PATTERN.search(url))


def category_url_key(url: str) -> str:
    """Category URL without query string or ``/ref=`` tracking suffix."""
    return url.split("?", 1)[0].split("/ref=", 1)[0].rstrip("/")


def extract_asin(url: Optional[str]) -> Optional[str]:
    """Extract the 10-character ASIN from a product URL, uppercased."""
    if not url:
        return None
    for pattern in _ASIN_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            asin = match.group(1).upper()
            if ASIN_PATTERN.match(asin):
                return asin
    return None


def canonical_product_url(asin: str, host: str = "www.amazon.com") -> str:
    return f"https://{host}/dp/{asin}"


def parse_price(price_text: Optional[str]) -> Optional[float]:
    """Parse "$1,234.56" style text into a float."""
    if not price_text:
        return None
    cleaned = re.sub(r"[^0-9.]", "", price_text)
    # Mimic parseFloat: take the leading numeric run ("12.3.4" -> 12.3)
    match = re.match(r"\d*\.?\d+|\d+", cleaned)
    if not match:
        return None
    try:
        value = float(match.group())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_rating(rating_text: Optional[str]) -> Optional[float]:
    """First decimal number in the text: "4.5 out of 5 stars" -> 4.5."""
    if not rating_text:
        return None
    match = re.search(r"(\d+\.?\d*)", rating_text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_review_count(count_text: Optional[str]) -> Optional[int]:
    """Parse "1,234", "1.2K" or "2.5M" into an integer count."""
    if not count_text:
        return None
    cleaned = re.sub(r"[^0-9.KkMm]", "", count_text)
    multipliers = {"k": 1_000, "m": 1_000_000}
    suffix = cleaned[-1:].lower()
    if suffix in multipliers:
        match = re.match(r"\d*\.?\d+", cleaned[:-1])
        if not match:
            return None
        return int(round(float(match.group()) * multipliers[suffix]))

    match = re.match(r"\d+", cleaned)
    if not match:
        return None
    return int(match.group())
