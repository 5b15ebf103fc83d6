"""Selector strategies for bestseller listing and product pages.

Every strategy is a pure function over a parsed document (``BeautifulSoup`` of
``page.content()``). Strategies are tried in order by :func:`first_match`;
the first non-empty result wins and results are never merged.
"""

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from bestsellers.parsing import is_category_url, slugify

ANY_DEPARTMENT = "Any Department"

# Ordered: current sidebar markup first, generic tree roles last
DEPARTMENT_SELECTORS = [
    '[class*="zg-browse-item"] a[href*="zgbs"]',
    'li[class*="zg-browse"] a[href*="zgbs"]',
    '[class*="browse-root"] a[href*="zgbs"]',
    '[class*="browse-group"] a[href*="zgbs"]',
    'div[role="treeitem"] a[href*="zgbs"]',
    'div[role="group"] a[href*="zgbs"]',
]

NAVIGATION_CONTAINER_SELECTORS = [
    '[class*="zg-browse"]',
    '[role="tree"]',
    '[role="treeitem"]',
    '[class*="browse-group"]',
    "#zg-left-col",
]

SUBCATEGORY_TREE_SELECTORS = [
    '[role="treeitem"] a[href*="zgbs"]',
    '[class*="zg-browse-item"] a[href*="zgbs"]',
    'li[class*="zg-browse"] a[href*="zgbs"]',
    '[class*="browse-group"] a[href*="zgbs"]',
]

# Modern grid layout first, legacy ordered list last
CARD_SELECTORS = [
    "[data-asin]:first-of-type",
    'div[id^="p13n-asin-index-"]:first-child',
    ".zg-grid-general-faceout:first-child",
    ".zg-item-immersion:first-child",
    "#zg-ordered-list li:first-child",
]

FALLBACK_PRODUCT_ANCHOR = 'a[href*="/dp/"]'

CARD_LINK_SELECTORS = ['a[href*="/dp/"]', "a.a-link-normal[href]"]
CARD_NAME_SELECTORS = [
    ".p13n-sc-truncate",
    "._cDEzb_p13n-sc-css-line-clamp-3_g3dy1",
    ".a-link-normal span",
    'a[href*="/dp/"] span',
]
CARD_PRICE_SELECTORS = [
    ".p13n-sc-price",
    "._cDEzb_p13n-sc-price_3mJ9Z",
    ".a-price .a-offscreen",
    "span.a-price span",
]
CARD_RATING_SELECTORS = [".a-icon-star-small", ".a-icon-alt", "i.a-icon-star"]
CARD_REVIEW_SELECTORS = [".a-size-small:last-child", 'span.a-size-small[aria-label*="stars"]']
CARD_IMAGE_SELECTORS = ["img.a-dynamic-image", 'img[src*="images-amazon.com"]']

DETAIL_TITLE_SELECTORS = ["#productTitle", "#title span"]
DETAIL_PRICE_SELECTORS = [
    "#priceblock_ourprice",
    "#priceblock_dealprice",
    ".a-price .a-offscreen",
    "#corePrice_feature_div .a-offscreen",
]
DETAIL_RATING_SELECTORS = ["#acrPopover", ".a-icon-star-small .a-icon-alt"]
DETAIL_REVIEW_SELECTORS = ["#acrCustomerReviewText"]
DETAIL_IMAGE_SELECTORS = ["#landingImage", "#imgBlkFront", "#main-image"]


@dataclass
class NavLink:
    """Anchor found in the category navigation."""

    text: str
    href: str
    level: int = 2


@dataclass
class CardFields:
    """Raw (unparsed) text pulled from a product card or detail page."""

    product_url: Optional[str] = None
    name: Optional[str] = None
    price_text: Optional[str] = None
    rating_text: Optional[str] = None
    review_count_text: Optional[str] = None
    image_url: Optional[str] = None


def parse_document(html: Optional[str]) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def first_match(strategies: Sequence[Callable[..., Any]], *args, **kwargs) -> Any:
    """Return the first truthy strategy result, or None."""
    for strategy in strategies:
        result = strategy(*args, **kwargs)
        if result:
            return result
    return None


def text_of(element: Optional[Tag]) -> Optional[str]:
    if element is None:
        return None
    text = " ".join(element.get_text(" ").split())
    return text or None


def absolute_url(href: Optional[str], base_url: str) -> Optional[str]:
    if not href:
        return None
    return urljoin(base_url, href.strip())


def is_site_url(url: Optional[str], site_domain: str = "amazon.com") -> bool:
    if not url:
        return False
    host = (urlparse(url).hostname or "").lower()
    return host == site_domain or host.endswith("." + site_domain)


def select_first(root: Tag, selectors: Sequence[str]) -> Optional[Tag]:
    """Cascade over CSS selectors; first element found wins."""
    return first_match([partial(root.select_one, selector) for selector in selectors])


def _group_depth(anchor: Tag) -> int:
    return sum(1 for parent in anchor.parents if parent.get("role") == "group")


def _anchors(
    soup: BeautifulSoup,
    base_url: str,
    selector: str,
    with_level: bool = False,
) -> List[NavLink]:
    links: List[NavLink] = []
    seen = set()
    for anchor in soup.select(selector):
        text = text_of(anchor)
        href = absolute_url(anchor.get("href"), base_url)
        if not text or not href or text == ANY_DEPARTMENT:
            continue
        if "zgbs" not in href and "bestsellers" not in href:
            continue
        if href in seen:
            continue
        seen.add(href)
        links.append(NavLink(text=text, href=href, level=_group_depth(anchor) if with_level else 2))
    return links


def department_links(soup: BeautifulSoup, base_url: str) -> List[NavLink]:
    strategies = [partial(_anchors, selector=selector) for selector in DEPARTMENT_SELECTORS]
    return first_match(strategies, soup, base_url) or []


def _without_slug(links: List[NavLink], exclude_slug: Optional[str]) -> List[NavLink]:
    if not exclude_slug:
        return links
    return [link for link in links if slugify(link.text) != exclude_slug]


def _tree_anchors(soup: BeautifulSoup, base_url: str, selector: str, exclude_slug: Optional[str]) -> List[NavLink]:
    return _without_slug(_anchors(soup, base_url, selector, with_level=True), exclude_slug)


def tree_subcategory_links(
    soup: BeautifulSoup,
    base_url: str,
    exclude_slug: Optional[str] = None,
) -> List[NavLink]:
    """Tree navigation nodes.

    Level is 2 for the shallowest kept links and grows with each extra
    ancestor ``role="group"`` container, capped at 3. Links whose text
    slugifies to ``exclude_slug`` (the page's own node) are dropped before
    depths are compared.
    """
    strategies = [
        partial(_tree_anchors, selector=selector, exclude_slug=exclude_slug)
        for selector in SUBCATEGORY_TREE_SELECTORS
    ]
    links = first_match(strategies, soup, base_url) or []
    if links:
        shallowest = min(link.level for link in links)
        for link in links:
            link.level = min(3, 2 + link.level - shallowest)
    return links


def pattern_subcategory_links(
    soup: BeautifulSoup,
    base_url: str,
    exclude_slug: Optional[str] = None,
) -> List[NavLink]:
    """Any anchor shaped like zgbs/<dept>/<node id>; level assumed 2."""
    links = [link for link in _anchors(soup, base_url, "a[href]") if is_category_url(link.href)]
    return _without_slug(links, exclude_slug)


def subcategory_links(
    soup: BeautifulSoup,
    base_url: str,
    exclude_slug: Optional[str] = None,
) -> List[NavLink]:
    strategies = [
        partial(tree_subcategory_links, exclude_slug=exclude_slug),
        partial(pattern_subcategory_links, exclude_slug=exclude_slug),
    ]
    return first_match(strategies, soup, base_url) or []


def rank_one_card(soup: BeautifulSoup) -> Optional[Tag]:
    return select_first(soup, CARD_SELECTORS)


def fallback_product_anchor(
    soup: BeautifulSoup,
    base_url: str,
    site_domain: str = "amazon.com",
) -> Optional[CardFields]:
    """Any product detail link on the page; only name and URL are known."""
    for anchor in soup.select(FALLBACK_PRODUCT_ANCHOR):
        href = absolute_url(anchor.get("href"), base_url)
        if is_site_url(href, site_domain):
            return CardFields(product_url=href, name=text_of(anchor))
    return None


def _card_link(card: Tag, base_url: str, site_domain: str) -> Optional[str]:
    for selector in CARD_LINK_SELECTORS:
        for anchor in card.select(selector):
            href = absolute_url(anchor.get("href"), base_url)
            if "/dp/" in (href or "") or is_site_url(href, site_domain):
                return href
    return None


def _rating_label(element: Optional[Tag], attribute: str) -> Optional[str]:
    if element is None:
        return None
    value = element.get(attribute)
    return value.strip() if value and value.strip() else text_of(element)


def _image_src(element: Optional[Tag], base_url: str) -> Optional[str]:
    if element is None:
        return None
    return absolute_url(element.get("src") or element.get("data-src"), base_url)


def card_fields(card: Tag, base_url: str, site_domain: str = "amazon.com") -> CardFields:
    return CardFields(
        product_url=_card_link(card, base_url, site_domain),
        name=text_of(select_first(card, CARD_NAME_SELECTORS)),
        price_text=text_of(select_first(card, CARD_PRICE_SELECTORS)),
        rating_text=_rating_label(select_first(card, CARD_RATING_SELECTORS), "aria-label"),
        review_count_text=text_of(select_first(card, CARD_REVIEW_SELECTORS)),
        image_url=_image_src(select_first(card, CARD_IMAGE_SELECTORS), base_url),
    )


def detail_fields(soup: BeautifulSoup, base_url: str) -> CardFields:
    return CardFields(
        name=text_of(select_first(soup, DETAIL_TITLE_SELECTORS)),
        price_text=text_of(select_first(soup, DETAIL_PRICE_SELECTORS)),
        rating_text=_rating_label(select_first(soup, DETAIL_RATING_SELECTORS), "title"),
        review_count_text=text_of(select_first(soup, DETAIL_REVIEW_SELECTORS)),
        image_url=_image_src(select_first(soup, DETAIL_IMAGE_SELECTORS), base_url),
    )
