"""Extraction of the rank-1 product from a category bestseller page."""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from loguru import logger
from playwright.sync_api import Page

from bestsellers.browser import BrowserSession
from bestsellers.config_loader import get_browser_config, get_site_config
from bestsellers.errors import ExtractionError, ProductNotFoundError
from bestsellers.pacing import DelayPolicy
from bestsellers.parsing import (
    canonical_product_url,
    extract_asin,
    parse_price,
    parse_rating,
    parse_review_count,
)
from bestsellers.records import ScrapedProduct
from bestsellers.selectors import (
    CardFields,
    card_fields,
    detail_fields,
    fallback_product_anchor,
    parse_document,
    rank_one_card,
)


@dataclass
class ExtractionResult:
    """Either a product or the reason there is none."""

    product: Optional[ScrapedProduct] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.product is not None


def _site_domain(product_host: str) -> str:
    host = product_host.lower()
    return host[4:] if host.startswith("www.") else host


def build_product(fields: CardFields, product_host: str, match_method: str = "card") -> ScrapedProduct:
    """Normalize raw card text into a product; raises when no ASIN is found."""
    if not fields.product_url:
        raise ProductNotFoundError("Could not extract product data from page")
    asin = extract_asin(fields.product_url)
    if not asin:
        raise ProductNotFoundError(f"Could not extract ASIN from URL: {fields.product_url}")
    return ScrapedProduct(
        asin=asin,
        name=fields.name or f"Product {asin}",
        price=parse_price(fields.price_text),
        image_url=fields.image_url,
        amazon_url=canonical_product_url(asin, product_host),
        rating=parse_rating(fields.rating_text),
        review_count=parse_review_count(fields.review_count_text),
        match_method=match_method,
    )


def extract_from_html(html: str, page_url: str, product_host: str = "www.amazon.com") -> ExtractionResult:
    """Run the card cascade, then the any-product-link fallback, over ``html``."""
    try:
        soup = parse_document(html)
        card = rank_one_card(soup)
        if card is not None:
            fields = card_fields(card, page_url, _site_domain(product_host))
            return ExtractionResult(product=build_product(fields, product_host))

        fields = fallback_product_anchor(soup, page_url, _site_domain(product_host))
        if fields is None:
            raise ProductNotFoundError("No product card or product link on page")
        product = build_product(fields, product_host, match_method="fallback_anchor")
        logger.warning("Rank-1 card not found, using first product link ({}); rank is unconfirmed", product.asin)
        return ExtractionResult(product=product)
    except ProductNotFoundError as e:
        return ExtractionResult(error=str(e))
    except Exception as e:
        return ExtractionResult(error=f"Error parsing page: {e}")


class BestsellerExtractor:
    """Loads category pages through the session and pulls their #1 product."""

    def __init__(
        self,
        session: BrowserSession,
        delays: Optional[DelayPolicy] = None,
        product_host: str = "www.amazon.com",
        max_retries: int = 3,
    ):
        self.session = session
        self.delays = delays or session.delays
        self.product_host = product_host
        self.max_retries = max_retries

    @classmethod
    def from_config(cls, session: BrowserSession, config: Dict[str, Any]) -> "BestsellerExtractor":
        return cls(
            session,
            product_host=get_site_config(config).get("product_host", "www.amazon.com"),
            max_retries=get_browser_config(config).get("max_retries", 3),
        )

    def extract(self, page: Page, category_url: str) -> ExtractionResult:
        logger.info("Extracting #1 bestseller from: {}", category_url)
        try:
            if not self.session.navigate_with_retry(page, category_url, self.max_retries):
                raise ExtractionError(f"Navigation failed: {category_url}")
            self.delays.settle_pause()
            html = page.content()
        except Exception as e:
            logger.error("Error extracting bestseller: {}", e)
            return ExtractionResult(error=str(e))

        result = extract_from_html(html, category_url, self.product_host)
        if result.ok:
            logger.info("Extracted: {} ({})", result.product.name, result.product.asin)
        else:
            logger.warning("No product extracted from {}: {}", category_url, result.error)
        return result

    def extract_bestseller(self, page: Page, category_url: str) -> Optional[ScrapedProduct]:
        return self.extract(page, category_url).product

    def enrich(self, page: Page, product: ScrapedProduct) -> ScrapedProduct:
        """Fill in details from the product page; the input is returned on any failure."""
        try:
            if not self.session.navigate_with_retry(page, product.amazon_url, self.max_retries):
                return product
            self.delays.settle_pause()
            details = detail_fields(parse_document(page.content()), product.amazon_url)
        except Exception as e:
            logger.error("Error enriching product {}: {}", product.asin, e)
            return product

        price = parse_price(details.price_text)
        rating = parse_rating(details.rating_text)
        review_count = parse_review_count(details.review_count_text)
        return replace(
            product,
            name=details.name or product.name,
            price=price if price is not None else product.price,
            rating=rating if rating is not None else product.rating,
            review_count=review_count if review_count is not None else product.review_count,
            image_url=details.image_url or product.image_url,
        )
