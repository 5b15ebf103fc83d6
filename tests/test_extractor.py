"""Bestseller extraction tests over fixture pages."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bestsellers.extractor import BestsellerExtractor, extract_from_html
from bestsellers.pacing import DelayPolicy
from bestsellers.records import ScrapedProduct

from tests.fixtures import DETAIL_HTML, FALLBACK_HTML, GRID_HTML, LEGACY_HTML


class FakePage:
    def __init__(self):
        self.html = ""

    def content(self):
        return self.html


class FakeSession:
    """Serves fixture html per URL; unknown URLs fail navigation."""

    def __init__(self, pages, raise_on=None):
        self.pages = pages
        self.raise_on = raise_on or set()
        self.delays = DelayPolicy.none()
        self.visited = []

    def navigate_with_retry(self, page, url, max_retries=3):
        self.visited.append(url)
        if url in self.raise_on:
            raise RuntimeError("page crashed")
        if url not in self.pages:
            return False
        page.html = self.pages[url]
        return True


CATEGORY_URL = "https://www.amazon.com/Best-Sellers-Electronics/zgbs/electronics/502394"


class TestExtractFromHtml(unittest.TestCase):
    def test_grid_card_product(self):
        result = extract_from_html(GRID_HTML, CATEGORY_URL)
        self.assertTrue(result.ok)
        product = result.product
        self.assertEqual(product.asin, "B08N5WRWNW")
        self.assertEqual(product.name, "Echo Dot (4th Gen)")
        self.assertEqual(product.price, 49.99)
        self.assertEqual(product.rating, 4.7)
        self.assertEqual(product.review_count, 912345)
        self.assertEqual(product.amazon_url, "https://www.amazon.com/dp/B08N5WRWNW")
        self.assertEqual(product.match_method, "card")
        self.assertFalse(product.is_low_confidence)

    def test_legacy_layout(self):
        product = extract_from_html(LEGACY_HTML, CATEGORY_URL).product
        self.assertEqual(product.asin, "B07XJ8C8F5")
        self.assertEqual(product.price, 129.99)
        self.assertIsNone(product.rating)
        self.assertIsNone(product.review_count)

    def test_fallback_anchor_is_flagged(self):
        product = extract_from_html(FALLBACK_HTML, CATEGORY_URL).product
        self.assertEqual(product.asin, "B000TEST01")
        self.assertEqual(product.match_method, "fallback_anchor")
        self.assertTrue(product.is_low_confidence)
        self.assertIsNone(product.price)

    def test_name_falls_back_to_asin(self):
        html = '<div data-asin="B000000001"><a href="/dp/B000000001"><img src="x.jpg"></a></div>'
        product = extract_from_html(html, CATEGORY_URL).product
        self.assertEqual(product.name, "Product B000000001")

    def test_card_without_asin_is_no_product(self):
        html = '<div data-asin=""><a class="a-link-normal" href="/gp/help">Help</a></div>'
        result = extract_from_html(html, CATEGORY_URL)
        self.assertIsNone(result.product)
        self.assertIn("ASIN", result.error)

    def test_empty_page_is_no_product(self):
        result = extract_from_html("<html><body><p>nothing</p></body></html>", CATEGORY_URL)
        self.assertFalse(result.ok)
        self.assertTrue(result.error)

    def test_product_host_from_config(self):
        product = extract_from_html(GRID_HTML, "https://www.amazon.co.uk/zgbs/electronics/1", "www.amazon.co.uk").product
        self.assertEqual(product.amazon_url, "https://www.amazon.co.uk/dp/B08N5WRWNW")


class TestBestsellerExtractor(unittest.TestCase):
    def test_extract_bestseller_navigates_and_parses(self):
        session = FakeSession({CATEGORY_URL: GRID_HTML})
        extractor = BestsellerExtractor(session)
        product = extractor.extract_bestseller(FakePage(), CATEGORY_URL)
        self.assertEqual(product.asin, "B08N5WRWNW")
        self.assertEqual(session.visited, [CATEGORY_URL])

    def test_navigation_exhaustion_is_no_product(self):
        extractor = BestsellerExtractor(FakeSession({}))
        result = extractor.extract(FakePage(), CATEGORY_URL)
        self.assertIsNone(result.product)
        self.assertIn("Navigation failed", result.error)

    def test_navigation_exception_does_not_escape(self):
        extractor = BestsellerExtractor(FakeSession({}, raise_on={CATEGORY_URL}))
        self.assertIsNone(extractor.extract_bestseller(FakePage(), CATEGORY_URL))

    def test_enrich_overrides_with_detail_values(self):
        product = ScrapedProduct(
            asin="B08N5WRWNW",
            name="Echo Dot",
            price=None,
            image_url="https://images-na.ssl-images-amazon.com/images/I/small.jpg",
            amazon_url="https://www.amazon.com/dp/B08N5WRWNW",
            rating=4.0,
            review_count=10,
        )
        session = FakeSession({product.amazon_url: DETAIL_HTML})
        enriched = BestsellerExtractor(session).enrich(FakePage(), product)

        self.assertEqual(enriched.name, "Echo Dot (4th Gen) | Smart speaker with Alexa")
        self.assertEqual(enriched.price, 39.99)
        self.assertEqual(enriched.rating, 4.8)
        self.assertEqual(enriched.review_count, 1200)
        self.assertEqual(enriched.image_url, "https://m.media-amazon.com/images/I/large.jpg")
        self.assertEqual(product.name, "Echo Dot")

    def test_enrich_failure_returns_original(self):
        product = ScrapedProduct(
            asin="B08N5WRWNW",
            name="Echo Dot",
            price=49.99,
            image_url=None,
            amazon_url="https://www.amazon.com/dp/B08N5WRWNW",
            rating=None,
            review_count=None,
        )
        session = FakeSession({}, raise_on={product.amazon_url})
        self.assertIs(BestsellerExtractor(session).enrich(FakePage(), product), product)


if __name__ == "__main__":
    unittest.main()
