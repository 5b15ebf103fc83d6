"""Selector cascade tests over fixture HTML."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bestsellers.selectors import (
    card_fields,
    department_links,
    detail_fields,
    fallback_product_anchor,
    first_match,
    parse_document,
    rank_one_card,
    subcategory_links,
)

from tests.fixtures import (
    BASE_URL,
    DEPARTMENT_HTML,
    DETAIL_HTML,
    FALLBACK_HTML,
    FLAT_DEPARTMENT_HTML,
    GRID_HTML,
    LANDING_HTML,
    LEGACY_HTML,
    LINKED_DEPARTMENT_HTML,
)


class TestFirstMatch(unittest.TestCase):
    def test_first_non_empty_result_wins(self):
        calls = []

        def empty(value):
            calls.append("empty")
            return []

        def found(value):
            calls.append("found")
            return [value]

        def never(value):
            calls.append("never")
            return ["other"]

        self.assertEqual(first_match([empty, found, never], "x"), ["x"])
        self.assertEqual(calls, ["empty", "found"])

    def test_all_empty_returns_none(self):
        self.assertIsNone(first_match([lambda: None, lambda: []]))


class TestNavigationSelectors(unittest.TestCase):
    def test_department_links_skip_any_department_and_duplicates(self):
        links = department_links(parse_document(LANDING_HTML), BASE_URL)
        self.assertEqual([link.text for link in links], ["Amazon Devices & Accessories", "Electronics"])
        self.assertEqual(
            links[1].href,
            "https://www.amazon.com/Best-Sellers-Electronics/zgbs/electronics/ref=zg_bs_nav_0",
        )

    def test_earlier_department_strategy_is_not_merged_with_later(self):
        html = """
        <ul><li class="zg-browse-item"><a href="/zgbs/books">Books</a></li></ul>
        """ + LANDING_HTML
        links = department_links(parse_document(html), BASE_URL)
        self.assertEqual([link.text for link in links], ["Books"])

    def test_tree_levels_follow_group_nesting(self):
        links = subcategory_links(parse_document(DEPARTMENT_HTML), "https://www.amazon.com/zgbs/electronics")
        levels = {link.text: link.level for link in links}
        self.assertEqual(
            levels,
            {"Camera & Photo": 2, "Headphones": 2, "Digital Cameras": 3, "Point & Shoot": 3},
        )

    def test_own_node_link_does_not_shift_levels(self):
        links = subcategory_links(
            parse_document(LINKED_DEPARTMENT_HTML),
            "https://www.amazon.com/zgbs/electronics",
            exclude_slug="electronics",
        )
        self.assertEqual([(link.text, link.level) for link in links], [("Camera & Photo", 2), ("Headphones", 2)])

    def test_pattern_fallback_only_keeps_category_urls(self):
        links = subcategory_links(parse_document(FLAT_DEPARTMENT_HTML), "https://www.amazon.com/zgbs/electronics")
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].text, "Camera & Photo")
        self.assertEqual(links[0].level, 2)


class TestProductSelectors(unittest.TestCase):
    def test_grid_card_fields(self):
        soup = parse_document(GRID_HTML)
        card = rank_one_card(soup)
        self.assertEqual(card.get("data-asin"), "B08N5WRWNW")

        fields = card_fields(card, "https://www.amazon.com/zgbs/electronics")
        self.assertEqual(fields.product_url, "https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1")
        self.assertEqual(fields.name, "Echo Dot (4th Gen)")
        self.assertEqual(fields.price_text, "$49.99")
        self.assertEqual(fields.rating_text, "4.7 out of 5 stars")
        self.assertEqual(fields.review_count_text, "912,345")
        self.assertEqual(fields.image_url, "https://images-na.ssl-images-amazon.com/images/I/echo.jpg")

    def test_legacy_list_first_item(self):
        card = rank_one_card(parse_document(LEGACY_HTML))
        fields = card_fields(card, "https://www.amazon.com/zgbs/books")
        self.assertEqual(fields.name, "Kindle Paperwhite")
        self.assertEqual(fields.price_text, "$129.99")
        self.assertIsNone(fields.rating_text)

    def test_rating_prefers_aria_label(self):
        html = '<div data-asin="B000000001"><i class="a-icon-star-small" aria-label="3.9 out of 5 stars">x</i></div>'
        card = rank_one_card(parse_document(html))
        self.assertEqual(card_fields(card, BASE_URL).rating_text, "3.9 out of 5 stars")

    def test_fallback_anchor_only_on_site(self):
        soup = parse_document(FALLBACK_HTML)
        self.assertIsNone(rank_one_card(soup))
        fields = fallback_product_anchor(soup, "https://www.amazon.com/zgbs/toys")
        self.assertEqual(fields.product_url, "https://www.amazon.com/Some-Thing/dp/B000TEST01/ref=x")
        self.assertEqual(fields.name, "Some Thing")
        self.assertIsNone(fields.price_text)

    def test_detail_page_fields(self):
        fields = detail_fields(parse_document(DETAIL_HTML), "https://www.amazon.com/dp/B08N5WRWNW")
        self.assertEqual(fields.name, "Echo Dot (4th Gen) | Smart speaker with Alexa")
        self.assertEqual(fields.price_text, "$39.99")
        self.assertEqual(fields.rating_text, "4.8 out of 5 stars")
        self.assertEqual(fields.review_count_text, "1.2K ratings")
        self.assertEqual(fields.image_url, "https://m.media-amazon.com/images/I/large.jpg")


if __name__ == "__main__":
    unittest.main()
