"""Discovery of the department -> category -> subcategory tree."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeout

from bestsellers.browser import BrowserSession
from bestsellers.config_loader import get_browser_config, get_discovery_config, get_site_config
from bestsellers.pacing import DelayPolicy
from bestsellers.parsing import category_url_key, extract_slug_from_url, is_category_url, slugify
from bestsellers.records import Category, Department
from bestsellers.selectors import (
    NAVIGATION_CONTAINER_SELECTORS,
    department_links,
    parse_document,
    subcategory_links,
)

DEFAULT_BESTSELLERS_URL = "https://www.amazon.com/gp/bestsellers"


class CategoryDiscoverer:
    """Walks the bestseller navigation with a single page from ``session``."""

    def __init__(
        self,
        session: BrowserSession,
        delays: Optional[DelayPolicy] = None,
        bestsellers_url: str = DEFAULT_BESTSELLERS_URL,
        department_fallback: bool = True,
        crawl_subcategory_pages: bool = True,
        selector_timeout_ms: int = 30000,
        max_retries: int = 3,
    ):
        self.session = session
        self.delays = delays or session.delays
        self.bestsellers_url = bestsellers_url
        self.department_fallback = department_fallback
        self.crawl_subcategory_pages = crawl_subcategory_pages
        self.selector_timeout_ms = selector_timeout_ms
        self.max_retries = max_retries

    @classmethod
    def from_config(cls, session: BrowserSession, config: Dict[str, Any]) -> "CategoryDiscoverer":
        browser_cfg = get_browser_config(config)
        discovery_cfg = get_discovery_config(config)
        return cls(
            session,
            bestsellers_url=get_site_config(config).get("bestsellers_url", DEFAULT_BESTSELLERS_URL),
            department_fallback=bool(discovery_cfg.get("department_fallback", True)),
            crawl_subcategory_pages=bool(discovery_cfg.get("crawl_subcategory_pages", True)),
            selector_timeout_ms=browser_cfg.get("selector_timeout_ms", 30000),
            max_retries=browser_cfg.get("max_retries", 3),
        )

    def _wait_for_navigation(self, page: Page) -> None:
        try:
            page.wait_for_selector(
                ", ".join(NAVIGATION_CONTAINER_SELECTORS),
                timeout=self.selector_timeout_ms,
                state="attached",
            )
        except PlaywrightTimeout:
            logger.warning("Navigation container not found within {}ms, parsing anyway", self.selector_timeout_ms)

    def discover_departments(self, page: Page) -> List[Department]:
        """Read top-level departments from the bestseller landing page."""
        logger.info("Discovering departments from {}", self.bestsellers_url)
        if not self.session.navigate_with_retry(page, self.bestsellers_url, self.max_retries):
            logger.error("Could not load bestseller landing page")
            return []
        self._wait_for_navigation(page)

        soup = parse_document(page.content())
        departments: List[Department] = []
        seen = set()
        for link in department_links(soup, self.bestsellers_url):
            slug = extract_slug_from_url(link.href) or slugify(link.text)
            if not slug or slug in seen:
                continue
            seen.add(slug)
            departments.append(Department(name=link.text, slug=slug, url=link.href))

        logger.info("Found {} departments", len(departments))
        return departments

    def discover_subcategories(self, page: Page, department: Department) -> List[Category]:
        """Categories listed under one department; [] on any failure.

        Each level-2 category page is also visited, when enabled, to collect
        its level-3 children.
        """
        categories: List[Category] = []
        try:
            if not self.session.navigate_with_retry(page, department.url, self.max_retries):
                logger.error("Could not load department {}", department.name)
                return []
            self.delays.settle_pause()

            soup = parse_document(page.content())
            links = subcategory_links(soup, department.url, exclude_slug=department.slug)
            known_urls = {category_url_key(link.href) for link in links}
            seen = set()
            for link in links:
                slug = slugify(link.text)
                full_slug = f"{department.slug}/{slug}"
                if not slug or full_slug in seen:
                    continue
                seen.add(full_slug)
                category = Category(
                    name=link.text,
                    slug=slug,
                    url=link.href,
                    department_name=department.name,
                    department_slug=department.slug,
                    full_slug=full_slug,
                    level=link.level,
                )
                categories.append(category)

                if self.crawl_subcategory_pages and category.level == 2:
                    for child in self.discover_children(page, department, category, known_urls):
                        if child.full_slug not in seen:
                            seen.add(child.full_slug)
                            categories.append(child)
        except Exception as e:
            logger.error("Error discovering subcategories for {}: {}", department.name, e)
            return []

        logger.info("  Found {} subcategories in {}", len(categories), department.name)
        return categories

    def discover_children(
        self,
        page: Page,
        department: Department,
        parent: Category,
        known_urls: Set[str],
    ) -> List[Category]:
        """Level-3 categories listed on ``parent``'s own page.

        Links already in ``known_urls`` are skipped; new ones are added to it.
        A failure only loses this page's children.
        """
        try:
            self.delays.subcategory_pause()
            if not self.session.navigate_with_retry(page, parent.url, self.max_retries):
                logger.warning("    Could not load {}, skipping its subcategories", parent.name)
                return []
            self.delays.settle_pause()
            soup = parse_document(page.content())
        except Exception as e:
            logger.error("    Error navigating to {}: {}", parent.name, e)
            return []

        children: List[Category] = []
        for link in subcategory_links(soup, parent.url, exclude_slug=parent.slug):
            key = category_url_key(link.href)
            slug = slugify(link.text)
            if not slug or not is_category_url(link.href) or key in known_urls:
                continue
            known_urls.add(key)
            children.append(
                Category(
                    name=link.text,
                    slug=slug,
                    url=link.href,
                    department_name=department.name,
                    department_slug=department.slug,
                    full_slug=f"{parent.full_slug}/{slug}",
                    level=3,
                )
            )

        if children:
            logger.info("    {}: {} level-3 subcategories", parent.name, len(children))
        return children

    def _department_as_category(self, department: Department) -> Category:
        return Category(
            name=department.name,
            slug=department.slug,
            url=department.url,
            department_name=department.name,
            department_slug=department.slug,
            full_slug=department.slug,
            level=1,
        )

    def discover_all(
        self,
        max_departments: Optional[int] = None,
        max_categories_per_dept: Optional[int] = None,
    ) -> List[Category]:
        page = self.session.new_page()
        departments = self.discover_departments(page)
        if max_departments:
            departments = departments[:max_departments]

        logger.info("Processing {} departments...", len(departments))
        all_categories: List[Category] = []
        seen = set()

        for i, department in enumerate(departments):
            if i > 0:
                self.delays.department_pause()
            logger.info("[{}/{}] Processing department: {}", i + 1, len(departments), department.name)

            subcategories = self.discover_subcategories(page, department)
            if not subcategories and self.department_fallback:
                logger.info("  No subcategories found, adding department as category")
                subcategories = [self._department_as_category(department)]
            elif max_categories_per_dept:
                subcategories = subcategories[:max_categories_per_dept]

            for category in subcategories:
                if category.full_slug in seen:
                    continue
                seen.add(category.full_slug)
                all_categories.append(category)

            logger.info("Total categories so far: {}", len(all_categories))

        return all_categories


def save_category_list(categories: List[Category], file_path: str) -> None:
    """Overwrite ``file_path`` with the category list."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([c.as_dict() for c in categories], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info("Saved {} categories to {}", len(categories), path)


def load_category_list(file_path: str) -> List[Category]:
    """Categories from a previous discovery run; [] when the file is missing."""
    path = Path(file_path)
    if not path.exists():
        logger.warning("Category list not found: {}", path)
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [Category.from_dict(item) for item in data]


def count_by_level(categories: List[Category]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for category in categories:
        counts[category.level] = counts.get(category.level, 0) + 1
    return dict(sorted(counts.items()))
