"""Plain records exchanged between discovery, extraction and ingestion."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Department:
    """Top-level taxonomy node on the bestseller site."""

    name: str
    slug: str
    url: str

    def as_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "slug": self.slug, "url": self.url}


@dataclass
class Category:
    """Node of the department -> category -> subcategory tree."""

    name: str
    slug: str
    url: str
    department_name: str
    department_slug: str
    full_slug: str
    level: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "url": self.url,
            "departmentName": self.department_name,
            "departmentSlug": self.department_slug,
            "fullSlug": self.full_slug,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            name=str(data["name"]),
            slug=str(data["slug"]),
            url=str(data["url"]),
            department_name=str(data["departmentName"]),
            department_slug=str(data["departmentSlug"]),
            full_slug=str(data["fullSlug"]),
            level=int(data.get("level", 2)),
        )


@dataclass
class ScrapedProduct:
    """Rank-1 product of a category at scrape time.

    ``match_method`` is not sent to the API; ``"fallback_anchor"`` marks a
    product found by the permissive any-product-link query, which cannot
    confirm the element is actually rank #1.
    """

    asin: str
    name: str
    price: Optional[float]
    image_url: Optional[str]
    amazon_url: str
    rating: Optional[float]
    review_count: Optional[int]
    match_method: str = "card"

    @property
    def is_low_confidence(self) -> bool:
        return self.match_method != "card"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "asin": self.asin,
            "name": self.name,
            "price": self.price,
            "imageUrl": self.image_url,
            "amazonUrl": self.amazon_url,
            "rating": self.rating,
            "reviewCount": self.review_count,
        }


@dataclass
class ScraperState:
    """Durable cursor of the batch scraper."""

    last_run: str = ""
    categories_processed: int = 0
    products_submitted: int = 0
    errors: List[str] = field(default_factory=list)
    last_category_index: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lastRun": self.last_run,
            "categoriesProcessed": self.categories_processed,
            "productsSubmitted": self.products_submitted,
            "errors": list(self.errors),
            "lastCategoryIndex": self.last_category_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScraperState":
        return cls(
            last_run=str(data.get("lastRun") or ""),
            categories_processed=int(data.get("categoriesProcessed") or 0),
            products_submitted=int(data.get("productsSubmitted") or 0),
            errors=[str(e) for e in data.get("errors") or []],
            last_category_index=max(0, int(data.get("lastCategoryIndex") or 0)),
        )
