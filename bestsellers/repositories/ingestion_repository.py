"""Repository layer for product ingestion and bestseller ranking transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from bestsellers.models import BestsellerRanking, Category, Department, Product, now_utc


@dataclass
class IngestOutcome:
    """Ids touched by one ingestion."""

    department_id: int
    category_id: int
    product_id: int
    asin: str
    name: str
    ranking_changed: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "departmentId": self.department_id,
            "categoryId": self.category_id,
            "productId": self.product_id,
            "product": {"asin": self.asin, "name": self.name},
        }


class IngestionRepository:
    """Idempotent upserts keyed by department slug, full slug and ASIN."""

    def __init__(self, session: Session):
        self.session = session

    def upsert_department(self, name: str, slug: str, sort_order: Optional[int] = None) -> Department:
        department = self.session.query(Department).filter(Department.slug == slug).one_or_none()
        if department is None:
            department = Department(name=name, slug=slug, sort_order=sort_order or 0)
            self.session.add(department)
        else:
            department.name = name
            if sort_order is not None:
                department.sort_order = sort_order
        self.session.flush()
        return department

    def upsert_category(self, department: Department, name: str, slug: str, full_slug: str) -> Category:
        category = self.session.query(Category).filter(Category.full_slug == full_slug).one_or_none()
        if category is None:
            category = Category(department_id=department.id, name=name, slug=slug, full_slug=full_slug)
            self.session.add(category)
        else:
            category.name = name
            category.slug = slug
            category.department_id = department.id
        self.session.flush()
        return category

    def upsert_product(self, data: Dict[str, Any]) -> Product:
        product = self.session.query(Product).filter(Product.asin == data["asin"]).one_or_none()
        if product is None:
            product = Product(asin=data["asin"])
            self.session.add(product)
        product.name = data["name"]
        product.price = data.get("price")
        product.image_url = data.get("imageUrl")
        product.amazon_url = data["amazonUrl"]
        product.rating = data.get("rating")
        product.review_count = data.get("reviewCount")
        self.session.flush()
        return product

    def current_ranking(self, category_id: int) -> Optional[BestsellerRanking]:
        return (
            self.session.query(BestsellerRanking)
            .filter(BestsellerRanking.category_id == category_id, BestsellerRanking.is_current.is_(True))
            .one_or_none()
        )

    def set_current_bestseller(self, category: Category, product: Product) -> bool:
        """Make ``product`` the current #1 of ``category``; False when it already is."""
        current = self.current_ranking(category.id)
        if current is not None and current.product_id == product.id:
            return False

        if current is not None:
            current.is_current = False
            current.superseded_at = now_utc()
            # Flush first so the partial unique index never sees two current rows
            self.session.flush()

        self.session.add(
            BestsellerRanking(
                product_id=product.id,
                category_id=category.id,
                is_current=True,
                became_number_one_at=now_utc(),
            )
        )
        self.session.flush()
        return True

    def ingest(self, payload: Dict[str, Any]) -> IngestOutcome:
        """Apply one validated payload. The caller owns commit/rollback."""
        dept_data = payload["department"]
        cat_data = payload["category"]
        prod_data = payload["product"]

        department = self.upsert_department(dept_data["name"], dept_data["slug"], dept_data.get("sortOrder"))
        category = self.upsert_category(department, cat_data["name"], cat_data["slug"], cat_data["fullSlug"])
        product = self.upsert_product(prod_data)
        changed = self.set_current_bestseller(category, product)

        return IngestOutcome(
            department_id=department.id,
            category_id=category.id,
            product_id=product.id,
            asin=product.asin,
            name=product.name,
            ranking_changed=changed,
        )

    def delete_all(self) -> Dict[str, int]:
        counts = {}
        for model in (BestsellerRanking, Product, Category, Department):
            counts[model.__tablename__] = self.session.query(model).delete(synchronize_session=False)
        return counts
