"""Database models for the bestseller ingestion API."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker


def now_utc():
    return datetime.now(timezone.utc)


Base = declarative_base()


class Department(Base):
    """Top-level bestseller department."""

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    sort_order = Column(Integer, nullable=False, default=0)

    categories = relationship("Category", back_populates="department", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Department(slug='{self.slug}')>"


class Category(Base):
    """Category addressed by ``department/slug``."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False)
    full_slug = Column(String(255), unique=True, nullable=False, index=True)

    department = relationship("Department", back_populates="categories")
    rankings = relationship("BestsellerRanking", back_populates="category", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Category(full_slug='{self.full_slug}')>"


class Product(Base):
    """Product keyed by ASIN."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    asin = Column(String(10), unique=True, nullable=False, index=True)
    name = Column(Text, nullable=False)
    price = Column(Float, nullable=True)
    image_url = Column(Text, nullable=True)
    amazon_url = Column(Text, nullable=False)
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc, onupdate=now_utc)

    rankings = relationship("BestsellerRanking", back_populates="product", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Product(asin='{self.asin}', name='{self.name}')>"


class BestsellerRanking(Base):
    """History of #1 products per category; one current row per category."""

    __tablename__ = "bestseller_rankings"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    is_current = Column(Boolean, nullable=False, default=True)
    became_number_one_at = Column(DateTime, default=now_utc, nullable=False)
    superseded_at = Column(DateTime, nullable=True)

    product = relationship("Product", back_populates="rankings")
    category = relationship("Category", back_populates="rankings")

    __table_args__ = (
        Index(
            "uq_bestseller_rankings_current_category",
            "category_id",
            unique=True,
            sqlite_where=text("is_current = 1"),
            postgresql_where=text("is_current = true"),
        ),
    )

    def __repr__(self):
        return f"<BestsellerRanking(category_id={self.category_id}, product_id={self.product_id}, current={self.is_current})>"


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def database_url(config: dict) -> str:
    """``storage.url`` when set (``${DATABASE_URL}`` in config.yaml), else the SQLite file."""
    storage = config.get("storage", {})
    url = str(storage.get("url") or "").strip()
    if url:
        return url
    return f"sqlite:///{storage.get('sqlite', {}).get('database_path', 'data/bestsellers.db')}"


def get_engine(config: dict):
    engine = create_engine(database_url(config))
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine):
    """Initialize database tables."""
    Base.metadata.create_all(engine)


def get_session_factory(engine):
    """Get session factory for database operations."""
    return sessionmaker(bind=engine)
