"""Admin ingestion API receiving scraped bestsellers."""

from __future__ import annotations

import hmac
import json
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.orm import Session

from bestsellers import __version__
from bestsellers.models import get_engine, get_session_factory, init_db
from bestsellers.repositories import IngestOutcome, IngestionRepository

MAX_PRODUCT_BODY_BYTES = 10 * 1024
CONFIRM_DELETE_VALUE = "DELETE_ALL_DATA"

ASIN_RE = re.compile(r"^[A-Z0-9]{10}$")
SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def create_app(config: Optional[Dict[str, Any]] = None, admin_secret: Optional[str] = None, session_factory=None) -> FastAPI:
    """Build the API with its own engine; nothing is created at import time."""
    app = FastAPI(title="Bestseller Tracker Admin API", version=__version__)

    if session_factory is None:
        engine = get_engine(config or {})
        init_db(engine)
        session_factory = get_session_factory(engine)
    app.state.session_factory = session_factory
    app.state.admin_secret = admin_secret if admin_secret is not None else os.getenv("ADMIN_SECRET", "")

    app.add_api_route("/admin/products", ingest_product, methods=["POST"])
    app.add_api_route("/admin/products", delete_all_products, methods=["DELETE"])
    return app


def get_session(request: Request):
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def is_authorized(request: Request) -> bool:
    secret = request.app.state.admin_secret or ""
    header = request.headers.get("authorization", "")
    if not secret or not header.startswith("Bearer "):
        return False
    return hmac.compare_digest(header[len("Bearer "):].encode("utf-8"), secret.encode("utf-8"))


def is_json_content_type(value: Optional[str]) -> bool:
    return bool(value) and value.split(";", 1)[0].strip().lower() == "application/json"


def is_valid_slug(value: Any) -> bool:
    return isinstance(value, str) and len(value) <= 100 and bool(SLUG_RE.match(value))


def is_valid_amazon_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    host = (parsed.hostname or "").lower()
    return parsed.scheme == "https" and (host == "amazon.com" or host.endswith(".amazon.com"))


def validate_payload(payload: Any) -> Optional[str]:
    """Return the first validation error message, or None when valid."""
    if not isinstance(payload, dict):
        return "Request body must be a JSON object"
    department = payload.get("department") or {}
    category = payload.get("category") or {}
    product = payload.get("product") or {}
    if not isinstance(department, dict) or not department.get("name") or not department.get("slug"):
        return "Department name and slug are required"
    if not isinstance(category, dict) or not all(category.get(k) for k in ("name", "slug", "fullSlug")):
        return "Category name, slug, and fullSlug are required"
    if not isinstance(product, dict) or not all(product.get(k) for k in ("asin", "name", "amazonUrl")):
        return "Product asin, name, and amazonUrl are required"
    if not isinstance(product["asin"], str) or not ASIN_RE.match(product["asin"]):
        return "Invalid ASIN format"
    if not is_valid_slug(department["slug"]):
        return "Invalid department slug format"
    if not is_valid_slug(category["slug"]):
        return "Invalid category slug format"
    if not is_valid_amazon_url(product["amazonUrl"]):
        return "Invalid Amazon URL"
    return None


def save_product(session: Session, payload: Dict[str, Any]) -> IngestOutcome:
    """Ingest one validated payload in its own transaction."""
    try:
        outcome = IngestionRepository(session).ingest(payload)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return outcome


async def ingest_product(request: Request, session: Session = Depends(get_session)):
    if not is_authorized(request):
        return _error("Unauthorized", 401)
    if not is_json_content_type(request.headers.get("content-type")):
        return _error("Content-Type must be application/json", 415)
    try:
        declared_length = int(request.headers.get("content-length") or 0)
    except ValueError:
        declared_length = 0
    if declared_length > MAX_PRODUCT_BODY_BYTES:
        return _error("Request body too large", 413)

    body = await request.body()
    if len(body) > MAX_PRODUCT_BODY_BYTES:
        return _error("Request body too large", 413)
    try:
        payload = json.loads(body)
    except ValueError:
        return _error("Invalid JSON body", 400)

    message = validate_payload(payload)
    if message:
        return _error(message, 400)

    try:
        outcome = await run_in_threadpool(save_product, session, payload)
    except Exception:
        logger.exception("Failed to save product {}", payload["product"]["asin"])
        return _error("Failed to save product", 500)

    logger.info(
        "Saved {} for {} (ranking {})",
        outcome.asin,
        payload["category"]["fullSlug"],
        "changed" if outcome.ranking_changed else "unchanged",
    )
    return {"success": True, "data": outcome.as_dict()}


def delete_all_products(request: Request, session: Session = Depends(get_session)):
    if not is_authorized(request):
        return _error("Unauthorized", 401)
    if request.headers.get("x-confirm-delete") != CONFIRM_DELETE_VALUE:
        return _error(f"Missing confirmation header. Set X-Confirm-Delete: {CONFIRM_DELETE_VALUE}", 400)

    repository = IngestionRepository(session)
    try:
        counts = repository.delete_all()
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to delete data")
        return _error("Failed to delete data", 500)

    logger.warning("Deleted all ingested data: {}", counts)
    return {"success": True, "deleted": counts}
