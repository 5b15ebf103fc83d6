"""HTTP client for the admin product ingestion API."""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from loguru import logger

from bestsellers.config_loader import get_ingestion_config
from bestsellers.errors import IngestionConfigError
from bestsellers.records import Category, ScrapedProduct

DEFAULT_ENDPOINT = "/admin/products"


@dataclass
class SubmitResult:
    """Outcome of one submission. ``error`` is set whenever ``success`` is False."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def build_payload(
    category: Category,
    product: ScrapedProduct,
    sort_order: Optional[int] = None,
) -> Dict[str, Any]:
    department: Dict[str, Any] = {"name": category.department_name, "slug": category.department_slug}
    if sort_order is not None:
        department["sortOrder"] = sort_order
    return {
        "department": department,
        "category": {
            "name": category.name,
            "slug": category.slug,
            "fullSlug": category.full_slug,
        },
        "product": product.as_dict(),
    }


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or "Unknown error"
    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        return error if isinstance(error, str) else json.dumps(error)
    if isinstance(data, str):
        return data
    return json.dumps(data)


class IngestionClient:
    """Submits scraped bestsellers with bearer-token auth. Never raises on submit."""

    def __init__(
        self,
        base_url: str,
        secret: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30,
        http: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise IngestionConfigError("ADMIN_API_URL or NEXT_PUBLIC_SITE_URL environment variable is required")
        if not secret:
            raise IngestionConfigError("ADMIN_SECRET environment variable is required")
        self.base_url = base_url.rstrip("/")
        self.endpoint = "/" + endpoint.lstrip("/")
        self.secret = secret
        self.timeout = timeout
        self.http = http or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    @classmethod
    def from_env(cls, endpoint: str = DEFAULT_ENDPOINT, timeout: float = 30) -> "IngestionClient":
        base_url = os.getenv("ADMIN_API_URL") or os.getenv("NEXT_PUBLIC_SITE_URL") or ""
        return cls(base_url, os.getenv("ADMIN_SECRET") or "", endpoint=endpoint, timeout=timeout)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "IngestionClient":
        """Config values win over the environment; the secret only comes from the environment."""
        cfg = get_ingestion_config(config)
        base_url = cfg.get("base_url") or os.getenv("ADMIN_API_URL") or os.getenv("NEXT_PUBLIC_SITE_URL") or ""
        return cls(
            base_url,
            os.getenv("ADMIN_SECRET") or "",
            endpoint=cfg.get("endpoint") or DEFAULT_ENDPOINT,
            timeout=float(cfg.get("timeout_seconds", 30)),
        )

    def submit_product(self, payload: Dict[str, Any]) -> SubmitResult:
        try:
            response = self.http.post(
                self.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.secret}",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug("Submission transport error: {}", e)
            return SubmitResult(success=False, error=f"Network: {e}")

        if not response.ok:
            return SubmitResult(success=False, error=f"{response.status_code}: {_error_message(response)}")

        try:
            body = response.json()
        except ValueError:
            return SubmitResult(success=False, error=f"{response.status_code}: Invalid JSON response")
        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            return SubmitResult(success=False, error=str(error or "Unknown error"))
        return SubmitResult(success=True, data=body.get("data"))
