"""Batch run orchestration: discovery, resumable scraping and submission."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from bestsellers.browser import BrowserSession
from bestsellers.config_loader import get_discovery_config, get_paths_config, get_scraping_config
from bestsellers.discovery import (
    CategoryDiscoverer,
    count_by_level,
    load_category_list,
    save_category_list,
)
from bestsellers.extractor import BestsellerExtractor
from bestsellers.ingestion import IngestionClient, build_payload
from bestsellers.records import Category, ScraperState
from bestsellers.state import load_state, save_state

SessionFactory = Callable[[], BrowserSession]


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class BatchResult:
    """Summary of one scrape batch."""

    status: str
    total_categories: int = 0
    start_index: int = 0
    end_index: int = 0
    processed: int = 0
    submitted: int = 0
    errors: List[str] = field(default_factory=list)
    next_index: int = 0
    completed_pass: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "total_categories": self.total_categories,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "processed": self.processed,
            "submitted": self.submitted,
            "errors": list(self.errors),
            "next_index": self.next_index,
            "completed_pass": self.completed_pass,
        }


class BatchOrchestrator:
    """Owns one browser session per run; the state file is the resume contract."""

    def __init__(
        self,
        config: Dict[str, Any],
        session_factory: Optional[SessionFactory] = None,
        client_factory: Optional[Callable[[], IngestionClient]] = None,
        headless: Optional[bool] = None,
    ):
        self.config = config
        self.paths = get_paths_config(config)
        self.session_factory = session_factory or (lambda: BrowserSession.from_config(config, headless=headless))
        self.client_factory = client_factory or (lambda: IngestionClient.from_config(config))

    def run_discovery(
        self,
        max_departments: Optional[int] = None,
        max_categories_per_dept: Optional[int] = None,
    ) -> List[Category]:
        discovery_cfg = get_discovery_config(self.config)
        if max_departments is None:
            max_departments = discovery_cfg.get("max_departments")
        if max_categories_per_dept is None:
            max_categories_per_dept = discovery_cfg.get("max_categories_per_dept")

        logger.info("Starting category discovery...")
        with self.session_factory() as session:
            discoverer = CategoryDiscoverer.from_config(session, self.config)
            categories = discoverer.discover_all(max_departments, max_categories_per_dept)

        if not categories:
            logger.warning("Discovery found no categories; keeping existing {}", self.paths["categories_file"])
            return categories

        save_category_list(categories, self.paths["categories_file"])
        for level, count in count_by_level(categories).items():
            logger.info("  Level {}: {} categories", level, count)
        return categories

    def run_batch(
        self,
        batch_size: Optional[int] = None,
        start_index: Optional[int] = None,
        enrich: Optional[bool] = None,
    ) -> BatchResult:
        scraping_cfg = get_scraping_config(self.config)
        if batch_size is None:
            batch_size = int(scraping_cfg.get("batch_size", 50))
        if enrich is None:
            enrich = bool(scraping_cfg.get("enrich_details", False))

        # Missing credentials must fail before a browser is started
        client = self.client_factory()

        categories = load_category_list(self.paths["categories_file"])
        if not categories:
            logger.error("No categories found. Run 'discover' first.")
            return BatchResult(status="no_categories")

        state = load_state(self.paths["state_file"])
        resume_index = state.last_category_index if start_index is None else start_index
        resume_index = max(0, int(resume_index))
        total = len(categories)
        end_index = min(resume_index + max(0, int(batch_size)), total)

        result = BatchResult(
            status="completed",
            total_categories=total,
            start_index=resume_index,
            end_index=end_index,
        )
        state.errors = []

        if resume_index < end_index:
            logger.info("Processing categories {} to {} of {}", resume_index + 1, end_index, total)
            self._run_range(categories, resume_index, end_index, client, state, result, enrich)

        result.next_index = end_index
        if end_index >= total:
            logger.info("All categories processed! Resetting index for next run.")
            state.last_category_index = 0
            save_state(state, self.paths["state_file"])
            result.next_index = 0
            result.completed_pass = True

        logger.info(
            "Batch complete: {} processed, {} submitted, {} errors",
            result.processed,
            result.submitted,
            len(result.errors),
        )
        return result

    def _run_range(
        self,
        categories: List[Category],
        resume_index: int,
        end_index: int,
        client: IngestionClient,
        state: ScraperState,
        result: BatchResult,
        enrich: bool,
    ) -> None:
        total = len(categories)
        with self.session_factory() as session:
            extractor = BestsellerExtractor.from_config(session, self.config)
            page = session.new_page()

            for i in range(resume_index, end_index):
                category = categories[i]
                if i > resume_index:
                    session.delays.category_pause()

                logger.info("[{}/{}] {} ({})", i + 1, total, category.name, category.full_slug)
                error = self._process_category(extractor, client, page, category, enrich)
                if error is None:
                    result.submitted += 1
                    state.products_submitted += 1
                else:
                    message = f"{category.full_slug}: {error}"
                    logger.warning("Failed: {}", message)
                    result.errors.append(message)
                    state.errors.append(message)

                result.processed += 1
                state.last_category_index = i + 1
                state.categories_processed += 1
                state.last_run = _utcnow_iso()
                save_state(state, self.paths["state_file"])

    def _process_category(
        self,
        extractor: BestsellerExtractor,
        client: IngestionClient,
        page,
        category: Category,
        enrich: bool,
    ) -> Optional[str]:
        """Scrape and submit one category; returns an error message or None."""
        try:
            product = extractor.extract_bestseller(page, category.url)
            if product is None:
                return "No product found"
            if enrich:
                product = extractor.enrich(page, product)
            response = client.submit_product(build_payload(category, product))
        except Exception as e:
            logger.exception("Unexpected error processing {}", category.full_slug)
            return str(e)
        if not response.success:
            return response.error or "Unknown error"
        logger.info("Submitted {} for {}", product.asin, category.full_slug)
        return None

    def run_full(self) -> BatchResult:
        """Fresh discovery followed by one large batch from the first category."""
        self.run_discovery()
        full_batch_size = int(get_scraping_config(self.config).get("full_batch_size", 100))
        return self.run_batch(batch_size=full_batch_size, start_index=0)

    def status(self) -> Dict[str, Any]:
        state = load_state(self.paths["state_file"])
        categories = load_category_list(self.paths["categories_file"])
        return {
            "state": state.as_dict(),
            "total_categories": len(categories),
            "categories_by_level": count_by_level(categories),
        }
