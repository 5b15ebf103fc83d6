"""Exception types shared across the scraper."""


class BrowserLaunchError(Exception):
    """Raised when the browser binary cannot be started."""
    pass


class BrowserNotLaunchedError(RuntimeError):
    """Raised when a page is requested before launch()."""
    pass


class IngestionConfigError(Exception):
    """Raised when the ingestion API URL or secret is missing."""
    pass


class ExtractionError(Exception):
    """Raised inside the extractor when a page cannot yield a product."""
    pass


class ProductNotFoundError(Exception):
    """Raised when a category page has no usable rank-1 product."""
    pass
