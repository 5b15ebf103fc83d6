"""Command-line interface for the bestseller tracker."""

import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from bestsellers.config_loader import ensure_directories, load_config
from bestsellers.orchestrator import BatchOrchestrator, BatchResult


def setup_logging(config: dict):
    """Setup logging configuration."""
    log_config = config.get("logging", {})
    level = log_config.get("level", "INFO")
    log_file = log_config.get("file", "data/logs/scraper.log")

    # Ensure log directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}",
    )
    logger.add(
        log_file,
        level=level,
        rotation=log_config.get("rotation", "1 week"),
        retention=log_config.get("retention", "1 month"),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}",
    )


def _orchestrator(ctx) -> BatchOrchestrator:
    return BatchOrchestrator(ctx.obj["config"], headless=ctx.obj.get("headless"))


def _print_batch_summary(result: BatchResult):
    click.echo(f"\n{'='*60}")
    click.echo("SCRAPING COMPLETE")
    click.echo(f"{'='*60}")
    click.echo(f"Categories processed: {result.processed}")
    click.echo(f"Products submitted: {result.submitted}")
    click.echo(f"Errors: {len(result.errors)}")
    if result.completed_pass:
        click.echo("All categories processed, next run starts from the beginning")
    else:
        click.echo(f"Next run starts at index {result.next_index} of {result.total_categories}")

    if result.errors:
        click.echo("\nErrors:")
        for error in result.errors[:10]:
            click.echo(f"  - {error}")
        if len(result.errors) > 10:
            click.echo(f"  ... and {len(result.errors) - 10} more")
    click.echo(f"{'='*60}")


@click.group(invoke_without_command=True)
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--headless/--no-headless", default=None, help="Override browser headless mode")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool, headless: Optional[bool]):
    """Bestseller Tracker - #1 bestseller scraper and ingestion API."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    ctx.ensure_object(dict)

    try:
        cfg = load_config(config)
        if verbose:
            cfg.setdefault("logging", {})["level"] = "DEBUG"
        ctx.obj["config"] = cfg
        ctx.obj["config_path"] = config
        ctx.obj["headless"] = headless

        ensure_directories(cfg)
        setup_logging(cfg)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--max-departments", type=int, default=None, help="Only process the first N departments")
@click.option("--max-categories-per-dept", type=int, default=None, help="Keep at most N categories per department")
@click.pass_context
def discover(ctx, max_departments: Optional[int], max_categories_per_dept: Optional[int]):
    """Discover the category tree and save the category list."""
    try:
        categories = _orchestrator(ctx).run_discovery(
            max_departments=max_departments,
            max_categories_per_dept=max_categories_per_dept,
        )
        click.echo(f"\nDiscovered {len(categories)} categories")
    except Exception as e:
        logger.exception("Discovery failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("batch_size", type=click.IntRange(min=0), required=False)
@click.argument("start_index", type=click.IntRange(min=0), required=False)
@click.option("--enrich/--no-enrich", default=None, help="Load each product page for full details")
@click.pass_context
def scrape(ctx, batch_size: Optional[int], start_index: Optional[int], enrich: Optional[bool]):
    """Scrape BATCH_SIZE categories (default 50), resuming from the checkpoint or START_INDEX."""
    try:
        result = _orchestrator(ctx).run_batch(batch_size=batch_size, start_index=start_index, enrich=enrich)
        if result.status == "no_categories":
            click.echo("No categories found. Run 'discover' first.")
            return
        _print_batch_summary(result)
    except Exception as e:
        logger.exception("Scrape failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def full(ctx):
    """Run discovery followed by a large batch from the first category."""
    try:
        result = _orchestrator(ctx).run_full()
        if result.status == "no_categories":
            click.echo("No categories found after discovery.")
            return
        _print_batch_summary(result)
    except Exception as e:
        logger.exception("Full run failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx):
    """Show the saved checkpoint and discovered categories."""
    try:
        summary = _orchestrator(ctx).status()
        state = summary["state"]
        click.echo(f"\n{'='*60}")
        click.echo("SCRAPER STATUS")
        click.echo(f"{'='*60}")
        click.echo(f"Categories discovered: {summary['total_categories']}")
        for level, count in summary["categories_by_level"].items():
            click.echo(f"  Level {level}: {count}")
        click.echo(f"Last run: {state['lastRun'] or 'never'}")
        click.echo(f"Next category index: {state['lastCategoryIndex']}")
        click.echo(f"Categories processed (total): {state['categoriesProcessed']}")
        click.echo(f"Products submitted (total): {state['productsSubmitted']}")
        click.echo(f"Errors in last run: {len(state['errors'])}")
        click.echo(f"{'='*60}")
    except Exception as e:
        logger.exception("Status failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def init(ctx):
    """Initialize the ingestion database and directories."""
    config = ctx.obj["config"]

    try:
        ensure_directories(config)

        from bestsellers.models import get_engine, init_db

        engine = get_engine(config)
        init_db(engine)

        click.echo("[OK] Directories created")
        click.echo("[OK] Database initialized")
        click.echo("\nNext steps:")
        click.echo("  1. Run: bestsellers discover")
        click.echo("  2. Run: bestsellers scrape")

    except Exception as e:
        logger.exception("Initialization failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", type=int, default=8000, show_default=True, help="Bind port")
@click.pass_context
def serve(ctx, host: str, port: int):
    """Run the admin ingestion API."""
    try:
        import uvicorn

        from bestsellers.api import create_app

        app = create_app(ctx.obj["config"])
        logger.info("Serving ingestion API on {}:{}", host, port)
        uvicorn.run(app, host=host, port=port)
    except Exception as e:
        logger.exception("Server failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
