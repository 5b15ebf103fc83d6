from bestsellers.repositories.ingestion_repository import IngestOutcome, IngestionRepository

__all__ = ["IngestOutcome", "IngestionRepository"]
