"""Workers package: background document ingestion jobs."""
