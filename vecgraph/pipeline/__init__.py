"""
Ingestion Pipeline
==================

- chunking: TextSplitter (RecursiveCharacterTextSplitter + header metadata)
- ingestion: IngestionOrchestrator (split, embed, persist, cache, maintain)
"""

from vecgraph.pipeline.chunking import TextSplitter, determine_max_chunk_size
from vecgraph.pipeline.ingestion import DocumentInput, IngestionOrchestrator, IngestionResult

__all__ = [
    "TextSplitter",
    "determine_max_chunk_size",
    "DocumentInput",
    "IngestionOrchestrator",
    "IngestionResult",
]
