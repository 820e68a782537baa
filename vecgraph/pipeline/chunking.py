"""
Text Splitter
=============

Splits document text into chunks for embedding.

Wraps langchain-text-splitters' RecursiveCharacterTextSplitter and adds:
- Max chunk size bounded by the embedder's max_chunk_length
- Optional header metadata block prefixed to every chunk, so that each
  chunk carries the title and publication date of its source document

Header format:
    <document_metadata>
    sourceDocument: Master Services Agreement
    published: 2024-03-01
    </document_metadata>

    <chunk text>

Usage:
    splitter = TextSplitter(chunk_size=1000, chunk_overlap=20)
    chunks = splitter.split(text, header_metadata={"sourceDocument": "MSA"})
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from vecgraph.config import SplitterSettings
from vecgraph.errors import EmbeddingError

logger = logging.getLogger(__name__)


def determine_max_chunk_size(preferred: Optional[int], embedder_limit: Optional[int]) -> int:
    """
    Effective chunk size: the preferred size, capped by the embedder limit.

    Examples:
        >>> determine_max_chunk_size(1000, 512)
        512
        >>> determine_max_chunk_size(None, 512)
        512
        >>> determine_max_chunk_size(800, None)
        800
    """
    if embedder_limit is None:
        if preferred is None:
            return SplitterSettings().chunk_size
        return preferred
    if preferred is None or preferred > embedder_limit:
        return embedder_limit
    return preferred


def build_header_metadata(metadata: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Header fields derived from document metadata (title and publication date)."""
    metadata = metadata or {}
    header = {}
    if metadata.get("title"):
        header["sourceDocument"] = str(metadata["title"])
    if header:
        header["published"] = str(metadata.get("published") or "unknown")
    return header


def stringify_header(header_metadata: Optional[Mapping[str, Any]]) -> str:
    """Render the header block, or "" when there is nothing to render."""
    if not header_metadata:
        return ""
    lines = [f"{key}: {value}" for key, value in header_metadata.items() if value is not None]
    if not lines:
        return ""
    return "<document_metadata>\n" + "\n".join(lines) + "\n</document_metadata>\n\n"


class TextSplitter:
    """
    Recursive character splitter with header metadata support.

    Attributes:
        chunk_size: Max characters per chunk (before the header prefix)
        chunk_overlap: Characters shared by consecutive chunks
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 20,
        embedder_limit: Optional[int] = None
    ):
        self.chunk_size = determine_max_chunk_size(chunk_size, embedder_limit)
        # overlap must stay below the (possibly reduced) chunk size
        self.chunk_overlap = min(chunk_overlap, max(self.chunk_size - 1, 0))

        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            length_function=len,
        )

        logger.debug(
            f"TextSplitter initialized: chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap}"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[SplitterSettings] = None,
        embedder_limit: Optional[int] = None
    ) -> "TextSplitter":
        settings = settings or SplitterSettings()
        return cls(
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            embedder_limit=embedder_limit,
        )

    def split(
        self,
        text: str,
        header_metadata: Optional[Mapping[str, Any]] = None
    ) -> List[str]:
        """
        Split text into chunks, each prefixed by the header block.

        Raises:
            EmbeddingError: the underlying splitter failed
        """
        if not text or not text.strip():
            return []

        try:
            pieces = self._splitter.split_text(text)
        except Exception as e:
            raise EmbeddingError(f"Text splitting failed: {e}") from e

        header = stringify_header(header_metadata)
        chunks = [f"{header}{piece}" for piece in pieces if piece.strip()]

        logger.debug(f"Split {len(text)} chars into {len(chunks)} chunks")
        return chunks
