"""
Vector Cache
============

Content-addressed cache of chunks and vectors already computed for a file.

Re-ingesting the same file (for example into another namespace) replays the
cached chunks instead of splitting and embedding again.

Layout:
    <cache_dir>/<sha256(key)>.json  ->  [{"id", "text", "values", "metadata"}, ...]

Example:
    cache = VectorCache(Path("storage/vector-cache"))
    if cache.exists("documents/contract.pdf"):
        entries = cache.load("documents/contract.pdf")
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)


@dataclass
class CachedVector:
    """One cached chunk: text, vector and chunk metadata."""
    text: str
    values: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "values": self.values,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedVector":
        metadata = data.get("metadata") or {}
        return cls(
            id=data.get("id", ""),
            text=data.get("text") or metadata.get("text", ""),
            values=list(data["values"]),
            metadata=metadata,
        )


class VectorCache:
    """
    File-system cache keyed by a content identifier (usually the source path).

    Attributes:
        cache_dir: Directory holding the cache files
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def exists(self, key: str) -> bool:
        """True if vectors are cached for key."""
        return bool(key) and self._path(key).is_file()

    def load(self, key: str) -> List[CachedVector]:
        """
        Load cached vectors for key.

        Returns:
            Cached vectors, [] if the entry is missing or unreadable
        """
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [CachedVector.from_dict(item) for item in data]
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Corrupted vector cache entry {path.name}: {e}")
            return []

    def store(self, key: str, vectors: List[CachedVector]) -> Path:
        """Write vectors for key, replacing any previous entry."""
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([v.to_dict() for v in vectors], f, ensure_ascii=False)
        tmp_path.replace(path)

        logger.debug(f"Cached {len(vectors)} vectors for {key} -> {path.name}")
        return path

    def invalidate(self, key: str) -> bool:
        """Remove the cache entry for key; returns True if one existed."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False
