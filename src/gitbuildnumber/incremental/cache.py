"""Cache of extraction results for incremental builds.

A result is reused while the inputs that produced it (short HEAD id, dirty
flag and the extraction options) are unchanged, so repeated builds of an
untouched working tree skip the history walk.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)


class CachedResult(BaseModel):
    """Result extracted for one repository."""

    params: List[Optional[str]] = Field(..., description="Inputs the result was extracted with")
    result: Dict[str, str] = Field(..., description="Extracted properties")
    extracted_at: datetime = Field(default_factory=datetime.now, description="Time of extraction")


class CacheState(BaseModel):
    """Root object of the cache file."""

    version: str = Field("1.0", description="Cache file format version")
    repositories: Dict[str, CachedResult] = Field(
        default_factory=dict, description="Cached result per repository path"
    )


class ResultCache:
    """Persists extraction results in <cache_dir>/results.json."""

    def __init__(self, cache_dir: Optional[Path] = None):
        """Initialize the cache.

        Args:
            cache_dir: Directory to store the cache file. Defaults to ~/.gitbuildnumber/
        """
        if cache_dir is None:
            cache_dir = Path.home() / ".gitbuildnumber"

        self.cache_dir = Path(cache_dir)
        self.cache_file = self.cache_dir / "results.json"
        self._state: Optional[CacheState] = None

    def load_or_create(self) -> CacheState:
        if self._state is not None:
            return self._state

        if self.cache_file.exists():
            try:
                with open(self.cache_file, "r") as f:
                    data = json.load(f)
                self._state = CacheState(**data)
            except (json.JSONDecodeError, ValueError) as e:
                logger.warning("cache_file_unreadable", path=str(self.cache_file), error=str(e))
                self._state = CacheState()
        else:
            self._state = CacheState()

        return self._state

    def save(self) -> None:
        """Write the cache using a temporary file and an atomic rename."""
        if self._state is None:
            return

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".results_", suffix=".json.tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self._state.model_dump(mode="json"), f, indent=2)
            os.replace(temp_path, self.cache_file)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def get(self, repo_path: str, params: List[Optional[str]]) -> Optional[Dict[str, str]]:
        """Cached result for a repository, if it was extracted with the same params."""
        cached = self.load_or_create().repositories.get(repo_path)
        if cached is None or cached.params != params:
            return None
        logger.info("using_cached_result", repository=repo_path)
        return dict(cached.result)

    def put(self, repo_path: str, params: List[Optional[str]], result: Dict[str, str]) -> None:
        state = self.load_or_create()
        state.repositories[repo_path] = CachedResult(params=params, result=dict(result))
        self.save()

    def invalidate(self, repo_path: str) -> bool:
        """Drop the cached result of a repository.

        Returns:
            True if a result was dropped
        """
        state = self.load_or_create()
        if repo_path not in state.repositories:
            return False
        del state.repositories[repo_path]
        self.save()
        return True
