"""Tests for the incremental result cache."""

import tempfile
from pathlib import Path

from gitbuildnumber.incremental import CachedResult, CacheState, ResultCache

PARAMS = ["1234567", None, "7", "yyyy-MM-dd", "yyyy-MM-dd HH:mm:ss", None, None, None, None, "jinja"]
RESULT = {"revision": "1234567890abcdef1234567890abcdef12345678", "buildNumber": "main.37.1234567"}


class TestCacheModels:
    """Test Pydantic cache models."""

    def test_cache_state_creation(self):
        state = CacheState()
        assert state.version == "1.0"
        assert state.repositories == {}

    def test_cached_result_serialization(self):
        """Test serializing a cached result to JSON-compatible data."""
        state = CacheState()
        state.repositories["/path/to/repo"] = CachedResult(params=PARAMS, result=RESULT)

        data = state.model_dump(mode="json")
        assert data["repositories"]["/path/to/repo"]["params"] == PARAMS
        assert isinstance(data["repositories"]["/path/to/repo"]["extracted_at"], str)


class TestResultCache:
    """Test ResultCache functionality."""

    def test_default_cache_dir(self):
        cache = ResultCache()
        assert cache.cache_dir == Path.home() / ".gitbuildnumber"
        assert cache.cache_file == cache.cache_dir / "results.json"

    def test_get_missing_repository(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))

            assert cache.get("/test/repo", PARAMS) is None

    def test_put_and_get(self):
        """Test that a stored result is found by a new cache instance."""
        with tempfile.TemporaryDirectory() as tmpdir:
            ResultCache(Path(tmpdir)).put("/test/repo", PARAMS, RESULT)

            cache = ResultCache(Path(tmpdir))
            assert cache.get("/test/repo", PARAMS) == RESULT

    def test_changed_params_miss(self):
        """Test that a result is not reused once any input changed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.put("/test/repo", PARAMS, RESULT)

            assert cache.get("/test/repo", ["7654321"] + PARAMS[1:]) is None
            assert cache.get("/test/repo", PARAMS[:1] + ["dirty"] + PARAMS[2:]) is None

    def test_put_replaces_result(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.put("/test/repo", PARAMS, RESULT)
            cache.put("/test/repo", ["7654321"] + PARAMS[1:], {"buildNumber": "main.38.7654321"})

            assert cache.get("/test/repo", PARAMS) is None
            assert cache.get("/test/repo", ["7654321"] + PARAMS[1:]) == {"buildNumber": "main.38.7654321"}

    def test_returned_result_is_a_copy(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.put("/test/repo", PARAMS, RESULT)

            cache.get("/test/repo", PARAMS)["buildNumber"] = "changed"

            assert cache.get("/test/repo", PARAMS) == RESULT

    def test_invalidate(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.put("/test/repo", PARAMS, RESULT)

            assert cache.invalidate("/test/repo") is True
            assert cache.get("/test/repo", PARAMS) is None
            assert cache.invalidate("/test/repo") is False

    def test_atomic_save(self):
        """Test that save leaves no temporary files behind."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.put("/test/repo", PARAMS, RESULT)

            assert cache.cache_file.exists()
            assert list(Path(tmpdir).glob(".results_*.json.tmp")) == []

    def test_save_without_state_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir) / "nested")
            cache.save()

            assert not cache.cache_file.exists()

    def test_corrupted_cache_file(self):
        """Test that an unreadable cache file is replaced by an empty cache."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = ResultCache(Path(tmpdir))
            cache.cache_file.write_text("invalid json {{{")

            state = cache.load_or_create()
            assert isinstance(state, CacheState)
            assert state.repositories == {}
