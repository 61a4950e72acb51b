"""
Legislator Lens - cache manager tests
"""
import pytest

from legislator_lens.core import cache_manager


@pytest.fixture
def cache(tmp_path):
    cache_manager.init_cache(str(tmp_path))
    yield cache_manager
    cache_manager.close_cache()


class TestCacheManager:

    @pytest.mark.asyncio
    async def test_set_get_evict_by_tag(self, cache):
        analysis_key = cache.build_analysis_key("118-hr-1234", "deep")
        news_key = cache.build_news_key("118-hr-1234")
        other_key = cache.build_news_key("118-s-42")

        await cache.set(analysis_key, {"analysis": {"core": {}}}, tag="118-hr-1234")
        await cache.set(news_key, {"articles": []}, tag="118-hr-1234")
        await cache.set(other_key, {"articles": []}, tag="118-s-42")

        assert await cache.get(analysis_key) == {"analysis": {"core": {}}}
        assert await cache.evict("118-hr-1234") == 2
        assert await cache.get(analysis_key) is None
        assert await cache.get(news_key) is None
        assert await cache.get(other_key) == {"articles": []}

    @pytest.mark.asyncio
    async def test_stats(self, cache):
        await cache.reset_cache_stats()
        await cache.set("news:1", {"articles": []})

        await cache.get("news:1")
        await cache.get("news:2")

        stats = await cache.get_cache_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    @pytest.mark.asyncio
    async def test_uninitialised_cache_raises(self):
        cache_manager.close_cache()

        with pytest.raises(RuntimeError):
            await cache_manager.get("analysis:1:quick")

    def test_keys(self):
        assert cache_manager.build_analysis_key("118-s-42", "quick") == "analysis:118-s-42:quick"
        assert cache_manager.build_news_key("118-s-42") == "news:118-s-42"
        assert cache_manager.build_historical_key("118-s-42") == "historical:118-s-42"

    def test_analysis_key_folds_in_options(self):
        plain = {"include_news": False, "offline_mode": False}
        with_news = {"include_news": True, "offline_mode": False}

        key = cache_manager.build_analysis_key("118-s-42", "standard", plain)

        assert key.startswith("analysis:118-s-42:standard:")
        assert key == cache_manager.build_analysis_key("118-s-42", "standard", dict(reversed(list(plain.items()))))
        assert key != cache_manager.build_analysis_key("118-s-42", "standard", with_news)

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, cache, tmp_path):
        await cache.set("news:1", {"articles": []})

        cache.init_cache(str(tmp_path / "elsewhere"))

        assert await cache.get("news:1") == {"articles": []}
        assert not (tmp_path / "elsewhere").exists()
