"""Tests for the click command line interface."""

import json

import pytest
from click.testing import CliRunner

from resilience.offline_cache import now_ms
from storage.cache_store import CACHE_STORE_NAME
from storage.kv_store import JsonFileKeyValueStore


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a JSON cache file under tmp_path."""
    monkeypatch.setenv("CACHE_BACKEND", "json")
    monkeypatch.setenv("CACHE_STORE_PATH", str(tmp_path / "offline_cache.db"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ENABLE_NOTIFICATIONS", "false")
    monkeypatch.setenv("API_BASE_URL", "http://sagascript.invalid")
    return JsonFileKeyValueStore(tmp_path / "offline_cache.json")


def _seed(store, entries: dict, age_ms: int = 0, ttl_ms: int = 600_000):
    stamp = now_ms() - age_ms
    blob = {key: {"data": data, "timestamp": stamp, "ttl": ttl_ms} for key, data in entries.items()}
    store.set(CACHE_STORE_NAME, json.dumps(blob))


@pytest.fixture
def runner():
    return CliRunner()


class TestCacheCommands:
    def test_list_empty(self, runner, cli_env):
        from cli.main import cli
        result = runner.invoke(cli, ["cache", "list"])
        assert result.exit_code == 0
        assert "empty" in result.output

    def test_list_entries(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"profile_data": {"username": "ana"}, "plan_usage": {}})

        result = runner.invoke(cli, ["cache", "list"])
        assert result.exit_code == 0
        assert "profile_data" in result.output
        assert "plan_usage" in result.output

    def test_info_missing_key(self, runner, cli_env):
        from cli.main import cli
        result = runner.invoke(cli, ["cache", "info", "nope"])
        assert result.exit_code == 1
        assert "No cache entry" in result.output

    def test_info_existing_key(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"user_stats": {"currentStreak": 3}}, age_ms=65_000)

        result = runner.invoke(cli, ["cache", "info", "user_stats"])
        assert result.exit_code == 0
        assert "valid" in result.output
        assert "1m" in result.output

    def test_clear_single_key(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"a": 1, "b": 2})

        result = runner.invoke(cli, ["cache", "clear", "a"])
        assert result.exit_code == 0
        assert set(json.loads(cli_env.get(CACHE_STORE_NAME))) == {"b"}

    def test_clear_all_requires_confirmation(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"a": 1})

        result = runner.invoke(cli, ["cache", "clear-all"], input="n\n")
        assert result.exit_code != 0
        assert cli_env.get(CACHE_STORE_NAME) is not None

        result = runner.invoke(cli, ["cache", "clear-all", "--yes"])
        assert result.exit_code == 0
        assert cli_env.get(CACHE_STORE_NAME) is None


class TestOfflineResourceCommands:
    def test_usage_from_cache(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"plan_usage": {
            "series": {"used": 3, "limit": 3},
            "aiPrompts": {"used": 45, "limit": 50},
        }})

        result = runner.invoke(cli, ["usage", "--offline"])
        assert result.exit_code == 0
        assert "cached data" in result.output
        assert "ai prompts" in result.output
        assert "Approaching plan limits" in result.output

    def test_profile_from_cache(self, runner, cli_env):
        from cli.main import cli
        _seed(cli_env, {"profile_data": {"displayName": "Ana Writes", "email": "ana@example.com"}})

        result = runner.invoke(cli, ["profile", "--offline"])
        assert result.exit_code == 0
        assert "Ana Writes" in result.output

    def test_profile_offline_without_cache_fails(self, runner, cli_env):
        from cli.main import cli
        result = runner.invoke(cli, ["profile", "--offline"])
        assert result.exit_code == 1
        assert "No internet connection" in result.output


class TestOnlineResourceCommands:
    @pytest.fixture
    def mock_api(self, monkeypatch):
        import httpx
        import cli.main
        from api.api_client import SagaScriptClient

        def handler(request):
            if request.method == "HEAD":
                return httpx.Response(200)
            return httpx.Response(200, json={"username": "ana", "email": "ana@example.com"})

        class MockedClient(SagaScriptClient):
            def __init__(self, settings=None, **kwargs):
                super().__init__(settings, transport=httpx.MockTransport(handler))

        monkeypatch.setattr(cli.main, "SagaScriptClient", MockedClient)

    def test_profile_fetched_and_cached(self, runner, cli_env, mock_api):
        from cli.main import cli
        result = runner.invoke(cli, ["profile"])

        assert result.exit_code == 0
        assert "ana" in result.output
        assert "cached data" not in result.output
        assert "profile_data" in json.loads(cli_env.get(CACHE_STORE_NAME))


class TestTheme:
    @pytest.mark.parametrize("ms, expected", [
        (-5, "0s"),
        (59_999, "59s"),
        (65_000, "1m 05s"),
        (3_600_000 + 120_000, "1h 02m"),
    ])
    def test_format_duration_ms(self, ms, expected):
        from cli.theme import format_duration_ms
        assert format_duration_ms(ms) == expected

    def test_usage_table_highlights_limits(self):
        from rich.console import Console
        from cli.theme import SAGA_THEME, usage_table
        from models.plan_usage import PlanUsage, UsageMetric

        console = Console(record=True, theme=SAGA_THEME, width=100)
        console.print(usage_table(PlanUsage(collaborators=UsageMetric(used=2, limit=2))))
        text = console.export_text()
        assert "collaborators" in text
        assert "100%" in text
