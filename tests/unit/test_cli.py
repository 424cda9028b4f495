from __future__ import annotations

from psycopg_pool import PoolTimeout
from tenacity import stop_after_attempt, wait_none
from typer.testing import CliRunner

from db_explorer import main as cli
from db_explorer.infrastructure.db_factory import wait_for_database

from tests.conftest import FakeDatabase

runner = CliRunner()


def test_info_hides_password(monkeypatch):
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    cli.get_settings.cache_clear()
    try:
        result = runner.invoke(cli.app, ["info"])
    finally:
        cli.get_settings.cache_clear()

    assert result.exit_code == 0
    assert "schema=" in result.output
    assert "s3cret" not in result.output


def test_tables_and_describe(monkeypatch, explorer):
    monkeypatch.setattr(cli, "_explorer", lambda: explorer)

    tables = runner.invoke(cli.app, ["tables"])
    described = runner.invoke(cli.app, ["describe", "items"])

    assert tables.exit_code == 0
    assert tables.output.split() == ["items", "users"]
    assert described.exit_code == 0
    assert "IntRequired" in described.output
    assert "Unrepresented" in described.output


def test_describe_unknown_table_fails(monkeypatch, explorer):
    monkeypatch.setattr(cli, "_explorer", lambda: explorer)

    result = runner.invoke(cli.app, ["describe", "ghost"])

    assert result.exit_code == 1


class _FlakyPool(FakeDatabase):
    def __init__(self, failures: int) -> None:
        super().__init__({})
        self.failures = failures
        self.wait_calls = 0

    def wait(self, timeout: float) -> None:
        del timeout
        self.wait_calls += 1
        if self.wait_calls <= self.failures:
            raise PoolTimeout("pool not ready")


class _PingConnection:
    def execute(self, query: str) -> None:
        assert query == "SELECT 1"

    def __enter__(self) -> "_PingConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


def test_wait_for_database_retries_at_startup(monkeypatch):
    pool = _FlakyPool(failures=2)
    monkeypatch.setattr(pool, "connection", lambda: _PingConnection())

    wait_for_database.retry_with(wait=wait_none(), stop=stop_after_attempt(3))(pool)

    assert pool.wait_calls == 3
