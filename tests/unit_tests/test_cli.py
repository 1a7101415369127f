import pytest
from click.testing import CliRunner

from telefile_api.cli import cli
from telefile_api.settings import get_settings


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("DB_PATH", str(tmp_path / "cli.db"))
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


def test_show_config(runner):
    result = runner.invoke(cli, ["show-config"])

    assert result.exit_code == 0
    assert "Deployment Mode: local-dev" in result.output
    assert "cli.db" in result.output


def test_seed_then_list_files(runner):
    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0
    assert "Seeded 9 records" in result.output

    result = runner.invoke(cli, ["seed"])
    assert "nothing seeded" in result.output

    result = runner.invoke(cli, ["list-files", "--folder-id", "f2"])
    assert result.exit_code == 0
    assert "vacation-photo.jpg" in result.output
    assert "[telegram]" in result.output
    assert "report.txt" not in result.output

    result = runner.invoke(cli, ["list-files"])
    assert "meeting-notes.md" in result.output


def test_list_files_on_empty_store(runner):
    result = runner.invoke(cli, ["list-files"])

    assert result.exit_code == 0
    assert "No files found" in result.output
