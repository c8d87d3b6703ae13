"""Tests for the command-line interface."""

from pathlib import Path
from textwrap import dedent

import pytest

from hubjobs.core.config import Settings
from hubjobs.core.db import Dataset, init_db
from hubjobs.core.schemas import Region
from main import apply_overrides, main, parse_args


def _write_settings(tmp_path: Path, body: str = "") -> Path:
    db_path = tmp_path / "data" / "dataset.db"
    p = tmp_path / "settings.yaml"
    p.write_text(dedent(f"""\
        database:
          path: {db_path}
    """) + dedent(body))
    return p


class TestParseArgs:
    def test_defaults_to_scrape(self) -> None:
        args = parse_args([])
        assert args.command == "scrape"
        assert args.config == "config/settings.yaml"
        assert args.dry_run is False

    def test_scrape_flags(self) -> None:
        args = parse_args([
            "scrape", "--regions", "DK,remote", "--max-items", "5",
            "--job-url", "https://thehub.io/jobs/x", "--export", "json", "-v",
        ])
        assert args.regions == "DK,remote"
        assert args.max_items == 5
        assert args.job_url == "https://thehub.io/jobs/x"
        assert args.export == "json"
        assert args.verbose is True

    def test_validate_subcommand(self) -> None:
        args = parse_args(["validate", "--config", "other.yaml"])
        assert args.command == "validate"
        assert args.config == "other.yaml"


class TestApplyOverrides:
    def test_no_overrides_returns_same(self) -> None:
        settings = Settings()
        assert apply_overrides(settings, parse_args([])) is settings

    def test_overrides_applied(self) -> None:
        settings = Settings()
        args = parse_args(["scrape", "--regions", "fi, remote", "--max-items", "0"])
        updated = apply_overrides(settings, args)
        assert updated.input.regions == [Region.FI, Region.REMOTE]
        assert updated.input.max_requests_per_crawl == 0
        assert settings.input.regions == []

    def test_bad_region_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            apply_overrides(Settings(), parse_args(["scrape", "--regions", "DK,XX"]))


class TestMain:
    def test_missing_config_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["scrape", "--config", str(tmp_path / "missing.yaml")])
        assert exc_info.value.code == 1

    def test_invalid_env_limit_exits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_PAGES_TEST", "many")
        config = _write_settings(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            main(["scrape", "--config", str(config)])
        assert exc_info.value.code == 1

    def test_dry_run_makes_no_requests(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("JOB_URL", raising=False)
        monkeypatch.delenv("MAX_PAGES_TEST", raising=False)
        monkeypatch.delenv("HUBJOBS_FREE_TIER", raising=False)
        config = _write_settings(tmp_path)
        main(["scrape", "--config", str(config), "--regions", "DK", "--max-items", "3", "--dry-run"])
        out = capsys.readouterr().out
        assert "[DRY RUN] Regions: DK" in out
        assert "Maximum requests per crawl: 3" in out

    def test_validate_reports_success_rate(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        conn = init_db(tmp_path / "data" / "dataset.db")
        Dataset(conn).push_data({"url": "https://thehub.io/jobs/x", "jobId": "x", "error": "boom"})
        conn.close()

        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--config", str(config)])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "1 error placeholders" in out
        assert "Success rate: 0.0%" in out

    def test_validate_flags_invalid_records(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        conn = init_db(tmp_path / "data" / "dataset.db")
        Dataset(conn).push_data({"id": "x", "url": "https://thehub.io/jobs/x"})
        conn.close()

        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--config", str(config)])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "https://thehub.io/jobs/x" in out
