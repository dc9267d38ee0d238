# tests/unit/test_main.py - v1
"""Tests for main.py: CLI entry point."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from labeliq.core.errors import NoTextFound, ProviderError
from labeliq.core.models import AnalysisResult
from labeliq.main import _build_parser, main


@pytest.fixture
def env_file(tmp_path: Path) -> Path:
    path = tmp_path / ".env"
    path.write_text(
        f"CACHE_BACKEND=json\nCACHE_ROOT={tmp_path / 'cache'}\nLOG_FORMAT=text\n"
    )
    return path


@pytest.fixture
def image(tmp_path: Path) -> Path:
    path = tmp_path / "label.png"
    path.write_bytes(b"\x89PNG fake label")
    return path


def _result() -> AnalysisResult:
    return AnalysisResult(
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        raw_text="Water, Sugar",
        overall_score=71,
    )


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_analyze_subcommand(self):
        args = _build_parser().parse_args(
            ["analyze", "label.jpg", "-p", "me.json", "-o", "/tmp/out.json"]
        )
        assert args.command == "analyze"
        assert args.image == Path("label.jpg")
        assert args.profile == Path("me.json")
        assert args.output == Path("/tmp/out.json")

    def test_analyze_defaults(self):
        args = _build_parser().parse_args(["analyze", "label.jpg"])
        assert args.profile is None
        assert args.output is None
        assert args.verbose is False

    def test_clear_cache_subcommand(self):
        args = _build_parser().parse_args(["--env-file", "x.env", "clear-cache"])
        assert args.command == "clear-cache"
        assert args.env_file == Path("x.env")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "labeliq" in capsys.readouterr().out

    def test_invalid_configuration(self, tmp_path, capsys):
        bad = tmp_path / "bad.env"
        bad.write_text("EDAMAM_APP_ID=only-id\n")
        assert main(["--env-file", str(bad), "clear-cache"]) == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_clear_cache(self, env_file, tmp_path, capsys):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "usda_abc.json").write_text("{}")
        assert main(["--env-file", str(env_file), "clear-cache"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {"backend": "json", "removed": 1}
        assert list(cache_dir.glob("*.json")) == []

    def test_analyze_missing_image(self, env_file, tmp_path):
        assert main(["--env-file", str(env_file), "analyze", str(tmp_path / "nope.png")]) == 1

    def test_analyze_prints_result(self, env_file, image, capsys):
        with patch("labeliq.api.facade.analyze", AsyncMock(return_value=_result())) as mock:
            code = main(["--env-file", str(env_file), "analyze", str(image)])
        assert code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["overallScore"] == 71
        assert out["rawText"] == "Water, Sugar"
        assert mock.await_args.args[0] == b"\x89PNG fake label"

    def test_analyze_with_profile_and_output(self, env_file, image, tmp_path):
        profile = tmp_path / "me.json"
        profile.write_text(json.dumps({"allergies": ["peanuts"], "healthGoals": ["low sugar"]}))
        output = tmp_path / "out" / "result.json"
        with patch("labeliq.api.facade.analyze", AsyncMock(return_value=_result())) as mock:
            code = main([
                "--env-file", str(env_file), "analyze", str(image),
                "-p", str(profile), "-o", str(output),
            ])
        assert code == 0
        assert json.loads(output.read_text())["overallScore"] == 71
        sent_profile = mock.await_args.args[1]
        assert sent_profile.allergies == ["peanuts"]
        assert sent_profile.health_goals == ["low sugar"]

    def test_analyze_no_text(self, env_file, image):
        with patch("labeliq.api.facade.analyze", AsyncMock(side_effect=NoTextFound())):
            assert main(["--env-file", str(env_file), "analyze", str(image)]) == 3

    def test_analyze_provider_failure(self, env_file, image):
        error = ProviderError("AUTH", "google_vision", "HTTP 403")
        error.stage = "extracting"
        with patch("labeliq.api.facade.analyze", AsyncMock(side_effect=error)):
            assert main(["--env-file", str(env_file), "analyze", str(image)]) == 4
