"""Unit tests for the mw-ve command line.

Test strategy:
- Test argument parsing defaults and options
- Test both input modes (before/after files, JSON history)
- Test text and JSON output
- Test error exit codes
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from mw_ve.cli import _create_parser, main
from mw_ve.editcheck.squash import squash

INSERTED = "The Commune separated church and state and remitted rents owed."


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def _history(tmp_path: Path, session: dict[str, Any]) -> Path:
    path = tmp_path / "session.json"
    path.write_text(json.dumps(session), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers main() attached so they don't outlive the captured streams."""
    yield
    cli_logger = logging.getLogger("mw_ve")
    for handler in cli_logger.handlers:
        handler.close()
    cli_logger.handlers.clear()


@pytest.fixture
def session() -> dict[str, Any]:
    """Typing a long sentence into 'Hello world' in one transaction."""
    return {
        "namespace": 0,
        "wikitext": "Hello world",
        "transactions": [
            {
                "operations": [
                    {"type": "retain", "length": 6},
                    {"type": "replace", "remove": [], "insert": list(INSERTED)},
                    {"type": "retain", "length": 9},
                ]
            }
        ],
    }


# =============================================================================
# PARSER TESTS
# =============================================================================


class TestParser:
    """Tests for subcommand registration and defaults."""

    @pytest.mark.unit
    def test_editcheck_defaults(self) -> None:
        args = _create_parser().parse_args(["editcheck"])
        assert args.command == "editcheck"
        assert args.namespace is None
        assert args.min_chars == 50
        assert args.json is False
        assert args.log_dir == Path("logs")

    @pytest.mark.unit
    def test_squash_subcommand_exists(self) -> None:
        args = _create_parser().parse_args(["squash", "--history", "s.json"])
        assert args.command == "squash"
        assert args.history == Path("s.json")

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0", "-5", "many"])
    def test_min_chars_must_be_positive_int(self, value: str, capsys: pytest.CaptureFixture[str]) -> None:
        """A zero threshold would flag deletion-only edits."""
        with pytest.raises(SystemExit) as exc_info:
            _create_parser().parse_args(["editcheck", "--min-chars", value])

        assert exc_info.value.code == 2
        assert "--min-chars" in capsys.readouterr().err

    @pytest.mark.unit
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([]) == 0
        assert "editcheck" in capsys.readouterr().out


# =============================================================================
# EDITCHECK COMMAND
# =============================================================================


class TestEditcheckCommand:
    """Tests for the editcheck subcommand."""

    @pytest.mark.unit
    def test_history_json_output(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = _history(tmp_path, session)

        code = _run(["editcheck", "--history", str(path), "--json", "--log-dir", str(tmp_path / "logs")])

        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result == {
            "namespace": 0,
            "needs_reference": True,
            "insertions": [[6, 6 + len(INSERTED)]],
            "squash_error": None,
        }

    @pytest.mark.unit
    def test_text_output(self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]) -> None:
        path = _history(tmp_path, session)

        _run(["editcheck", "--history", str(path), "--log-dir", str(tmp_path / "logs")])

        out = capsys.readouterr().out
        assert "Edit Check" in out
        assert "Result:     needs reference" in out

    @pytest.mark.unit
    def test_namespace_from_history(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        session["namespace"] = 2
        path = _history(tmp_path, session)

        _run(["editcheck", "--history", str(path), "--json", "--log-dir", str(tmp_path / "logs")])

        result = json.loads(capsys.readouterr().out)
        assert result["namespace"] == 2
        assert result["needs_reference"] is False

    @pytest.mark.unit
    def test_namespace_flag_overrides_history(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = _history(tmp_path, session)

        _run(
            ["editcheck", "--history", str(path), "--namespace", "1", "--json", "--log-dir", str(tmp_path / "logs")]
        )

        assert json.loads(capsys.readouterr().out)["needs_reference"] is False

    @pytest.mark.unit
    def test_min_chars(self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]) -> None:
        path = _history(tmp_path, session)

        _run(
            [
                "editcheck",
                "--history",
                str(path),
                "--min-chars",
                str(len(INSERTED) + 1),
                "--json",
                "--log-dir",
                str(tmp_path / "logs"),
            ]
        )

        assert json.loads(capsys.readouterr().out)["needs_reference"] is False

    @pytest.mark.unit
    def test_before_and_after_files(
        self, tmp_path: Path, wikitext_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(
            [
                "editcheck",
                "--before",
                str(wikitext_dir / "paris_commune.txt"),
                "--after",
                str(wikitext_dir / "paris_commune_unsourced.txt"),
                "--json",
                "--log-dir",
                str(tmp_path / "logs"),
            ]
        )

        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result["needs_reference"] is True
        assert len(result["insertions"]) == 1

    @pytest.mark.unit
    def test_missing_inputs(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run(["editcheck", "--before", "a.wiki", "--log-dir", str(tmp_path / "logs")])

        assert code == 1
        assert "Error:" in capsys.readouterr().out

    @pytest.mark.unit
    def test_history_with_before_rejected(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = _history(tmp_path, session)

        code = _run(["editcheck", "--history", str(path), "--before", "a.wiki", "--log-dir", str(tmp_path / "logs")])

        assert code == 1
        assert "cannot be combined" in capsys.readouterr().out

    @pytest.mark.unit
    def test_transaction_not_matching_document(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        session["transactions"][0]["operations"][-1]["length"] = 100
        path = _history(tmp_path, session)

        code = _run(["editcheck", "--history", str(path), "--log-dir", str(tmp_path / "logs")])

        assert code == 1

    @pytest.mark.unit
    def test_history_squashed_once(self, tmp_path: Path, session: dict[str, Any]) -> None:
        path = _history(tmp_path, session)

        with patch("mw_ve.editcheck.document.squash", wraps=squash) as squash_spy:
            _run(["editcheck", "--history", str(path), "--json", "--log-dir", str(tmp_path / "logs")])

        assert squash_spy.call_count == 1

    @pytest.mark.unit
    def test_other_namespace_not_squashed(self, tmp_path: Path, session: dict[str, Any]) -> None:
        session["namespace"] = 1
        path = _history(tmp_path, session)

        with patch("mw_ve.editcheck.document.squash", wraps=squash) as squash_spy:
            _run(["editcheck", "--history", str(path), "--json", "--log-dir", str(tmp_path / "logs")])

        squash_spy.assert_not_called()

    @pytest.mark.unit
    def test_writes_log_file(self, tmp_path: Path, session: dict[str, Any]) -> None:
        path = _history(tmp_path, session)
        log_dir = tmp_path / "logs"

        _run(["editcheck", "--history", str(path), "--log-dir", str(log_dir)])

        assert list(log_dir.glob("mw_ve_*.log"))


# =============================================================================
# SQUASH COMMAND
# =============================================================================


class TestSquashCommand:
    @pytest.mark.unit
    def test_prints_squashed_transaction(
        self, tmp_path: Path, session: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        session["transactions"].append(
            {
                "operations": [
                    {"type": "retain", "length": 6 + len(INSERTED)},
                    {"type": "replace", "remove": [], "insert": ["!"]},
                    {"type": "retain", "length": 9},
                ]
            }
        )
        path = _history(tmp_path, session)

        code = _run(["squash", "--history", str(path), "--log-dir", str(tmp_path / "logs")])

        assert code == 0
        operations = json.loads(capsys.readouterr().out)["operations"]
        assert operations == [
            {"type": "retain", "length": 6},
            {"type": "replace", "remove": [], "insert": [*INSERTED, "!"]},
            {"type": "retain", "length": 9},
        ]

    @pytest.mark.unit
    def test_empty_history(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _history(tmp_path, {"data": ["a", "b"]})

        code = _run(["squash", "--history", str(path), "--log-dir", str(tmp_path / "logs")])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"operations": []}
