"""
Tests for the command-line interface.
"""

import io
import json
from unittest.mock import patch

import pytest

from callsheet_agent.cli import main
from callsheet_agent.errors import TurnBudgetExhausted
from callsheet_agent.orchestration import ExtractionResult

DATA = {"date": "2025-03-14", "projectName": "Der Bergdoktor", "locations": ["Ring 5"]}


class TestCli:
    """Tests for callsheet-agent."""

    @patch("callsheet_agent.cli.extract_callsheet")
    def test_extract_from_file(self, mock_extract, tmp_path, capsys):
        path = tmp_path / "sheet.txt"
        path.write_text("CALLSHEET\nTitel: Der Bergdoktor", encoding="utf-8")
        mock_extract.return_value = ExtractionResult(data=DATA, turns=2)

        exit_code = main([str(path), "--schema", "company", "--max-turns", "5"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == DATA
        args, kwargs = mock_extract.call_args
        assert args == ("CALLSHEET\nTitel: Der Bergdoktor",)
        assert kwargs["schema"] == "company"
        assert kwargs["max_turns"] == 5

    @patch("callsheet_agent.cli.extract_callsheet")
    def test_extract_from_stdin(self, mock_extract, capsys):
        mock_extract.return_value = ExtractionResult(data=DATA, turns=1)

        with patch("sys.stdin", io.StringIO("from stdin")):
            exit_code = main(["-"])

        assert exit_code == 0
        assert mock_extract.call_args.args == ("from stdin",)

    @patch("callsheet_agent.cli.extract_callsheet")
    def test_agent_error_exits_nonzero(self, mock_extract, tmp_path, capsys):
        path = tmp_path / "sheet.txt"
        path.write_text("x")
        mock_extract.side_effect = TurnBudgetExhausted(10)

        exit_code = main([str(path)])

        assert exit_code == 1
        assert "Agent exceeded 10 turns" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "missing.txt")])

        assert exit_code == 1
        assert "cannot read" in capsys.readouterr().err

    def test_list_tools(self, capsys):
        assert main(["--list-tools"]) == 0
        out = capsys.readouterr().out
        assert "address_normalize" in out
        assert "geocode_address" in out

    def test_input_required(self):
        with pytest.raises(SystemExit):
            main([])

    def test_unknown_schema_rejected(self, tmp_path):
        with pytest.raises(SystemExit):
            main([str(tmp_path / "x.txt"), "--schema", "nope"])
