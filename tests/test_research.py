"""
Tests for check_fact argument handling and claim logging.
"""

from unittest.mock import patch

import pytest

from src.factcheck.research import CheckFactArgs, check_fact, handle_tool_call
from utils.ml_logging import KEYINFO_LEVEL_NUM


VALID_ARGS = {
    "claim": "The Eiffel Tower is 330 metres tall",
    "searchQuery": "Eiffel Tower height",
    "confidence": 0.92,
}


class TestCheckFactArgs:
    def test_valid_arguments(self):
        args = CheckFactArgs.from_arguments(VALID_ARGS)
        assert args == CheckFactArgs(
            claim="The Eiffel Tower is 330 metres tall",
            search_query="Eiffel Tower height",
            confidence=0.92,
        )

    def test_integer_confidence_accepted(self):
        args = CheckFactArgs.from_arguments({**VALID_ARGS, "confidence": 1})
        assert args.confidence == 1.0
        assert isinstance(args.confidence, float)

    @pytest.mark.parametrize(
        "override",
        [
            {"claim": None},
            {"searchQuery": 42},
            {"confidence": "high"},
            {"confidence": True},
        ],
    )
    def test_invalid_arguments(self, override):
        with pytest.raises(ValueError):
            CheckFactArgs.from_arguments({**VALID_ARGS, **override})

    def test_missing_field(self):
        arguments = dict(VALID_ARGS)
        del arguments["searchQuery"]
        with pytest.raises(ValueError, match="searchQuery"):
            CheckFactArgs.from_arguments(arguments)


class TestHandleToolCall:
    def test_routes_check_fact(self):
        with patch("src.factcheck.research.check_fact") as mock_check:
            handle_tool_call("check_fact", VALID_ARGS)

        mock_check.assert_called_once_with(
            "The Eiffel Tower is 330 metres tall", "Eiffel Tower height", 0.92
        )

    def test_unknown_tool_ignored(self, caplog):
        with patch("src.factcheck.research.check_fact") as mock_check:
            handle_tool_call("search_web", VALID_ARGS)

        mock_check.assert_not_called()
        assert "search_web" in caplog.text

    def test_malformed_arguments_ignored(self):
        with patch("src.factcheck.research.check_fact") as mock_check:
            handle_tool_call("check_fact", {"claim": "x"})

        mock_check.assert_not_called()

    def test_banner_logged(self, caplog):
        caplog.set_level(KEYINFO_LEVEL_NUM, logger="research")

        check_fact("Water boils at 90C at sea level", "boiling point of water", 0.875)

        records = [r for r in caplog.records if r.levelno == KEYINFO_LEVEL_NUM]
        assert len(records) == 1
        message = records[0].getMessage()
        assert "CLAIM DETECTED" in message
        assert 'Claim: "Water boils at 90C at sea level"' in message
        assert 'Search: "boiling point of water"' in message
        assert "Confidence: 88%" in message
