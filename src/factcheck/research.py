"""
Claim handling for detected factual claims.

Verification is not implemented; detected claims are logged so the
transcript of a run shows what the model flagged.
"""

from dataclasses import dataclass
from typing import Any, Dict

from src.live_client.tools import CHECK_FACT_TOOL_NAME
from utils.ml_logging import get_logger, log_function_call

logger = get_logger("research")

BANNER = "=" * 50


@dataclass(frozen=True)
class CheckFactArgs:
    claim: str
    search_query: str
    confidence: float

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any]) -> "CheckFactArgs":
        """
        Validate ``check_fact`` call arguments.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        claim = arguments.get("claim")
        search_query = arguments.get("searchQuery")
        confidence = arguments.get("confidence")

        if not isinstance(claim, str):
            raise ValueError("check_fact requires a string 'claim'")
        if not isinstance(search_query, str):
            raise ValueError("check_fact requires a string 'searchQuery'")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ValueError("check_fact requires a numeric 'confidence'")
        return cls(claim=claim, search_query=search_query, confidence=float(confidence))


@log_function_call("research")
def check_fact(claim: str, search_query: str, confidence: float) -> None:
    """Log a detected claim."""
    logger.keyinfo(
        "\n".join(
            [
                "",
                BANNER,
                "CLAIM DETECTED",
                BANNER,
                f'Claim: "{claim}"',
                f'Search: "{search_query}"',
                f"Confidence: {confidence * 100:.0f}%",
                BANNER,
            ]
        )
    )


def handle_tool_call(name: str, arguments: Dict[str, Any]) -> None:
    """Route a tool invocation from the live session to its handler."""
    if name != CHECK_FACT_TOOL_NAME:
        logger.warning(f"Ignoring call to unknown tool '{name}'")
        return

    try:
        args = CheckFactArgs.from_arguments(arguments)
    except ValueError as e:
        logger.warning(f"Malformed {name} arguments {arguments}: {e}")
        return

    check_fact(args.claim, args.search_query, args.confidence)
