from .research import CheckFactArgs, check_fact, handle_tool_call

__all__ = ["CheckFactArgs", "check_fact", "handle_tool_call"]
