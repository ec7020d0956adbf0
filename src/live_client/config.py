import copy
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

import yaml

from src.live_client.tools import SYSTEM_PROMPT, available_tools

logger = logging.getLogger(__name__)

DEFAULT_LIVE_URL = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
)
DEFAULT_MODEL = "gemini-2.5-flash-preview-native-audio-dialog"


@dataclass
class LiveSessionConfig:
    """Configuration for a Gemini Live session."""

    model: str = DEFAULT_MODEL
    url: str = DEFAULT_LIVE_URL
    system_instruction: str = SYSTEM_PROMPT
    response_modalities: List[str] = field(default_factory=lambda: ["TEXT"])
    function_declarations: List[dict] = field(
        default_factory=lambda: copy.deepcopy(available_tools)
    )
    # None waits for setupComplete indefinitely
    setup_timeout: Optional[float] = 30.0
    open_timeout: Optional[float] = 10.0
    close_grace_seconds: float = 1.0

    @classmethod
    def from_yaml(
        cls, path: str, base: Optional["LiveSessionConfig"] = None
    ) -> "LiveSessionConfig":
        """
        Overlay the keys of a YAML mapping on ``base`` (or the defaults).

        Unknown keys are ignored with a warning. A YAML document that is not
        a mapping is ignored entirely.
        """
        base = base or cls()
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        with open(path, "r") as f:
            config_from_yaml = yaml.safe_load(f)

        if not isinstance(config_from_yaml, dict):
            logger.warning(f"Session config YAML is not a dict, ignoring: {path}")
            return base

        logger.info(f"Loading session config from {path}")
        for key, value in config_from_yaml.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown session config key: {key}")
        return replace(base, **values)
