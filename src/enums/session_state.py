from enum import Enum


class SessionState(Enum):
    """Lifecycle states of a live session"""

    CONNECTING = "connecting"  # Transport is being opened
    AWAITING_SETUP_ACK = "awaiting_setup_ack"  # Setup sent, waiting for setupComplete
    READY = "ready"  # Audio may be sent
    CLOSING = "closing"  # Grace period before the transport is closed
    CLOSED = "closed"

    def __str__(self) -> str:
        """Return the string value for easy comparison"""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> "SessionState":
        """Create SessionState from string with validation"""
        for state in cls:
            if state.value == value:
                return state
        raise ValueError(
            f"Invalid session state: {value}. Valid options: {[s.value for s in cls]}"
        )

    @property
    def accepts_audio(self) -> bool:
        """Check if audio chunks may be sent in this state"""
        return self is SessionState.READY

    @property
    def is_terminal(self) -> bool:
        """Check if the session is shutting down or already shut down"""
        return self in [SessionState.CLOSING, SessionState.CLOSED]
