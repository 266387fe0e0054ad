"""Domain exceptions raised by the scene server core.

None of these escape a tool call: the MCP layer turns them into an error
result with a readable message.
"""

from __future__ import annotations


class SceneError(RuntimeError):
    """Base class for scene server failures."""


class NoSessionError(SceneError):
    """Raised when an operation needs a session but none is active."""

    def __init__(self) -> None:
        super().__init__("No active session found. Please ensure the MCP connection is properly initialized.")


class StateUnavailableError(SceneError):
    """A live state query could not produce a result.

    Subclasses are the failures a cached snapshot may stand in for.
    """

    def __init__(self, session_id: str, message: str) -> None:
        super().__init__(message)
        self.session_id = session_id


class NoConnectionError(StateUnavailableError):
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id, f"No browser is connected for session '{session_id}'.")


class QueryTimeoutError(StateUnavailableError):
    def __init__(self, session_id: str, request_id: str, timeout: float) -> None:
        super().__init__(
            session_id,
            f"Browser for session '{session_id}' did not answer state request {request_id} within {timeout:g}s.",
        )
        self.request_id = request_id
        self.timeout = timeout


class DisconnectedError(StateUnavailableError):
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id, f"Browser for session '{session_id}' disconnected before answering.")


class BrowserReportedError(SceneError):
    """The browser answered a state request with ``stateError``."""

    def __init__(self, session_id: str, message: str) -> None:
        super().__init__(f"Browser reported an error: {message}")
        self.session_id = session_id
        self.browser_message = message


class MalformedMessageError(SceneError):
    """Inbound browser message is not valid JSON or misses required fields."""
