"""Session Context.

Fields bound here are merged into every log entry emitted while a
notification session is active.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Any, Optional

_log_context: ContextVar[dict] = ContextVar("log_context", default={})


def generate_session_id() -> str:
    return str(uuid.uuid4())


def get_context_dict() -> dict[str, Any]:
    """Fields currently bound for log output (empty values omitted)."""
    return {key: value for key, value in _log_context.get().items() if value not in ("", None)}


class SessionContext:
    """Binds session_id, user_id and any extra fields for the duration of a block.

    Nested contexts restore the outer bindings on exit.

    Example:
        with SessionContext(user_id="42"):
            logger.info("loading notifications")  # includes session_id, user_id
    """

    def __init__(self, session_id: str = "", user_id: str = "", **extra: Any):
        self.session_id = session_id or generate_session_id()
        self.user_id = user_id
        self.extra = extra
        self._token: Optional[Token] = None

    def __enter__(self) -> "SessionContext":
        fields = {"session_id": self.session_id, "user_id": self.user_id, **self.extra}
        self._token = _log_context.set(fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    def bind(self, **fields: Any) -> None:
        """Add fields to the active context."""
        self.extra.update(fields)
        _log_context.set({**_log_context.get(), **fields})
