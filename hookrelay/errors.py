"""Exception types raised by hookrelay."""

from __future__ import annotations


class HookRelayError(Exception):
    """Base class for hookrelay errors."""


class RemoteAPIError(HookRelayError):
    """A remote read or write failed.

    ``status`` is None when the request never produced a response
    (connection refused, timeout, ...).
    """

    def __init__(
        self,
        method: str,
        path: str,
        status: int | None = None,
        detail: str = "",
    ) -> None:
        self.method = method
        self.path = path
        self.status = status
        self.detail = detail
        where = f"{method} {path}"
        if status is None:
            super().__init__(f"{where} failed: {detail}")
        else:
            super().__init__(f"{where} returned {status}: {detail}")
