"""Cooperative cancellation for request slots.

A slot (search, detail) only honours the result of its most recent request.
Issuing a new token cancels the previous one, and a response that arrives on a
cancelled token is discarded.
"""

from __future__ import annotations


class RequestCancelled(Exception):
    """Raised when a request was superseded before its result could be used."""


class CancellationToken:
    def __init__(self, label: str = "") -> None:
        self._label = label
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelled(f"{self._label or 'request'} was superseded")

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancellationToken({self._label!r}, {state})"


class RequestSlot:
    """Hands out tokens for one logical request channel."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._current: CancellationToken | None = None
        self._issued = 0

    def issue(self) -> CancellationToken:
        self.cancel()
        self._issued += 1
        self._current = CancellationToken(f"{self.name}#{self._issued}")
        return self._current

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None

    def is_current(self, token: CancellationToken) -> bool:
        return token is self._current and not token.cancelled


__all__ = ["CancellationToken", "RequestCancelled", "RequestSlot"]
