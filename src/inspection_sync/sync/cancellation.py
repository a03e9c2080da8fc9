"""
Cooperative cancellation for screen-bound async work.
"""

from __future__ import annotations


class CancellationToken:
    """
    Set when the view that started an operation goes away.

    In-flight requests are never aborted; the token is checked at each
    suspension point and, once set, results are dropped instead of applied.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


def is_cancelled(token: CancellationToken | None) -> bool:
    return token is not None and token.cancelled
