"""Programmer-misuse errors raised by the rune and talisman registries.

Gameplay conditions (locked content, insufficient currency, numbers past
the safety ceiling) never raise; these do.
"""

from __future__ import annotations

from typing import Any, Optional


class RuneforgeError(Exception):
    """Base error carrying a message and structured details."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NotInitializedError(RuneforgeError, RuntimeError):
    """A registry was queried before its init call."""

    def __init__(self, registry: str) -> None:
        super().__init__(
            f"{registry} not initialized. Call init_{registry.lower()} first.",
            {"registry": registry},
        )


class UnknownKeyError(RuneforgeError, KeyError):
    """A key outside the closed rune/talisman catalog."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"Unknown {kind} key: {key!r}", {"kind": kind, "key": key})
