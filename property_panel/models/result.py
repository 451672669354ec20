"""Adapter result type used at every upstream call site."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    """Outcome of one upstream lookup.

    ``value`` is None when the source degraded, in which case ``warning``
    says why. A successful lookup may still carry a warning (e.g. "no comps").
    """

    value: Optional[T] = None
    warning: Optional[str] = None

    @classmethod
    def ok(cls, value: T, warning: Optional[str] = None) -> "SourceResult[T]":
        return cls(value=value, warning=warning)

    @classmethod
    def degraded(cls, warning: str) -> "SourceResult[T]":
        return cls(value=None, warning=warning)

    @property
    def available(self) -> bool:
        return self.value is not None


__all__ = ["SourceResult"]
