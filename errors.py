"""
エラー種別と Result

store / forms は例外を投げ, EventCalendar がそれを Result に包んで返す.
呼び出し側は ok を見て, 空表示にするかエラー表示にするかを決める.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class CalendarError(Exception):
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CalendarError):
    """id がおかしい, action タグが違う, 入力値が読めない など"""
    kind = "validation"


class NotFoundError(CalendarError):
    kind = "not_found"


class StorageError(CalendarError):
    """DB 側の失敗. 元の例外は __cause__ に残る"""
    kind = "storage"


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[CalendarError] = None

    @classmethod
    def success(cls, value: Any = True) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CalendarError) -> "Result":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str | None:
        return self.error.kind if self.error else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    def __bool__(self) -> bool:
        return self.ok
