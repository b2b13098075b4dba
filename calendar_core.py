"""
カレンダーの日付計算と日ごとの振り分け
DB にも Flask にも依存しない
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, NamedTuple, Optional


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_day(year: int, month: int) -> int:
    """1 日の曜日. 0: 日曜 ... 6: 土曜"""
    # calendar.weekday は 0: 月曜 なので 1 つずらす
    return (calendar.weekday(year, month, 1) + 1) % 7


def prev_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


@dataclass(frozen=True)
class CalendarContext:
    use_date: datetime
    month: int
    year: int
    days_in_month: int
    start_day: int

    @classmethod
    def from_date(cls, use_date: Optional[datetime] = None) -> "CalendarContext":
        if use_date is None:
            use_date = datetime.now()
        year, month = use_date.year, use_date.month
        return cls(
            use_date=use_date,
            month=month,
            year=year,
            days_in_month=days_in_month(year, month),
            start_day=start_day(year, month),
        )

    @property
    def month_label(self) -> str:
        return self.use_date.strftime("%B %Y")

    @property
    def month_start(self) -> datetime:
        return datetime(self.year, self.month, 1, 0, 0, 0)

    @property
    def month_end(self) -> datetime:
        return datetime(self.year, self.month, self.days_in_month, 23, 59, 59)


def bucket_events(events: Iterable) -> dict[int, list]:
    """event.start の日でまとめる. 渡された順 (start 昇順) を保つ"""
    buckets: dict[int, list] = {}
    for e in events:
        buckets.setdefault(e.start.day, []).append(e)
    return buckets


class Cell(NamedTuple):
    day: Optional[int]
    css_class: Optional[str]
    events: list


def month_cells(ctx: CalendarContext, buckets: dict[int, list], today: date) -> list[Cell]:
    """
    グリッドのマスを左上から順に返す
    前後の埋め草 (fill) を含めて常に 7 の倍数
    """
    cells = [Cell(None, "fill", []) for _ in range(ctx.start_day)]

    is_this_month = (today.year, today.month) == (ctx.year, ctx.month)
    for day in range(1, ctx.days_in_month + 1):
        css_class = "today" if is_this_month and today.day == day else None
        cells.append(Cell(day, css_class, buckets.get(day, [])))

    trailing = (7 - (ctx.start_day + ctx.days_in_month) % 7) % 7
    cells.extend(Cell(None, "fill", []) for _ in range(trailing))
    return cells


def weeks(cells: list[Cell]) -> list[list[Cell]]:
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]
