import logging
from datetime import date, datetime
from typing import Callable, Mapping, Optional

from calendar_core import CalendarContext, bucket_events
from calendar_ui import render_detail, render_form, render_grid
from errors import CalendarError, Result, StorageError
from event_store import EventStore
from forms import parse_event_id, process_event_form

logger = logging.getLogger(__name__)


class EventCalendar:
    """
    Web 側から呼ぶ入口
    どの操作も例外を投げず Result を返す (想定外の例外はそのまま上がる)
    """

    def __init__(self, store: EventStore, today: Optional[Callable[[], date]] = None):
        self.store = store
        # テストで「今日」を差し替えられるように
        self._today = today or date.today

    def _fail(self, err: CalendarError, action: str) -> Result:
        if isinstance(err, StorageError):
            logger.error("%s failed: %s", action, err.message, exc_info=err)
        else:
            logger.info("%s rejected (%s): %s", action, err.kind, err.message)
        return Result.failure(err)

    def render_calendar(self, use_date: Optional[datetime] = None) -> Result:
        ctx = CalendarContext.from_date(use_date)
        try:
            events = self.store.fetch_events_in_range(ctx.month_start, ctx.month_end)
        except CalendarError as e:
            return self._fail(e, "render_calendar")

        return Result.success(render_grid(ctx, bucket_events(events), self._today()))

    def render_event_detail(self, event_id) -> Result:
        try:
            event = self.store.fetch_event_by_id(parse_event_id(event_id))
        except CalendarError as e:
            return self._fail(e, "render_event_detail")
        return Result.success(render_detail(event))

    def render_event_form(self, event_id=None, token: str = "") -> Result:
        try:
            event_id = parse_event_id(event_id, allow_empty=True)
            event = self.store.fetch_event_by_id(event_id) if event_id else None
        except CalendarError as e:
            return self._fail(e, "render_event_form")
        return Result.success(render_form(event, token))

    def submit_event_form(self, form: Mapping) -> Result:
        try:
            event_id = process_event_form(self.store, form)
        except CalendarError as e:
            return self._fail(e, "submit_event_form")
        return Result.success(event_id)
