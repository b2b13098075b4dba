import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import NotFoundError, StorageError, ValidationError
from models import Event

logger = logging.getLogger(__name__)


class EventStore:
    """
    events テーブルへの読み書き
    セッションは外から渡す (Flask では db.session)
    """

    def __init__(self, session: Session):
        self.session = session

    def fetch_events_in_range(self, month_start: datetime, month_end: datetime) -> list[Event]:
        # BETWEEN なので両端を含む
        stmt = (
            select(Event)
            .where(Event.start.between(month_start, month_end))
            .order_by(Event.start.asc(), Event.id.asc())
        )
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"events の読み込みに失敗しました: {e}") from e

    def fetch_event_by_id(self, event_id: int) -> Event:
        # bool は int のサブクラスなので弾く
        if isinstance(event_id, bool) or not isinstance(event_id, int) or event_id < 1:
            raise ValidationError(f"不正な event id です: {event_id!r}")

        try:
            event = self.session.get(Event, event_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"event {event_id} の読み込みに失敗しました: {e}") from e

        if event is None:
            raise NotFoundError(f"event {event_id} は存在しません")
        return event

    def insert_event(self, title: str, description: str, start: datetime, end: datetime) -> int:
        event = Event(title=title, description=description, start=start, end=end)
        try:
            self.session.add(event)
            self.session.commit()
            # commit 後は expire されているので, ここで読むと再取得が走る
            event_id = event.id
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"event の作成に失敗しました: {e}") from e

        logger.info("created event %s", event_id)
        return event_id

    def update_event(self, event_id: int, title: str, description: str,
                     start: datetime, end: datetime) -> int:
        event = self.fetch_event_by_id(event_id)

        # 全フィールド上書き. id は変えない
        event.title = title
        event.description = description
        event.start = start
        event.end = end
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"event {event_id} の更新に失敗しました: {e}") from e

        logger.info("updated event %s", event_id)
        return event_id
