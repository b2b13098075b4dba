"""
イベント作成/編集フォームの検証と保存
"""
from datetime import datetime
from typing import Mapping, Optional

from dateutil import parser as dtparse
from markupsafe import escape

from errors import ValidationError
from event_store import EventStore
from models import Event

ACTION_EDIT = "event_edit"


def parse_event_id(raw, allow_empty: bool = False) -> Optional[int]:
    """
    フォームやクエリの event_id を int にする
    数字以外が混じっていたら切り詰めずにエラーにする
    allow_empty のとき, 空と "0" は「id なし」で None
    """
    text = "" if raw is None else str(raw).strip()
    if allow_empty and text in ("", "0"):
        return None
    if not text:
        raise ValidationError("event id が指定されていません")

    if not (text.isascii() and text.isdigit()) or int(text) == 0:
        raise ValidationError(f"不正な event id です: {raw!r}")
    return int(text)


def _parse_timestamp(value: str, label: str) -> datetime:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} を入力してください")
    try:
        return dtparse.parse(value)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"{label} を日時として読めません: {value}") from e


def process_event_form(store: EventStore, form: Mapping) -> int:
    """
    検証して insert か update する. 保存した event の id を返す
    失敗は ValidationError / NotFoundError / StorageError
    """
    if form.get("action") != ACTION_EDIT:
        raise ValidationError("The method processForm was accessed incorrectly")

    event_id = parse_event_id(form.get("event_id"), allow_empty=True)

    # 再表示用にエスケープして保存する
    title = str(escape((form.get("event_title") or "").strip()))
    desc = str(escape(form.get("event_description") or ""))
    if not title:
        raise ValidationError("Event Title を入力してください")
    # エスケープで長くなった分も含めてカラムに収まるか
    max_length = Event.title.type.length
    if len(title) > max_length:
        raise ValidationError(f"Event Title が長すぎます (エスケープ後 {len(title)} 文字, 上限 {max_length} 文字)")

    start = _parse_timestamp(form.get("event_start"), "Start Time")
    end = _parse_timestamp(form.get("event_end"), "End Time")

    if event_id is None:
        return store.insert_event(title, desc, start, end)
    return store.update_event(event_id, title, desc, start, end)
