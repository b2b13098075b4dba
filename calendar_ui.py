"""
カレンダー, イベント詳細, 編集フォームの HTML 断片を組み立てる
ページ全体 (base.html) は app 側で包む
"""
from datetime import date
from html import unescape
from typing import Optional

import bleach
from flask import render_template
from markdown import markdown
from markupsafe import Markup

from calendar_core import CalendarContext, month_cells, weeks
from models import Event

WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# サニタイジング
# <img> などはまだ許可していないことに注意

ALLOWED_TAGS = bleach.sanitizer.ALLOWED_TAGS.union({
    "p", "br", "pre", "code", "blockquote",
    "ul", "ol", "li",
    "strong", "em", "del",
    "h3", "h4",
    "table", "thead", "tbody", "tr", "th", "td", "a",
    "div", "span"
})
ALLOWED_ATTRS = {
    "a": ["href", "title", "rel"],
    "code": ["class"],
    "span": ["class"],
    "pre": ["class"],
    "div": ["class"]
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "tables",
    "sane_lists",
    "pymdownx.superfences",
    "pymdownx.highlight",
    "pymdownx.tilde",
]


def sanitize_html(html: str) -> str:
    cleaned = bleach.clean(
        html,
        tags=list(ALLOWED_TAGS),
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
    return bleach.linkify(cleaned)


def description_html(text: str) -> Markup:
    # 保存時のエスケープを戻してから Markdown に通す. 安全化は sanitize_html (bleach) に任せる
    raw_html = markdown(
        unescape(text or ""),
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={
            "pymdownx.highlight": {
                "use_pygments": True,
                "noclasses": False,
                "css_class": "highlight",
            }
        },
    )
    return Markup(sanitize_html(raw_html))


def format_time(dt) -> str:
    # 9:05am, 12:30pm
    hour = dt.hour % 12 or 12
    suffix = "am" if dt.hour < 12 else "pm"
    return f"{hour}:{dt:%M}{suffix}"


def render_grid(ctx: CalendarContext, buckets: dict[int, list], today: date) -> Markup:
    cells = month_cells(ctx, buckets, today)
    return Markup(render_template(
        "fragments/calendar.html",
        month_label=ctx.month_label,
        weekdays=WEEKDAYS,
        weeks=weeks(cells),
    ))


def render_detail(event: Optional[Event]) -> Markup:
    if event is None:
        return Markup("")

    return Markup(render_template(
        "fragments/event.html",
        event=event,
        date_label=event.start.strftime("%B %d %Y"),
        start_label=format_time(event.start),
        end_label=format_time(event.end),
        body_html=description_html(event.description),
    ))


def render_form(event: Optional[Event], token: str) -> Markup:
    """event が None なら新規作成フォーム"""
    submit = "Create a New Event" if event is None else "Edit This Event"
    return Markup(render_template(
        "fragments/event_form.html",
        event=event,
        submit=submit,
        token=token,
    ))
