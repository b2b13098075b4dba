import re
from collections import namedtuple
from datetime import date, datetime

from calendar_core import CalendarContext, bucket_events
from calendar_ui import WEEKDAYS, format_time, render_detail, render_form, render_grid
from forms import ACTION_EDIT, process_event_form

FakeEvent = namedtuple("FakeEvent", "id title description start end")

CELL_RE = re.compile(r'<li(?: class="(\w+)")?>(.*?)</li>', re.S)


def grid_cells(markup):
    # 曜日の行を飛ばして日付のマスだけ取り出す
    body = str(markup).split("</ul>", 1)[1]
    return CELL_RE.findall(body)


def march_grid(events=(), today=date(2024, 3, 15)):
    ctx = CalendarContext.from_date(datetime(2024, 3, 15))
    return render_grid(ctx, bucket_events(events), today)


class TestGrid:

    def test_header_and_weekdays(self, app):
        markup = str(march_grid())
        assert "<h2>March 2024</h2>" in markup
        labels = re.findall(r"<li>(\w{3})</li>", markup.split("</ul>", 1)[0])
        assert tuple(labels) == WEEKDAYS
        assert labels[0] == "Sun"

    def test_filler_cells(self, app):
        cells = grid_cells(march_grid())
        # 2024-03-01 は金曜 (5), 31 日 -> 後ろに 6 マス
        assert len(cells) == 42
        assert [c for c, _ in cells[:5]] == ["fill"] * 5
        assert [c for c, _ in cells[-6:]] == ["fill"] * 6
        assert all(body == "&nbsp;" for c, body in cells if c == "fill")

    def test_rows_of_seven(self, app):
        markup = str(march_grid())
        rows = markup.split("</ul>")[1:-1]
        assert len(rows) == 6
        assert all(len(CELL_RE.findall(row)) == 7 for row in rows)

    def test_numbered_days(self, app):
        cells = grid_cells(march_grid())
        days = [re.search(r"<strong>(\d\d)</strong>", body).group(1) for c, body in cells if c != "fill"]
        assert days == [f"{d:02d}" for d in range(1, 32)]

    def test_today_marker(self, app):
        cells = grid_cells(march_grid())
        today = [body for c, body in cells if c == "today"]
        assert len(today) == 1
        assert "<strong>15</strong>" in today[0]

        other = grid_cells(march_grid(today=date(2024, 4, 15)))
        assert not any(c == "today" for c, _ in other)

    def test_event_links_in_their_day(self, app):
        events = [
            FakeEvent(3, "Standup", "", datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 9, 15)),
            FakeEvent(1, "Lunch", "", datetime(2024, 3, 5, 12, 0), datetime(2024, 3, 5, 13, 0)),
            FakeEvent(8, "Review", "", datetime(2024, 3, 20, 15, 0), datetime(2024, 3, 20, 16, 0)),
        ]
        cells = grid_cells(march_grid(events))

        day5 = cells[5 + 4][1]
        assert re.findall(r'<a href="/view\?event_id=(\d+)">(\w+)</a>', day5) == [("3", "Standup"), ("1", "Lunch")]
        day20 = cells[5 + 19][1]
        assert '<a href="/view?event_id=8">Review</a>' in day20
        assert sum(body.count("<a ") for _, body in cells) == 3

    def test_titles_are_not_escaped_twice(self, app):
        events = [FakeEvent(1, "Tom &amp; Jerry", "", datetime(2024, 3, 2, 9, 0), datetime(2024, 3, 2, 10, 0))]
        markup = str(march_grid(events))
        assert ">Tom &amp; Jerry</a>" in markup
        assert "&amp;amp;" not in markup


class TestDetail:

    def test_detail(self, app):
        event = FakeEvent(4, "Planning", "Bring *snacks*",
                          datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 10, 30))
        markup = str(render_detail(event))
        assert "<h2>Planning</h2>" in markup
        assert '<p class="dates">March 05 2024, 9:00am&mdash;10:30am</p>' in markup
        assert "<em>snacks</em>" in markup

    def test_script_in_description_is_stripped(self, app):
        event = FakeEvent(4, "x", "&lt;script&gt;alert(1)&lt;/script&gt;",
                          datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 10, 30))
        markup = str(render_detail(event))
        assert "<script" not in markup

    def test_markdown_sees_the_submitted_text(self, store):
        description = (
            "Check `a < b && c`\n"
            "\n"
            "```\n"
            "if x < 3:\n"
            "    y = x & 1\n"
            "```\n"
            "\n"
            "> quoted note\n"
        )
        event_id = process_event_form(store, {
            "action": ACTION_EDIT,
            "event_title": "Code review",
            "event_description": description,
            "event_start": "2024-03-05 09:00",
            "event_end": "2024-03-05 10:00",
        })
        markup = str(render_detail(store.fetch_event_by_id(event_id)))

        assert "&amp;lt;" not in markup
        assert "&amp;amp;" not in markup
        assert "<code>a &lt; b &amp;&amp; c</code>" in markup
        assert "&lt; 3:" in markup
        assert "<blockquote>" in markup
        assert "quoted note" in markup
        assert "&gt; quoted note" not in markup

    def test_none_is_empty(self, app):
        assert render_detail(None) == ""

    def test_format_time(self):
        assert format_time(datetime(2024, 1, 1, 0, 5)) == "12:05am"
        assert format_time(datetime(2024, 1, 1, 9, 0)) == "9:00am"
        assert format_time(datetime(2024, 1, 1, 12, 30)) == "12:30pm"
        assert format_time(datetime(2024, 1, 1, 23, 59)) == "11:59pm"


class TestForm:

    def test_create_form(self, app):
        markup = str(render_form(None, "tok123"))
        assert "<legend>Create a New Event</legend>" in markup
        assert 'name="event_title" id="event_title" value=""' in markup
        assert '<input type="hidden" name="event_id" value="0">' in markup
        assert '<input type="hidden" name="token" value="tok123">' in markup
        assert '<input type="hidden" name="action" value="event_edit">' in markup
        assert 'action="/process"' in markup

    def test_edit_form_is_prefilled(self, app):
        event = FakeEvent(9, "Tom &amp; &#34;Jerry&#34;", "notes &lt;here&gt;",
                          datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 10, 30))
        markup = str(render_form(event, "tok123"))
        assert "<legend>Edit This Event</legend>" in markup
        assert 'value="Tom &amp; &#34;Jerry&#34;"' in markup
        assert 'value="2024-03-05 09:00:00"' in markup
        assert 'value="2024-03-05 10:30:00"' in markup
        assert ">notes &lt;here&gt;</textarea>" in markup
        assert '<input type="hidden" name="event_id" value="9">' in markup
