from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Event(db.Model):
    """
    events テーブルの 1 行
    title と description は forms で HTML エスケープ済みのものが入る
    """
    __tablename__ = "events"

    # カラム名は既存テーブル (event_*) に合わせる
    id = db.Column("event_id", db.Integer, primary_key=True)
    title = db.Column("event_title", db.String(80), nullable=False, default="")
    description = db.Column("event_desc", db.Text, nullable=False, default="")
    start = db.Column("event_start", db.DateTime, nullable=False, index=True)
    end = db.Column("event_end", db.DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Event {self.id} {self.title!r} {self.start}>"
