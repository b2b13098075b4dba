from datetime import date, datetime

import pytest

from app import create_app
from event_calendar import EventCalendar
from event_store import EventStore
from models import db


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        # インメモリ SQLite (Flask-SQLAlchemy が StaticPool にしてくれる)
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
    })

    # url_for を使うテンプレートがあるので request context ごと積む
    with app.test_request_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return EventStore(db.session)


@pytest.fixture
def cal(store):
    return EventCalendar(store, today=lambda: date(2024, 3, 15))


@pytest.fixture
def march_events(store):
    """2024-03-05 に 2 件, 2024-03-20 に 1 件"""
    ids = [
        store.insert_event("Standup", "daily", datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 9, 15)),
        store.insert_event("Lunch", "", datetime(2024, 3, 5, 12, 0), datetime(2024, 3, 5, 13, 0)),
        store.insert_event("Review", "", datetime(2024, 3, 20, 15, 0), datetime(2024, 3, 20, 16, 0)),
    ]
    return ids
