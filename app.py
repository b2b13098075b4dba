import logging
import os
import secrets
from datetime import datetime

from dotenv import load_dotenv
from flask import Flask, render_template, redirect, url_for, request, flash, abort, session
from flask_migrate import Migrate

from calendar_core import prev_month, next_month
from event_calendar import EventCalendar
from event_store import EventStore
from errors import ValidationError
from forms import parse_event_id
from models import db

logger = logging.getLogger(__name__)

migrate = Migrate()


def _normalize_db_url(url: str) -> str:
    # Heroku などの postgres:// を psycopg2 ドライバ指定に直す
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return url


def session_token() -> str:
    """
    フォーム用のトークン. セッションごとに 1 つ
    """
    if "token" not in session:
        session["token"] = secrets.token_urlsafe(32)
    return session["token"]


def get_calendar() -> EventCalendar:
    # db.session はリクエスト (app context) ごとに作られて破棄される
    return EventCalendar(EventStore(db.session))


def create_app(test_config=None) -> Flask:
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    # DATABASE_URL がなければ instance/ 以下の SQLite
    default_db_url = f"sqlite:///{os.path.join(app.instance_path, 'eventcal.db')}"
    database_url = os.getenv("DATABASE_URL")
    database_url = _normalize_db_url(database_url) if database_url else default_db_url

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    app.config["SQLALCHEMY_DATABASE_URI"] = database_url
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False # 省エネ
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    if test_config is not None:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not app.config["SECRET_KEY"]:
        # セッションが使えないとトークンを発行できない
        logger.warning("SECRET_KEY is not set; using a random key for this process")
        app.config["SECRET_KEY"] = secrets.token_hex(32)

    if app.config["SQLALCHEMY_DATABASE_URI"] == default_db_url:
        os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)

    register_routes(app)
    return app


def register_routes(app: Flask) -> None:

    @app.route("/")
    def index():
        year = request.args.get("year", type=int)
        month = request.args.get("month", type=int)

        if not year or not month or not 1 <= month <= 12 or not 1 <= year <= 9999:
            use_date = datetime.now()
        else:
            use_date = datetime(year, month, 1)

        result = get_calendar().render_calendar(use_date)
        if not result:
            flash(result.message)

        html = render_template(
            "index.html",
            page_title="Events Calendar",
            calendar_html=result.value or "",
            prev=prev_month(use_date.year, use_date.month),
            next=next_month(use_date.year, use_date.month),
        )
        return html, (200 if result else 500)

    # イベント 1 件

    @app.route("/view")
    def view_event():
        event_id = request.args.get("event_id", "")
        result = get_calendar().render_event_detail(event_id)
        if result.kind == "validation":
            abort(400)
        if result.kind == "not_found":
            abort(404)
        if not result:
            abort(500)

        return render_template(
            "view.html",
            page_title="View Event",
            event_html=result.value,
            event_id=event_id,
        )

    # 作成 / 編集フォーム

    @app.route("/admin")
    def admin():
        result = get_calendar().render_event_form(
            request.args.get("event_id"), session_token()
        )
        if result.kind == "validation":
            abort(400)
        if result.kind == "not_found":
            abort(404)
        if not result:
            abort(500)

        return render_template(
            "admin.html",
            page_title="Add/Edit Event",
            form_html=result.value,
        )

    @app.route("/process", methods=["POST"])
    def process_form():
        token = request.form.get("token", "")
        expected = session.get("token", "")
        if not expected or not secrets.compare_digest(token.encode(), expected.encode()):
            abort(400)

        result = get_calendar().submit_event_form(request.form)
        if not result:
            flash(result.message)
            try:
                event_id = parse_event_id(request.form.get("event_id"), allow_empty=True)
            except ValidationError:
                event_id = None
            if result.kind == "not_found":
                event_id = None
            return redirect(url_for("admin", event_id=event_id))

        return redirect(url_for("view_event", event_id=result.value))


if __name__ == "__main__":
    # 重要: 初回は flask --app app db upgrade でテーブルを作る
    create_app().run(debug=True)
