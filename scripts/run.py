"""
Local process runner for the Smart Booking Pro API.

Builds the Claude model, the SQLite store, and the confirmation mailer,
then serves the HTTP API with uvicorn until interrupted.

Usage:
    python scripts/run.py          # reads .env from the working directory

Environment variables: see smart_booking/config.py.  ANTHROPIC_API_KEY is
required; everything else has a default.
"""

import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

# Make sure project root is on sys.path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from smart_booking.adapters.claude_model import ClaudeLanguageModel
from smart_booking.adapters.sqlite_store import SqliteBookingStore
from smart_booking.api.app import create_app
from smart_booking.api.services import Services
from smart_booking.communication.factory import create_mailer
from smart_booking.config import APP_NAME, Settings
from smart_booking.domain.store import StoreError

log = logging.getLogger(__name__)


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        print(f"ERROR: environment variable {name!r} is not set.", file=sys.stderr)
        sys.exit(1)
    return value


def build_services(settings: Settings) -> Services:
    api_key = _require_env("ANTHROPIC_API_KEY")
    db_dir = os.path.dirname(settings.db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    return Services.wire(
        settings,
        model=ClaudeLanguageModel(api_key=api_key, model=settings.model_id),
        store=SqliteBookingStore(settings.db_path, settings.default_daily_limit),
        mailer=create_mailer(settings),
    )


def main() -> None:
    load_dotenv()
    settings = Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-7s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        services = build_services(settings)
    except (ValueError, StoreError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    log.info(
        "%s starting: port=%d  env=%s  model=%s  mail=%s  db=%s",
        APP_NAME,
        settings.port,
        settings.app_env,
        settings.model_id,
        settings.mail_channel,
        settings.db_path,
    )
    uvicorn.run(create_app(services), host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
