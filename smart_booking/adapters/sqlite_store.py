"""
SQLite adapter for BookingStore.

Use ":memory:" for tests, a file path for production.  Several stores may
open the same file; the usage counter relies on SQLite's write lock and a
guarded upsert rather than on any locking of ours.
"""

import json
import sqlite3
from contextlib import contextmanager, suppress
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator

from smart_booking.domain.store import (
    Booking,
    BookingStats,
    BookingStore,
    NewBooking,
    SocialPost,
    StoreError,
    UsageInfo,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS bookings (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    name             TEXT NOT NULL,
    email            TEXT NOT NULL,
    appointment_date TEXT NOT NULL,
    appointment_time TEXT NOT NULL,
    message          TEXT NOT NULL DEFAULT '',
    ai_analysis      TEXT,
    email_content    TEXT NOT NULL DEFAULT '',
    status           TEXT NOT NULL DEFAULT 'confirmed',
    email_status     TEXT NOT NULL DEFAULT 'pending',
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    email             TEXT NOT NULL UNIQUE,
    name              TEXT,
    subscription_tier TEXT NOT NULL DEFAULT 'free',
    api_calls_used    INTEGER NOT NULL DEFAULT 0,
    api_calls_limit   INTEGER NOT NULL DEFAULT 100,
    usage_date        TEXT,
    created_at        TEXT NOT NULL,
    last_active       TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chat_interactions (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    user_email       TEXT,
    message          TEXT NOT NULL,
    response         TEXT,
    context          TEXT,
    response_time_ms INTEGER,
    created_at       TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS social_media_cache (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    platform        TEXT NOT NULL,
    post_data       TEXT NOT NULL,
    engagement_data TEXT,
    fetched_at      TEXT NOT NULL
);
"""

# One statement: create the user, start a new day, or take one more call,
# but only while under the limit.  No row comes back when the limit is hit.
# A new user is only inserted when the default allowance is above zero; an
# existing user always reaches the upsert so their own limit decides.
_RESERVE_CALL = """
INSERT INTO users (email, api_calls_used, api_calls_limit, usage_date, created_at, last_active)
SELECT :email, 1, :limit, :today, :now, :now
WHERE :limit > 0 OR EXISTS (SELECT 1 FROM users WHERE email = :email)
ON CONFLICT (email) DO UPDATE SET
    api_calls_used = CASE WHEN users.usage_date IS excluded.usage_date
                          THEN users.api_calls_used + 1 ELSE 1 END,
    usage_date = excluded.usage_date,
    last_active = excluded.last_active
WHERE CASE WHEN users.usage_date IS excluded.usage_date
           THEN users.api_calls_used ELSE 0 END < users.api_calls_limit
RETURNING api_calls_used
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _today() -> str:
    return _now().date().isoformat()


def _parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


def _dump(value: Any) -> str | None:
    return None if value is None else json.dumps(value)


def _load(s: str | None) -> Any:
    return None if s is None else json.loads(s)


class SqliteBookingStore(BookingStore):

    def __init__(self, db_path: str = "smart_booking.db", default_daily_limit: int = 100):
        self._default_limit = default_daily_limit
        try:
            # Requests are served from worker threads as well as the event loop.
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open {db_path}: {exc}") from exc

    @contextmanager
    def _db(self, what: str) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
        except sqlite3.Error as exc:
            with suppress(sqlite3.Error):
                self._conn.rollback()
            raise StoreError(f"{what} failed: {exc}") from exc

    # -- bookings ------------------------------------------------------------

    async def create_booking(self, booking: NewBooking) -> Booking:
        now = _now().isoformat()
        with self._db("create booking") as conn:
            cur = conn.execute(
                "INSERT INTO bookings"
                " (name, email, appointment_date, appointment_time, message,"
                "  ai_analysis, email_content, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (booking.name, booking.email, booking.appointment_date,
                 booking.appointment_time, booking.message,
                 _dump(booking.ai_analysis), booking.email_content, now, now),
            )
            conn.commit()
            assert cur.lastrowid is not None
            booking_id = cur.lastrowid
        created = await self.get_booking(booking_id)
        assert created is not None
        return created

    async def get_booking(self, booking_id: int) -> Booking | None:
        with self._db("get booking") as conn:
            row = conn.execute(
                "SELECT * FROM bookings WHERE id = ?", (booking_id,)
            ).fetchone()
        if not row:
            return None
        return self._row_to_booking(row)

    async def set_email_status(self, booking_id: int, email_status: str) -> None:
        with self._db("set email status") as conn:
            conn.execute(
                "UPDATE bookings SET email_status = ?, updated_at = ? WHERE id = ?",
                (email_status, _now().isoformat(), booking_id),
            )
            conn.commit()

    async def list_bookings(
        self, limit: int = 50, offset: int = 0, status: str | None = None
    ) -> list[Booking]:
        query = "SELECT * FROM bookings"
        params: list[Any] = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params += [limit, offset]
        with self._db("list bookings") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_booking(r) for r in rows]

    async def count_bookings(self, status: str | None = None) -> int:
        with self._db("count bookings") as conn:
            if status is None:
                row = conn.execute("SELECT COUNT(*) FROM bookings").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM bookings WHERE status = ?", (status,)
                ).fetchone()
        return row[0]

    @staticmethod
    def _row_to_booking(row) -> Booking:
        return Booking(
            booking_id=row["id"],
            name=row["name"],
            email=row["email"],
            appointment_date=row["appointment_date"],
            appointment_time=row["appointment_time"],
            message=row["message"],
            ai_analysis=_load(row["ai_analysis"]),
            email_content=row["email_content"],
            status=row["status"],
            email_status=row["email_status"],
            created_at=_parse_dt(row["created_at"]),
        )

    # -- users & usage -------------------------------------------------------

    async def reserve_call(self, email: str) -> bool:
        params = {
            "email": email,
            "limit": self._default_limit,
            "today": _today(),
            "now": _now().isoformat(),
        }
        with self._db("reserve call") as conn:
            rows = conn.execute(_RESERVE_CALL, params).fetchall()
            conn.commit()
        return bool(rows)

    async def release_call(self, email: str) -> None:
        with self._db("release call") as conn:
            conn.execute(
                "UPDATE users SET api_calls_used = api_calls_used - 1"
                " WHERE email = ? AND usage_date = ? AND api_calls_used > 0",
                (email, _today()),
            )
            conn.commit()

    async def get_usage(self, email: str) -> UsageInfo | None:
        with self._db("get usage") as conn:
            row = conn.execute(
                "SELECT email, api_calls_used, api_calls_limit, usage_date"
                " FROM users WHERE email = ?",
                (email,),
            ).fetchone()
        if not row:
            return None
        used = row["api_calls_used"] if row["usage_date"] == _today() else 0
        return UsageInfo(
            email=row["email"],
            calls_used=used,
            calls_limit=row["api_calls_limit"],
            usage_date=row["usage_date"],
        )

    async def set_limit(self, email: str, limit: int) -> None:
        now = _now().isoformat()
        with self._db("set limit") as conn:
            conn.execute(
                "INSERT INTO users (email, api_calls_limit, created_at, last_active)"
                " VALUES (?, ?, ?, ?)"
                " ON CONFLICT (email) DO UPDATE SET api_calls_limit = excluded.api_calls_limit",
                (email, limit, now, now),
            )
            conn.commit()

    async def upsert_user(self, email: str, name: str | None = None) -> None:
        now = _now().isoformat()
        with self._db("upsert user") as conn:
            conn.execute(
                "INSERT INTO users (email, name, api_calls_limit, created_at, last_active)"
                " VALUES (?, ?, ?, ?, ?)"
                " ON CONFLICT (email) DO UPDATE SET"
                "  name = COALESCE(excluded.name, users.name),"
                "  last_active = excluded.last_active",
                (email, name, self._default_limit, now, now),
            )
            conn.commit()

    # -- analytics -----------------------------------------------------------

    async def log_interaction(
        self,
        user_email: str | None,
        message: str,
        response: dict[str, Any],
        context: dict[str, Any],
        response_time_ms: int,
    ) -> None:
        with self._db("log interaction") as conn:
            conn.execute(
                "INSERT INTO chat_interactions"
                " (user_email, message, response, context, response_time_ms, created_at)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (user_email, message, _dump(response), _dump(context or {}),
                 response_time_ms, _now().isoformat()),
            )
            conn.commit()

    async def get_stats(self) -> BookingStats:
        today = _today()
        week_ago = (_now() - timedelta(days=7)).isoformat()
        with self._db("get stats") as conn:
            total_bookings = conn.execute("SELECT COUNT(*) FROM bookings").fetchone()[0]
            total_users = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
            total_chats = conn.execute("SELECT COUNT(*) FROM chat_interactions").fetchone()[0]
            today_bookings = conn.execute(
                "SELECT COUNT(*) FROM bookings WHERE substr(created_at, 1, 10) = ?",
                (today,),
            ).fetchone()[0]
            avg = conn.execute(
                "SELECT AVG(response_time_ms) FROM chat_interactions"
                " WHERE response_time_ms IS NOT NULL"
            ).fetchone()[0]
            weekly = conn.execute(
                "SELECT substr(created_at, 1, 10) AS day, COUNT(*) AS bookings"
                " FROM bookings WHERE created_at >= ?"
                " GROUP BY day ORDER BY day DESC",
                (week_ago,),
            ).fetchall()
        return BookingStats(
            total_bookings=total_bookings,
            total_users=total_users,
            total_chats=total_chats,
            today_bookings=today_bookings,
            avg_response_time_ms=round(avg or 0),
            weekly_bookings=[(r["day"], r["bookings"]) for r in weekly],
        )

    # -- social media cache --------------------------------------------------

    async def cache_social_post(
        self,
        platform: str,
        post_data: dict[str, Any],
        engagement_data: dict[str, Any] | None = None,
    ) -> None:
        with self._db("cache social post") as conn:
            conn.execute(
                "INSERT INTO social_media_cache (platform, post_data, engagement_data, fetched_at)"
                " VALUES (?, ?, ?, ?)",
                (platform, _dump(post_data), _dump(engagement_data), _now().isoformat()),
            )
            conn.commit()

    async def recent_social_posts(self, limit: int = 3) -> list[SocialPost]:
        with self._db("recent social posts") as conn:
            rows = conn.execute(
                "SELECT platform, post_data FROM social_media_cache"
                " ORDER BY fetched_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        posts = []
        for row in rows:
            data = _load(row["post_data"]) or {}
            text = data.get("text") if isinstance(data, dict) else None
            if text:
                posts.append(SocialPost(platform=row["platform"], text=str(text)))
        return posts

    # -- lifecycle -----------------------------------------------------------

    async def ping(self) -> None:
        with self._db("ping") as conn:
            conn.execute("SELECT 1").fetchone()

    async def close(self) -> None:
        self._conn.close()
