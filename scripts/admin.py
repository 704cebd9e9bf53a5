#!/usr/bin/env python3
"""
Operator CLI for bookings and per-user usage limits.

Usage (from project root):
    python scripts/admin.py                          # list latest bookings
    python scripts/admin.py show 3                   # show booking #3 in full
    python scripts/admin.py usage ann@example.com    # show today's usage
    python scripts/admin.py limit ann@example.com 500
    python scripts/admin.py post Twitter "We just shipped calendar sync!"
    python scripts/admin.py stats

DB_PATH selects the database (default: data/smart_booking.db).
"""

import asyncio
import os
import sys
import textwrap

from dotenv import load_dotenv

# Allow running as `python scripts/admin.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from smart_booking.adapters.sqlite_store import SqliteBookingStore
from smart_booking.config import Settings


def _wrap(text: str, width: int = 72, indent: str = "    ") -> str:
    return textwrap.fill(text, width=width, initial_indent=indent, subsequent_indent=indent)


async def list_bookings(store: SqliteBookingStore, limit: int = 20) -> None:
    bookings = await store.list_bookings(limit=limit)
    if not bookings:
        print("No bookings.")
        return

    print(f"\n{'ID':>4}  {'Date':<10}  {'Time':<5}  {'Mail':<16}  {'Name':<24}  Email")
    print("-" * 80)
    for b in bookings:
        print(f"{b.booking_id:>4}  {b.appointment_date:<10}  {b.appointment_time:<5}  "
              f"{b.email_status:<16}  {b.name[:24]:<24}  {b.email}")
    total = await store.count_bookings()
    print(f"\n{len(bookings)} of {total} booking(s)\n")


async def show_booking(store: SqliteBookingStore, booking_id: int) -> None:
    booking = await store.get_booking(booking_id)
    if not booking:
        print(f"Booking #{booking_id} not found.")
        return

    print(f"\n{'=' * 60}")
    print(f"  Booking #{booking.booking_id}  |  {booking.status}  |  email {booking.email_status}")
    print(f"  Client: {booking.name} <{booking.email}>")
    print(f"  When: {booking.appointment_date} {booking.appointment_time}")
    print(f"  Created: {booking.created_at}")
    if booking.ai_analysis:
        print(f"  Analysis: {booking.ai_analysis}")
    print(f"{'=' * 60}")
    if booking.message:
        print("\n  Message:")
        print(_wrap(booking.message))
    print(f"\n{booking.email_content}\n")


async def show_usage(store: SqliteBookingStore, email: str) -> None:
    usage = await store.get_usage(email)
    if not usage:
        print(f"No user {email!r}.")
        return
    print(f"{usage.email}: {usage.calls_used}/{usage.calls_limit} calls today")


async def set_limit(store: SqliteBookingStore, email: str, limit: int) -> None:
    if limit < 0:
        print("Limit must be zero or more.")
        return
    await store.set_limit(email, limit)
    print(f"{email}: daily limit set to {limit}.")


async def add_post(store: SqliteBookingStore, platform: str, text: str) -> None:
    await store.cache_social_post(platform, {"text": text})
    print(f"Cached {platform} post.")


async def show_stats(store: SqliteBookingStore) -> None:
    s = await store.get_stats()
    print(f"Bookings: {s.total_bookings} total, {s.today_bookings} today")
    print(f"Users:    {s.total_users}")
    print(f"Chats:    {s.total_chats} (avg {s.avg_response_time_ms} ms)")
    for day, count in s.weekly_bookings:
        print(f"  {day}  {count}")


async def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    store = SqliteBookingStore(settings.db_path, settings.default_daily_limit)
    args = sys.argv[1:]

    try:
        if not args:
            await list_bookings(store)
        elif args[0] == "show" and len(args) >= 2:
            await show_booking(store, int(args[1]))
        elif args[0] == "usage" and len(args) >= 2:
            await show_usage(store, args[1])
        elif args[0] == "limit" and len(args) >= 3:
            await set_limit(store, args[1], int(args[2]))
        elif args[0] == "post" and len(args) >= 3:
            await add_post(store, args[1], " ".join(args[2:]))
        elif args[0] == "stats":
            await show_stats(store)
        else:
            print(__doc__)
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
