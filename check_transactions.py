"""
Read-only look at the transactions collection: totals per type, today's
bonus credits and withdrawal debits, and the ten most recent rows.
"""
import sys
from datetime import datetime, timedelta, timezone

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from check_db import connect
from logger import diagnostics_logger

EMPTY_TOTAL = {"count": 0, "total": 0}


def today_window(now=None):
    """[midnight, next midnight) in UTC."""
    now = now or datetime.now(timezone.utc)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _totals(collection, match, amount_expr="$amount"):
    rows = list(collection.aggregate([
        {"$match": match},
        {"$group": {"_id": None, "total": {"$sum": amount_expr}, "count": {"$sum": 1}}},
    ]))
    if not rows:
        return dict(EMPTY_TOTAL)
    return {"count": rows[0]["count"], "total": rows[0]["total"]}


def collect_stats(db, now=None):
    transactions = db["transactions"]
    start, end = today_window(now)
    today = {"$gte": start, "$lt": end}

    by_type = list(transactions.aggregate([
        {"$group": {"_id": "$type", "count": {"$sum": 1}, "totalAmount": {"$sum": "$amount"}}},
    ]))
    return {
        "total": transactions.count_documents({}),
        "by_type": by_type,
        "today_bonus": _totals(transactions, {"type": "bonus", "amount": {"$gt": 0}, "createdAt": today}),
        "today_withdrawal": _totals(
            transactions,
            {"type": "withdrawal", "amount": {"$lt": 0}, "createdAt": today},
            {"$abs": "$amount"},
        ),
        "recent": list(transactions.find().sort("createdAt", DESCENDING).limit(10)),
    }


def print_report(stats):
    print("Total Transactions:", stats["total"])

    print("\nBy Type:")
    for row in stats["by_type"]:
        print(f"  {row['_id']}: {row['count']} transactions, total amount: {row['totalAmount']}")

    print("\nToday's Stats:")
    print("  Bonus (Added):", stats["today_bonus"])
    print("  Withdrawal (Deducted):", stats["today_withdrawal"])

    print("\nRecent 10 Transactions:")
    for tx in stats["recent"]:
        description = tx.get("description") or "No description"
        print(f"  {tx.get('type')}: {tx.get('amount')} - {description} ({tx.get('createdAt')})")


def main():
    try:
        client, db = connect()
    except (PyMongoError, ValueError) as e:
        diagnostics_logger.error(f"check_transactions connection failed: {e}")
        print("Error:", e)
        return 1

    try:
        print("Connected to MongoDB\n")
        print_report(collect_stats(db))
    except PyMongoError as e:
        diagnostics_logger.error(f"check_transactions query failed: {e}")
        print("Error:", e)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
