"""
Read-only snapshot of the mining app's MongoDB: user and session counts,
coins mined by completed sessions, and one sample user.

    MONGODB_URI=mongodb://... python check_db.py
"""
import json
import sys

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import Config
from logger import diagnostics_logger


def connect(uri=None, db_name=None):
    uri = uri or Config.MONGODB_URI
    if not uri:
        raise ValueError("MONGODB_URI is not set")
    client = MongoClient(uri, serverSelectionTimeoutMS=10000)
    # MongoClient connects lazily; ping so a bad URI fails here
    client.admin.command("ping")
    return client, client.get_default_database(default=db_name or Config.MONGODB_DB)


def collect_stats(db):
    sessions = db["miningsessions"]
    total_mined = list(sessions.aggregate([
        {"$match": {"status": "completed"}},
        {"$group": {"_id": None, "total": {"$sum": "$earnedCoins"}}},
    ]))
    return {
        "users": db["users"].count_documents({}),
        "sessions": sessions.count_documents({}),
        "completed": sessions.count_documents({"status": "completed"}),
        "active": sessions.count_documents({"status": "active"}),
        "total_mined": total_mined[0]["total"] if total_mined else 0,
        "sample_user": db["users"].find_one(
            {}, projection={"name": 1, "email": 1, "miningStats": 1, "coinBalance": 1}
        ),
    }


def print_report(stats):
    print("\n=== DATABASE STATS ===")
    print("Total Users:", stats["users"])
    print("Total Mining Sessions:", stats["sessions"])
    print("Completed Sessions:", stats["completed"])
    print("Active Sessions:", stats["active"])
    print("Total Mined Coins (from sessions):", stats["total_mined"])

    user = stats["sample_user"]
    if user:
        print("\n=== SAMPLE USER ===")
        print("Name:", user.get("name"))
        print("Email:", user.get("email"))
        print("Mining Stats:", json.dumps(user.get("miningStats"), indent=2, default=str))
        print("Coin Balance:", user.get("coinBalance"))
    else:
        print("\nNo users found in database")


def main():
    try:
        client, db = connect()
    except (PyMongoError, ValueError) as e:
        diagnostics_logger.error(f"check_db connection failed: {e}")
        print("Connection Error:", e)
        return 1

    try:
        print("Connected to MongoDB")
        print_report(collect_stats(db))
    except PyMongoError as e:
        diagnostics_logger.error(f"check_db query failed: {e}")
        print("Error:", e)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
