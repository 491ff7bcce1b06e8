#!/usr/bin/env python3
"""
Clear marketplace activity (swipes, super-likes, matches, conversations, messages, notifications).
Users, garments and push tokens are kept; garment like counters go back to 0.
Run with backend stopped to avoid locks: cd backend && python scripts/reset_marketplace.py
"""
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from swapshop.db.session import SessionLocal
from swapshop.services.admin_service import reset_marketplace


def main():
    db = SessionLocal()
    try:
        deleted = reset_marketplace(db)
    finally:
        db.close()
    for table, count in deleted.items():
        print(f"  {table}: {'truncated' if count < 0 else count}")
    print("Done. Marketplace activity cleared.")


if __name__ == "__main__":
    main()
