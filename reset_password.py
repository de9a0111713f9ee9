#!/usr/bin/env python3
"""
Reset a user's password in the Franchise Hub storage database.

This script does not read or reveal any existing password.  It sets a
new PBKDF2-HMAC-SHA256 hash for the user with the given email and saves
the users collection back to storage.

Usage:
    python reset_password.py --db ./franchise_hub_api/franchise_hub.db --email partner@demo.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import asyncio
import getpass
import os
import sys


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a Franchise Hub user password.")
    ap.add_argument("--db", required=True, help="Path to the SQLite storage file")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    # Settings are read at import time, so point them at the database first.
    os.environ["DATABASE_URL"] = os.path.abspath(args.db)
    from franchise_hub_api.app.core.db import init_db
    from franchise_hub_api.app.services.user_service import UserService

    init_db()

    try:
        asyncio.run(UserService.set_password(args.email, new_password))
    except LookupError:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)
    print(f"[+] Password updated for user: {args.email}")


if __name__ == "__main__":
    main()
