#!/usr/bin/env python3
"""
Provision an admin who can sign in to the dashboard with an emailed OTP.

Usage:
  python -m scripts.add_admin --email admin@example.com [--name "Site Admin"]
"""
from __future__ import annotations

import argparse
import sys

from email_validator import EmailNotValidError, validate_email

from vcards.repositories.sql_repository import SQLRepository


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Add an admin account")
    ap.add_argument("--email", required=True, help="admin email (receives the OTP)")
    ap.add_argument("--name", help="display name used in OTP emails")
    args = ap.parse_args(argv)

    try:
        email = validate_email((args.email or "").strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as exc:
        raise SystemExit(f"Invalid email: {exc}")

    repo = SQLRepository()
    if repo.get_admin_by_email(email):
        raise SystemExit(f"Admin '{email}' already exists")
    admin = repo.create_admin(email, (args.name or "").strip() or None)
    print("OK: admin created")
    print(f"  ID: {admin.admin_id}")
    print(f"  Email: {admin.email}")
    if admin.admin_name:
        print(f"  Name: {admin.admin_name}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
