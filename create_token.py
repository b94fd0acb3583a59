"""Mint a session token for an email, e.g. for manual API testing.

Usage:
    python create_token.py admin@styledecor.com [--minutes 60]
"""
import argparse

from styledecor_api.app.core.config import settings
from styledecor_api.app.core.security import TokenService


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue a StyleDecor API token.")
    ap.add_argument("email", help="Email to embed in the token")
    ap.add_argument("--minutes", type=int, default=settings.access_token_expire_minutes, help="Token lifetime")
    args = ap.parse_args()
    tokens = TokenService(settings.secret_key, args.minutes, settings.algorithm)
    print(tokens.issue(args.email.strip().lower()))


if __name__ == "__main__":
    main()
