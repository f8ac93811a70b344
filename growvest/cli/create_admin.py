"""
Create the admin account, or promote an existing user to admin.

Usage: python -m growvest.cli.create_admin [--email EMAIL] [--password PASSWORD]
Defaults come from ADMIN_EMAIL / ADMIN_PASSWORD.
"""

import argparse
import asyncio
import sys

from growvest.core.config import get_settings
from growvest.core.logging import configure_logging, get_logger
from growvest.db.init import init_db
from growvest.services.investments import seed_default_plans
from growvest.services.users import ensure_admin

log = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


async def create_admin(email: str, password: str) -> str:
    await init_db()
    await seed_default_plans()
    user, outcome = await ensure_admin(email, password)
    log.info("admin_bootstrap", outcome=outcome, user_id=str(user.id), email=user.email)
    return outcome


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(debug=settings.debug)
    parser = argparse.ArgumentParser(description="Create or promote the GrowVest admin user")
    parser.add_argument("--email", default=settings.admin_email, help="Admin email (ADMIN_EMAIL)")
    parser.add_argument("--password", default=settings.admin_password, help="Admin password (ADMIN_PASSWORD)")
    args = parser.parse_args(argv)

    if not args.email or not args.password:
        log.error("admin_bootstrap_failed", reason="ADMIN_EMAIL and ADMIN_PASSWORD are required")
        return 1
    if len(args.password) < MIN_PASSWORD_LENGTH:
        log.error("admin_bootstrap_failed", reason=f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    outcome = asyncio.run(create_admin(args.email, args.password))
    print(f"Admin {args.email}: {outcome}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
