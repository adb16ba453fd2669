# scripts/create_admin.py
"""Create an approved admin account: python scripts/create_admin.py --email ... --password ..."""
import argparse
import asyncio
import logging

from jobboard.core.config import settings
from jobboard.core.errors import AppError
from jobboard.core.logging import setup_logging
from jobboard.core.security import SecurityConfig
from jobboard.db.mongo import close_db, init_indexes
from jobboard.models.user import Role
from jobboard.services.identity import IdentityService

logger = logging.getLogger("create_admin")


async def create_admin(email: str, password: str, first_name: str, last_name: str) -> dict:
    await init_indexes()
    identity = IdentityService(SecurityConfig.from_settings(settings))
    session = await identity.register({
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "role": Role.ADMIN.value,
    })
    return session["user"]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a job board admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        user = asyncio.run(create_admin(args.email, args.password, args.first_name, args.last_name))
    except AppError as exc:
        logger.error("could not create admin: %s", exc.message)
        return 1
    finally:
        close_db()
    logger.info("admin %s created (id=%s)", user["email"], user["id"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
