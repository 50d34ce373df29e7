"""
Create an Admin account from the command line.

Admins cannot register through the API. Run from the project root:

    python -m scripts.create_admin --email admin@example.com --full-name "Site Admin"

Missing values are prompted for; the password is always read without echo
unless passed with --password.
"""

import argparse
import asyncio
import getpass
import logging
import sys

from app.config import get_settings, ConfigurationError
from app.database import create_engine_from_settings, create_session_factory, create_tables, transaction
from app.models.user import UserRole
from app.repositories.user import UserRepository
from app.utils.auth import MIN_PASSWORD_LENGTH
from app.utils.exceptions import DuplicateEmailError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def create_admin(full_name: str, email: str, password: str) -> int:
    """Create the account; returns a process exit code."""
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)

    try:
        await create_tables(engine)
        async with session_factory() as session:
            async with transaction(session):
                admin = await UserRepository(session).create_user({
                    "full_name": full_name,
                    "email": email,
                    "password": password,
                    "role": UserRole.ADMIN,
                    "is_verified": True,
                })
        logger.info(f"Admin user created: {admin.email} (ID: {admin.id})")
        return 0
    except DuplicateEmailError:
        logger.error(f"Email '{email}' is already registered")
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1
    finally:
        await engine.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an Admin account")
    parser.add_argument("--full-name")
    parser.add_argument("--email")
    parser.add_argument("--password")
    args = parser.parse_args(argv)

    full_name = (args.full_name or input("Full name: ")).strip()
    email = (args.email or input("Email:     ")).strip()
    password = args.password or getpass.getpass("Password:  ")

    if not full_name or not email or not password:
        logger.error("All fields are required")
        return 1

    if len(password) < MIN_PASSWORD_LENGTH:
        logger.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    try:
        return asyncio.run(create_admin(full_name, email, password))
    except ConfigurationError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
