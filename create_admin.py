"""
Admin account bootstrap
Run: python create_admin.py --username admin --email admin@example.com
The password is read from --password or prompted for.
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from hotel_reviews import models  # noqa: F401
from hotel_reviews.admin import create_or_update_admin
from hotel_reviews.database import Base, SessionLocal, engine
from hotel_reviews.errors import ApiError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or update the admin user")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="New password (prompted when omitted)")
    parser.add_argument(
        "--keep-password", action="store_true", help="Update the email of an existing admin only"
    )
    args = parser.parse_args()

    password = None
    if not args.keep_password:
        password = args.password or getpass.getpass("Admin password: ")

    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        user, created = create_or_update_admin(db, args.username, args.email, password)
    except ApiError as e:
        logger.error(f"❌ {e.message}")
        return 1
    finally:
        db.close()

    logger.info(f"{'Created' if created else 'Updated'} admin {user.username} <{user.email}>")
    return 0


if __name__ == "__main__":
    sys.exit(main())
