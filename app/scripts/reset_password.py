import sys
import os
import argparse
import getpass
import logging

# Add parent directory to path so we can import app modules
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
sys.path.append(parent_dir)

from sqlalchemy.exc import SQLAlchemyError

import app
from exceptions import ResourceHubException

logger = logging.getLogger(__name__)


def reset_password(password, require_change=False, hub_app=None):
    """Reset the configured admin's password."""
    if hub_app is None:
        hub_app = app.create_app()
    credentials = hub_app.credential_manager
    logger.info(f"Attempting to reset password for user: {credentials.username}")

    with hub_app.app_context():
        try:
            credentials.reset_password(password, require_change=require_change)
        except ResourceHubException as e:
            logger.error(f"Failed to reset password: {e.message}")
            return False
        except SQLAlchemyError as e:
            logger.error(f"Failed to reset password: {e}")
            return False

    logger.info("Password updated successfully.")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Reset the admin password")
    parser.add_argument("--password", help="New password (prompted when omitted)")
    parser.add_argument(
        "--require-change",
        action="store_true",
        help="Force a password change on next login",
    )

    args = parser.parse_args(argv)
    password = args.password or getpass.getpass("New password: ")

    if reset_password(password, require_change=args.require_change):
        print("SUCCESS")
        return 0
    print("FAILURE")
    return 1


if __name__ == "__main__":
    sys.exit(main())
