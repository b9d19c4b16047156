"""
Create an email/password user from the command line. Run from project root:
  python -m authhub.scripts.create_user EMAIL PASSWORD [--admin]
The first user ever created becomes admin regardless of --admin.
"""
import argparse
import logging
import sys

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from authhub.core.database import session_scope
from authhub.core.errors import AuthHubError
from authhub.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from authhub.services.storage import Storage
from authhub.services.users import register_user, update_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an AuthHub user.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    args = parser.parse_args()

    try:
        email = TypeAdapter(EmailStr).validate_python(args.email.strip())
    except PydanticValidationError:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    try:
        with session_scope() as db:
            store = Storage(db)
            user = register_user(store, email, args.password)
            if args.admin and user.role != "admin":
                user = update_user(store, user.id, role="admin")
            store.commit()
            logger.info("Created user %s (%s) with role %s", user.id, user.email, user.role)
    except AuthHubError as e:
        print(e.message, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
