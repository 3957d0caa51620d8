"""
Create an account (e.g. the seed administrator). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [--role admin] [--seed]
Example:
  python -m app.scripts.create_user admin your-secure-password --seed

The password is digested exactly like the UI does before login, then
bcrypt-hashed. --seed gives the account the fixed SEED_ADMIN_ID (which can
never be deleted) and the admin role.
"""
import argparse
import sys

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import USERNAME_MAX_LEN, hash_password
from app.models import AppRole, User
from app.services.roles import replace_user_roles

PASSWORD_MIN_LEN = 8


def create_account(
    db: Session,
    username: str,
    password: str,
    roles: list[AppRole],
    display_name: str | None = None,
    user_id: str | None = None,
) -> User:
    """Insert an account with its roles and commit. Raises ValueError if the username is taken."""
    if db.query(User.id).filter(User.username == username).first() is not None:
        raise ValueError(f"User '{username}' already exists.")
    if user_id is not None and db.query(User.id).filter(User.id == user_id).first() is not None:
        raise ValueError(f"An account with id '{user_id}' already exists.")
    user = User(
        username=username,
        password_hash=hash_password(password),
        display_name=display_name,
        is_active=True,
    )
    if user_id is not None:
        user.id = user_id
    db.add(user)
    db.flush()
    replace_user_roles(db, user.id, roles)
    db.commit()
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin console account (no registration UI).")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password (at least {PASSWORD_MIN_LEN} chars)")
    parser.add_argument(
        "--role",
        action="append",
        choices=[r.value for r in AppRole],
        help="Role to assign; repeat for several (default: user)",
    )
    parser.add_argument("--display-name", default=None)
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Create the undeletable seed administrator (fixed id, admin role)",
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN:
        print(f"Password must be at least {PASSWORD_MIN_LEN} characters.", file=sys.stderr)
        return 1

    roles = [AppRole(r) for r in (args.role or [AppRole.USER.value])]
    user_id = None
    if args.seed:
        user_id = get_settings().SEED_ADMIN_ID
        if AppRole.ADMIN not in roles:
            roles.append(AppRole.ADMIN)

    db = SessionLocal()
    try:
        user = create_account(
            db,
            username,
            args.password,
            roles,
            display_name=args.display_name,
            user_id=user_id,
        )
        print(f"Created user '{username}' ({user.id}) with roles {[r.value for r in roles]}.")
        return 0
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
