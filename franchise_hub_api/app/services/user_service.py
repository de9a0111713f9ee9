"""
Business logic for users.

The ``UserService`` registers and authenticates users kept in the data
store's ``users`` collection.  Passwords are stored as PBKDF2 hashes
(see ``core.security``).  Emails are unique, compared case-insensitively.

``seed_demo_users`` creates one business owner and one partner account
so a fresh installation can be explored straight away.
"""

import logging
from typing import List, Optional

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.security import hash_password, verify_password
from franchise_hub_api.app.core.store import apply_update, generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.user import ProfileUpdate, User, UserCreate, UserRole


logger = logging.getLogger(__name__)

DEMO_USERS = (
    {
        "id": "demo-business-user",
        "email": "business@demo.com",
        "first_name": "Demo",
        "last_name": "Business",
        "role": UserRole.BUSINESS,
        "company": "Demo Franchise Co.",
    },
    {
        "id": "demo-partner-user",
        "email": "partner@demo.com",
        "first_name": "Demo",
        "last_name": "Partner",
        "role": UserRole.PARTNER,
    },
)


class UserService:
    """Service for registering, authenticating and updating users."""

    @classmethod
    def _find_by_email(cls, email: str) -> Optional[User]:
        email = email.strip().lower()
        return next((u for u in get_store().users if u.email.lower() == email), None)

    @classmethod
    async def create_user(cls, data: UserCreate) -> User:
        """Register a new user.

        Raises ``ValueError`` if the email is already registered.
        """
        logger.info("Registering user %s", data.email)
        if cls._find_by_email(data.email):
            raise ValueError(f"User with email {data.email} already exists")
        now = utcnow()
        user = User(
            id=generate_unique_id(),
            created_at=now,
            updated_at=now,
            password_hash=hash_password(data.password),
            **data.model_dump(exclude={"password"}),
        )
        user.email = user.email.strip()
        store = get_store()
        store.users.append(user)
        store.notify_data_change()
        return user

    @classmethod
    async def list_users(cls, role: Optional[UserRole] = None) -> List[User]:
        users = get_store().users
        if role:
            users = [u for u in users if u.role == role]
        return sorted(users, key=lambda u: u.created_at)

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[User]:
        """Return the user if the credentials are valid, otherwise ``None``.

        Successful logins update ``last_login_at``.
        """
        user = cls._find_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        user.last_login_at = utcnow()
        get_store().notify_data_change()
        return user

    @classmethod
    async def get_user_by_id(cls, user_id: str) -> User:
        user = get_store().find("users", user_id)
        if user is None:
            raise LookupError(f"User {user_id} not found")
        return user

    @classmethod
    async def get_user_by_email(cls, email: str) -> User:
        user = cls._find_by_email(email)
        if user is None:
            raise LookupError(f"User {email} not found")
        return user

    @classmethod
    async def update_profile(cls, user_id: str, data: ProfileUpdate) -> User:
        user = await cls.get_user_by_id(user_id)
        apply_update(user, data)
        user.updated_at = utcnow()
        get_store().notify_data_change()
        return user

    @classmethod
    async def set_password(cls, email: str, new_password: str) -> User:
        user = await cls.get_user_by_email(email)
        user.password_hash = hash_password(new_password)
        user.updated_at = utcnow()
        get_store().notify_data_change()
        logger.info("Password reset for %s", user.email)
        return user

    @classmethod
    async def seed_demo_users(cls) -> int:
        """Create the demo business and partner accounts if they are missing.

        Returns the number of users created.
        """
        store = get_store()
        created = 0
        for demo in DEMO_USERS:
            if store.find("users", demo["id"]) or cls._find_by_email(demo["email"]):
                continue
            now = utcnow()
            store.users.append(
                User(
                    created_at=now,
                    updated_at=now,
                    password_hash=hash_password(settings.demo_password),
                    **demo,
                )
            )
            created += 1
        if created:
            logger.info("Seeded %s demo users", created)
            store.notify_data_change()
        return created
