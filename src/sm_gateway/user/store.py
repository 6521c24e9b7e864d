"""IdentityStore — sole owner of user records and balances.

Users are indexed by id and by phone (the natural key). Balance mutations go
through `credit` / `debit`, which take a per-user asyncio.Lock so concurrent
settlements on the same user never interleave; only the transaction engine
calls them.
"""

import asyncio
import logging
from collections import defaultdict

from src.sm_common.datetime_utils import utc_now
from src.sm_common.enums import UserRole
from src.sm_common.errors import (
    InsufficientBalanceError,
    InvalidCredentialsError,
    PhoneExistsError,
    UserNotFoundError,
)
from src.sm_common.id_generator import USER_PREFIX, generate_id
from src.sm_common.money import validate_amount
from src.sm_gateway.auth.password import hash_password, verify_password
from src.sm_gateway.user.models import User

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(
        self,
        initial_rating: float = 5.0,
        max_rating: float = 5.0,
        rating_increment: float = 0.1,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._users: dict[str, User] = {}
        self._by_phone: dict[str, str] = {}
        self._balance_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._initial_rating = initial_rating
        self._max_rating = max_rating
        self._rating_increment = rating_increment
        self._bcrypt_rounds = bcrypt_rounds

    # ------------------------------------------------------------------
    # Registration / authentication
    # ------------------------------------------------------------------

    def register(
        self,
        full_name: str,
        phone: str,
        password: str,
        role: UserRole | str,
        email: str | None = None,
    ) -> User:
        if phone in self._by_phone:
            raise PhoneExistsError(phone)

        now = utc_now()
        user = User(
            id=generate_id(USER_PREFIX),
            full_name=full_name,
            phone=phone,
            role=UserRole(role).value,
            password_hash=hash_password(password, rounds=self._bcrypt_rounds),
            email=email,
            rating=self._initial_rating,
            last_seen=now,
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        self._by_phone[phone] = user.id
        logger.info("User registered: id=%s role=%s", user.id, user.role)
        return user

    def authenticate(self, phone: str, password: str) -> User:
        user_id = self._by_phone.get(phone)
        if user_id is None:
            raise UserNotFoundError(phone)
        user = self._users[user_id]
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        user.last_seen = utc_now()
        return user

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def count(self) -> int:
        return len(self._users)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_profile(
        self, user_id: str, full_name: str | None = None, email: str | None = None
    ) -> User:
        user = self.get(user_id)
        if full_name:
            user.full_name = full_name
        if email:
            user.email = email
        user.updated_at = utc_now()
        return user

    def set_online(self, user_id: str, online: bool) -> None:
        user = self.get(user_id)
        user.is_online = online
        user.last_seen = utc_now()
        logger.debug("Presence: user=%s online=%s", user_id, online)

    def record_completed_service(self, user_id: str) -> User:
        """Bump the completed-service counter and nudge reputation up, capped at max."""
        user = self.get(user_id)
        user.completed_services += 1
        user.rating = round(min(self._max_rating, user.rating + self._rating_increment), 1)
        user.updated_at = utc_now()
        return user

    def balance_lock(self, user_id: str) -> asyncio.Lock:
        """Per-user lock serialising every balance mutation for that user."""
        return self._balance_locks[user_id]

    def apply_credit(self, user_id: str, amount: int) -> int:
        """Add `amount` to the balance. Caller must hold `balance_lock(user_id)`."""
        validate_amount(amount)
        user = self.get(user_id)
        user.balance += amount
        user.updated_at = utc_now()
        return user.balance

    def apply_debit(self, user_id: str, amount: int) -> int:
        """Subtract `amount`; raises InsufficientBalanceError rather than go negative.

        Caller must hold `balance_lock(user_id)`.
        """
        validate_amount(amount)
        user = self.get(user_id)
        if user.balance < amount:
            raise InsufficientBalanceError(required=amount, available=user.balance)
        user.balance -= amount
        user.updated_at = utc_now()
        return user.balance

    async def credit(self, user_id: str, amount: int) -> int:
        async with self.balance_lock(user_id):
            return self.apply_credit(user_id, amount)

    async def debit(self, user_id: str, amount: int) -> int:
        async with self.balance_lock(user_id):
            return self.apply_debit(user_id, amount)
