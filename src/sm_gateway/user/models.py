"""Identity domain model — pure dataclass, no framework dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    id: str
    full_name: str
    phone: str                # unique natural key
    role: str                 # UserRole value
    password_hash: str
    email: str | None = None
    balance: int = 0          # smallest currency unit, never negative
    rating: float = 5.0       # [0.0, 5.0], one decimal
    completed_services: int = 0
    is_online: bool = False
    last_seen: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
