"""User record schemas and synthetic user generation."""

import itertools
import secrets
import time

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USERNAME = "testuser"
DEFAULT_PASSWORD = "TestPassword123!"

# Process-wide sequence; combined with the clock it keeps emails unique within a run
_user_sequence = itertools.count(1)


class UserRecord(BaseModel):
    """Registration data for a test user."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str = Field(pattern=r"^\+?\d{7,15}$")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class Credentials(BaseModel):
    """Login credentials persisted in register/credentials.json."""

    username: str
    password: str


DEFAULT_CREDENTIALS = Credentials(username=DEFAULT_USERNAME, password=DEFAULT_PASSWORD)


def generate_random_user() -> UserRecord:
    """
    Build a synthetic user with a unique email.

    The email combines a millisecond timestamp, a per-process sequence number
    and a random suffix, so two calls in one process never collide and
    collisions across processes are very unlikely.
    """
    timestamp = int(time.time() * 1000)
    sequence = next(_user_sequence)
    suffix = secrets.token_hex(3)
    phone_digits = "".join(str(secrets.randbelow(10)) for _ in range(10))

    return UserRecord(
        first_name=f"TestUser{timestamp}",
        last_name=f"LastName{timestamp}",
        email=f"testuser{timestamp}.{sequence}.{suffix}@example.com",
        phone=f"+1{phone_digits}",
    )
