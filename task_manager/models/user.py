# task_manager/models/user.py

from pydantic import Field
from . import Record, utc_now


# -------------------------------
# User Model
# -------------------------------

class User(Record):
    """
    Stored user record. `password` holds the bcrypt hash and must never be
    sent to a client; use public() for responses.
    """
    id: str
    first_name: str
    last_name: str
    email_address: str
    password: str
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    def public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"password"})
