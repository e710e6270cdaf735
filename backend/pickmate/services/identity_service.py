"""
Identity service: stable voter ids for account holders and anonymous link voters.
"""
from typing import MutableMapping, Optional
import re
import uuid
from pickmate.core.config import settings
from pickmate.models.user import User

ANONYMOUS_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def voter_id_for_user(user: User) -> str:
    """Authenticated voters vote under their account id."""
    return str(user.id)


def is_anonymous_voter_id(value: Optional[str]) -> bool:
    return bool(value) and ANONYMOUS_ID_PATTERN.match(value) is not None


def new_voter_id() -> str:
    return uuid.uuid4().hex


def get_voter_id(storage: MutableMapping[str, str], key: Optional[str] = None) -> str:
    """
    Return the voter id kept in ``storage``, creating and storing one if absent.

    Calling this twice with the same storage yields the same id. Values that
    do not look like an id we issued are replaced. If the caller cannot keep
    the storage between requests, every call mints a new id and the
    one-vote-per-voter rule no longer holds for that client.
    """
    key = key or settings.VOTER_COOKIE_NAME
    voter_id = storage.get(key)
    if not is_anonymous_voter_id(voter_id):
        voter_id = new_voter_id()
        storage[key] = voter_id
    return voter_id
