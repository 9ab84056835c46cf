"""Viewing scopes: the user's own list and up to three partners."""

from dataclasses import dataclass
from enum import StrEnum

from omamori.core.config import Constants


class Scope(StrEnum):
    """Whose tasks a widget displays."""

    ME = "me"
    PARTNER1 = "partner1"
    PARTNER2 = "partner2"
    PARTNER3 = "partner3"

    @property
    def is_owner(self) -> bool:
        return self is Scope.ME


@dataclass(frozen=True)
class ScopeKeys:
    """Storage keys backing one scope."""

    cache_key: str
    user_id_key: str
    name_key: str | None
    default_label: str


SCOPE_ORDER: tuple[Scope, ...] = (Scope.ME, Scope.PARTNER1, Scope.PARTNER2, Scope.PARTNER3)

SCOPE_KEYS: dict[Scope, ScopeKeys] = {
    Scope.ME: ScopeKeys(Constants.MY_TASKS_KEY, Constants.MY_USER_ID_KEY, None, "MY TASKS"),
    Scope.PARTNER1: ScopeKeys(
        Constants.PARTNER_TASKS_KEYS[0], Constants.PARTNER_USER_ID_KEYS[0], Constants.PARTNER_NAME_KEYS[0], "PARTNER 1"
    ),
    Scope.PARTNER2: ScopeKeys(
        Constants.PARTNER_TASKS_KEYS[1], Constants.PARTNER_USER_ID_KEYS[1], Constants.PARTNER_NAME_KEYS[1], "PARTNER 2"
    ),
    Scope.PARTNER3: ScopeKeys(
        Constants.PARTNER_TASKS_KEYS[2], Constants.PARTNER_USER_ID_KEYS[2], Constants.PARTNER_NAME_KEYS[2], "PARTNER 3"
    ),
}


def parse_scope(value: str | Scope | None) -> Scope | None:
    """Parse a scope raw value, returning None for missing or unknown values."""
    if value is None:
        return None
    if isinstance(value, Scope):
        return value
    try:
        return Scope(value.strip().lower())
    except ValueError:
        return None
