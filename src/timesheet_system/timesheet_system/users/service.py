from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import SYNTHESIZED_EMAIL_DOMAIN
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps an inbound principal (or an impersonation override) to a User.

    Lookup order: exact id, email, then the synthesized ``<id>@example.com``
    email. First match wins. Pure lookup apart from :meth:`resolve_or_provision`.
    """

    def __init__(self, users: UserRepository, *, allow_impersonation: bool = False):
        self._users = users
        self._allow_impersonation = allow_impersonation

    def effective_principal(self, principal: Optional[str], override: Optional[str] = None) -> Optional[str]:
        if override and self._allow_impersonation:
            return override.strip() or None
        return (principal or "").strip() or None

    def find(self, principal: Optional[str], override: Optional[str] = None) -> Optional[User]:
        key = self.effective_principal(principal, override)
        if not key:
            return None

        user = self._users.get_by_id(key)
        if not user:
            user = self._users.get_by_email(key)
        if not user:
            user = self._users.get_by_email(f"{key}@{SYNTHESIZED_EMAIL_DOMAIN}")
        if user and not user.is_active:
            return None
        return user

    def resolve(self, principal: Optional[str], override: Optional[str] = None) -> User:
        if not self.effective_principal(principal, override):
            raise AuthenticationError("No caller identity supplied")
        user = self.find(principal, override)
        if not user:
            raise NotFoundError("User not found")
        return user

    def resolve_or_provision(self, principal: Optional[str], override: Optional[str] = None) -> User:
        """Dev-mode convenience: create a minimal Employee for an unknown caller."""
        user = self.find(principal, override)
        if user:
            return user

        key = self.effective_principal(principal, override)
        if not key:
            raise AuthenticationError("No caller identity supplied")

        email = f"{key}@{SYNTHESIZED_EMAIL_DOMAIN}"
        self._users.create_user(email=email, role=Role.EMPLOYEE, first_name=key, last_name="User")
        logger.warning("Auto-provisioned user %s", email)

        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return user

    def user_info(self, principal: Optional[str], override: Optional[str] = None) -> dict:
        return self.resolve(principal, override).to_profile()

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)
