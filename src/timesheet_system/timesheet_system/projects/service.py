from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import NotFoundError
from ..users.service import IdentityResolver
from .model import Project
from .repository import ProjectRepository


class ProjectService:
    """Use case: projects owned by the acting user."""

    def __init__(self, projects: ProjectRepository, identity: IdentityResolver, *, auto_provision_users: bool = False):
        self._projects = projects
        self._identity = identity
        self._auto_provision_users = auto_provision_users

    def create_project(
        self,
        *,
        principal: Optional[str],
        override: Optional[str] = None,
        name: str,
        code: Optional[str] = None,
    ) -> Project:
        name = require_non_empty(name, "name")
        if self._auto_provision_users:
            owner = self._identity.resolve_or_provision(principal, override)
        else:
            owner = self._identity.resolve(principal, override)

        project_id = self._projects.create(name=name, owner_id=owner.user_id, code=optional_text(code))
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_projects(self, *, owner_id: str) -> Sequence[Project]:
        return self._projects.list_for_owner(owner_id)
