from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: str) -> Optional[Project]:
        raise NotImplementedError

    def create(self, *, name: str, owner_id: str, code: Optional[str] = None) -> str:
        raise NotImplementedError

    def list_for_owner(self, owner_id: str) -> Sequence[Project]:
        raise NotImplementedError
