from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Project:
    project_id: str
    name: str
    owner_id: str
    code: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.project_id,
            "name": self.name,
            "code": self.code,
            "ownerId": self.owner_id,
            "isActive": self.is_active,
        }
