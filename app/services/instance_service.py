"""Read-only lookup of provider instances."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.models.instance import Instance


class InstanceService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_name(self, instance_name: str) -> Optional[Instance]:
        return (
            self.db.query(Instance)
            .filter(Instance.instance_name == instance_name)
            .first()
        )
