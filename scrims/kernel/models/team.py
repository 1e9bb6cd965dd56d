"""
Team model.

owner_id references a user in the identity service's database, so it is a
plain indexed column rather than a foreign key.
"""

import uuid
from typing import List

from sqlalchemy import JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from scrims.kernel.models.base import Base, TimestampMixin, generate_uuid


class Team(Base, TimestampMixin):
    """A team and the ids of its members."""

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(60),
        unique=True,
        index=True,
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        index=True,
        nullable=False,
    )
    # Stored as strings; JSON has no UUID type
    member_ids: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )

    @classmethod
    def create(
        cls,
        name: str,
        tag: str,
        description: str,
        owner_id: uuid.UUID,
    ) -> "Team":
        """Build a new team whose only member is its owner."""
        return cls(
            id=generate_uuid(),
            name=name,
            tag=tag,
            description=description,
            owner_id=owner_id,
            member_ids=[str(owner_id)],
        )

    @property
    def member_uuids(self) -> set[uuid.UUID]:
        return {uuid.UUID(m) for m in self.member_ids}

    def __repr__(self) -> str:
        return f"<Team {self.name} [{self.tag}]>"
