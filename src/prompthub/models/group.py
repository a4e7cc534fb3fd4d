"""Two-level prompt taxonomy: groups contain subgroups."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prompthub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Group(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    subgroups: Mapped[list[Subgroup]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="Subgroup.order_id",
    )


class Subgroup(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "subgroups"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    group: Mapped[Group] = relationship(back_populates="subgroups")
