# mehu/database/models/taxonomy.py
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint, CheckConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mehu.database.core.main import Base
from mehu.database.core.service_object import ServiceObject

if TYPE_CHECKING:
    from .media import Media


class Tag(ServiceObject, Base):
    __tablename__ = "tag"
    __table_args__ = (
        UniqueConstraint("media_id", "tag_text", name="uq_tag_media_tag_text"),
        CheckConstraint("counter >= 0", name="counter_non_negative"),
        Index("ix_tag_tag_text", "tag_text"),
    )

    media_id: Mapped[int] = mapped_column(ForeignKey("media.id", ondelete="CASCADE"), nullable=False)
    tag_text: Mapped[str] = mapped_column(Text, nullable=False)  # always lower-case
    counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    media: Mapped["Media"] = relationship(back_populates="tags")
