# mehu/database/models/media.py
from __future__ import annotations

from typing import List, TYPE_CHECKING

from sqlalchemy import Enum as SAEnum, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mehu.database.core.main import Base
from mehu.database.core.service_object import ServiceObject
from mehu.domain.enums.media_kind import MediaKind

if TYPE_CHECKING:
    from .taxonomy import Tag
    from .access import Access


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Media(ServiceObject, Base):
    __tablename__ = "media"
    __table_args__ = (
        UniqueConstraint("file_reference", "media_kind", name="uq_media_file_reference_kind"),
    )

    # opaque file id issued by the Bot API
    file_reference: Mapped[str] = mapped_column(Text, nullable=False)
    media_kind: Mapped[MediaKind] = mapped_column(
        SAEnum(MediaKind, name="media_kind", native_enum=False, values_callable=_values, length=32),
        nullable=False,
    )

    tags: Mapped[List["Tag"]] = relationship(back_populates="media", passive_deletes=True)
    access: Mapped[List["Access"]] = relationship(back_populates="media", passive_deletes=True)
