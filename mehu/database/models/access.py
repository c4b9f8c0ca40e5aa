# mehu/database/models/access.py
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Enum as SAEnum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mehu.database.core.main import Base
from mehu.database.core.service_object import ServiceObject
from mehu.domain.enums.owner_kind import OwnerKind

if TYPE_CHECKING:
    from .media import Media


class Access(ServiceObject, Base):
    __tablename__ = "access"
    __table_args__ = (
        UniqueConstraint("media_id", "owner_id", name="uq_access_media_owner"),
    )

    media_id: Mapped[int] = mapped_column(ForeignKey("media.id", ondelete="CASCADE"), nullable=False)
    # Telegram user ids and (negative) group chat ids both exceed 32 bits
    owner_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    owner_kind: Mapped[OwnerKind] = mapped_column(
        SAEnum(OwnerKind, name="owner_kind", native_enum=False,
               values_callable=lambda e: [m.value for m in e], length=16),
        nullable=False,
    )

    media: Mapped["Media"] = relationship(back_populates="access")
