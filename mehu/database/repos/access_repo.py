from __future__ import annotations
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from mehu.database.models.access import Access as DBAccess
from mehu.database.repos._mapping import to_domain_access
from mehu.domain.entities.media import Access as DomainAccess
from mehu.domain.enums.owner_kind import OwnerKind
from mehu.common.logging import get_logger

logger = get_logger(__name__)


class SqlAlchemyAccessRepo:
    def __init__(self, session: Session) -> None:
        self.db = session

    def get(self, media_id: int, owner_id: int) -> Optional[DBAccess]:
        stmt = select(DBAccess).where(
            and_(
                DBAccess.media_id == media_id,
                DBAccess.owner_id == owner_id,
            )
        ).limit(1)
        return self.db.execute(stmt).scalars().first()

    def record(self, *, media_id: int, owner_id: int, owner_kind: OwnerKind) -> DomainAccess:
        exists = self.get(media_id, owner_id)
        if exists:
            # owner_kind is immutable once written
            if exists.owner_kind != owner_kind:
                logger.warning(
                    "Access for media_id %s owner_id %s already recorded as %s; ignoring %s",
                    media_id, owner_id, exists.owner_kind, owner_kind,
                )
            return to_domain_access(exists)

        logger.info("Inserting access to owner_id %s for media_id %s", owner_id, media_id)
        link = DBAccess(media_id=media_id, owner_id=owner_id, owner_kind=owner_kind)
        self.db.add(link)
        self.db.flush()
        return to_domain_access(link)

    def list_by_media(self, media_id: int) -> List[DomainAccess]:
        stmt = select(DBAccess).where(DBAccess.media_id == media_id).order_by(DBAccess.owner_id.asc())
        return [to_domain_access(r) for r in self.db.execute(stmt).scalars().all()]
