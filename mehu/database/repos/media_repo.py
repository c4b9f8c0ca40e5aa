# mehu/database/repos/media_repo.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from mehu.database.models.media import Media as DBMedia
from mehu.domain.entities.media import Media as DomainMedia, MediaIdentity
from mehu.common.logging import get_logger
from mehu.database.repos._mapping import to_domain_media


logger = get_logger(__name__)


class SqlAlchemyMediaRepo:
    """
    Media rows keyed by (file_reference, media_kind).
    The repo never commits; the caller owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, media_id: int) -> Optional[DomainMedia]:
        row = self.db.get(DBMedia, media_id)
        return to_domain_media(row) if row else None

    def get_by_identity(self, identity: MediaIdentity) -> Optional[DBMedia]:
        stmt = (
            select(DBMedia)
            .where(
                DBMedia.file_reference == identity.file_reference,
                DBMedia.media_kind == identity.kind,
            )
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def upsert_media(self, identity: MediaIdentity) -> int:
        """Return the id for ``identity``, inserting the row on first sight."""
        existing = self.get_by_identity(identity)
        if existing is not None:
            return existing.id

        logger.info("Inserting media with file_reference=%s kind=%s", identity.file_reference, identity.kind.value)
        row = DBMedia(file_reference=identity.file_reference, media_kind=identity.kind)
        self.db.add(row)
        self.db.flush()
        return row.id
