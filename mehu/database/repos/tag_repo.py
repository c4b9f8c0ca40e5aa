from __future__ import annotations
from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from mehu.database.models.taxonomy import Tag
from mehu.database.repos._mapping import to_domain_tag
from mehu.domain.entities.media import Tag as DomainTag
from mehu.common.logging import get_logger

logger = get_logger(__name__)


def fold(tag_text: str) -> str:
    return (tag_text or "").strip().lower()


def prefix_match(column, prefix: str):
    """Case-sensitive ``prefix*`` match without LIKE/GLOB escaping."""
    return func.substr(column, 1, len(prefix)) == prefix


class TagRepo:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, media_id: int, tag_text: str) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.media_id == media_id, Tag.tag_text == fold(tag_text)).limit(1)
        return self.db.execute(stmt).scalars().first()

    def upsert_tag(self, media_id: int, tag_text: str) -> int:
        """
        Insert-or-fetch on (media_id, lower(tag_text)). Never touches the counter.
        """
        t = fold(tag_text)
        if not t:
            raise ValueError("tag_text is required")

        existing = self.get(media_id, t)
        if existing is not None:
            return existing.id

        logger.info("Inserting tag %r for media_id %s", t, media_id)
        row = Tag(media_id=media_id, tag_text=t, counter=0)
        self.db.add(row)
        self.db.flush()
        return row.id

    def bump_counter(self, media_id: int, tag_prefix: str) -> int:
        """Increment ``counter`` on every tag of the media matching ``tag_prefix*``; returns rows touched."""
        stmt = (
            update(Tag)
            .where(Tag.media_id == media_id, prefix_match(Tag.tag_text, tag_prefix or ""))
            .values(counter=Tag.counter + 1)
            .execution_options(synchronize_session=False)
        )
        res = self.db.execute(stmt)
        return int(res.rowcount or 0)

    def list_for_media(self, media_id: int) -> List[DomainTag]:
        stmt = select(Tag).where(Tag.media_id == media_id).order_by(Tag.id.asc())
        return [to_domain_tag(r) for r in self.db.execute(stmt).scalars().all()]
