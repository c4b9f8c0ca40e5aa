# mehu/database/repos/media_query.py
from __future__ import annotations
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session, aliased

from mehu.database.models import Media as DBMedia, Tag as DBTag
from mehu.database.repos._mapping import to_domain_media
from mehu.database.repos.tag_repo import prefix_match
from mehu.domain.entities.media import Media as DomainMedia


class MediaQueryRepo:
    """
    Read-only, relevance-ranked media queries.

    Only media with at least one tag are returned. Rank is the sum of all
    tag counters of the media, descending; ties go to the older row.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _ranked(self):
        score = func.coalesce(func.sum(DBTag.counter), 0).label("score")
        stmt = (
            select(DBMedia, score)
            .join(DBTag, DBTag.media_id == DBMedia.id)
            .group_by(DBMedia.id)
            .order_by(score.desc(), DBMedia.id.asc())
        )
        return stmt

    def list_ranked(self, *, limit: Optional[int] = None) -> List[DomainMedia]:
        stmt = self._ranked()
        if limit:
            stmt = stmt.limit(limit)
        return [to_domain_media(m, s) for (m, s) in self.session.execute(stmt).all()]

    def list_ranked_by_tag_prefix(self, prefix: str, *, limit: Optional[int] = None) -> List[DomainMedia]:
        Match = aliased(DBTag)
        has_match = (
            select(Match.id)
            .where(Match.media_id == DBMedia.id, prefix_match(Match.tag_text, prefix))
            .exists()
        )
        stmt = self._ranked().where(has_match)
        if limit:
            stmt = stmt.limit(limit)
        return [to_domain_media(m, s) for (m, s) in self.session.execute(stmt).all()]

    def count_media(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(DBMedia)).scalar_one())
