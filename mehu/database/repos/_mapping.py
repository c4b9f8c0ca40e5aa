# mehu/database/repos/_mapping.py
from __future__ import annotations
from mehu.database.models.media import Media as DBMedia
from mehu.database.models.taxonomy import Tag as DBTag
from mehu.database.models.access import Access as DBAccess
from mehu.domain.entities.media import Media as DomainMedia, Tag as DomainTag, Access as DomainAccess
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind


def to_domain_media(row: DBMedia, score: int | None = None) -> DomainMedia:
    return DomainMedia(
        id=row.id,
        file_reference=row.file_reference,
        kind=row.media_kind if isinstance(row.media_kind, MediaKind) else MediaKind(row.media_kind),
        score=int(score or 0),
    )


def to_domain_tag(row: DBTag) -> DomainTag:
    return DomainTag(id=row.id, media_id=row.media_id, text=row.tag_text, counter=int(row.counter or 0))


def to_domain_access(row: DBAccess) -> DomainAccess:
    return DomainAccess(
        id=row.id,
        media_id=row.media_id,
        owner_id=row.owner_id,
        owner_kind=row.owner_kind if isinstance(row.owner_kind, OwnerKind) else OwnerKind(row.owner_kind),
    )
