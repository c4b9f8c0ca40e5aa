# mehu/database/store.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from mehu.common.logging import get_logger
from mehu.database.core.main import make_session_factory
from mehu.database.core.transaction import transactional
from mehu.database.repos.access_repo import SqlAlchemyAccessRepo
from mehu.database.repos.media_query import MediaQueryRepo
from mehu.database.repos.media_repo import SqlAlchemyMediaRepo
from mehu.database.repos.tag_repo import TagRepo
from mehu.domain.dataclasses.events import ID_MAX, ID_MIN
from mehu.domain.entities.media import Media, MediaIdentity, Tag, Access
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind
from mehu.domain.errors import ConstraintViolation, NotFound

logger = get_logger(__name__)


class Store:
    """
    Facade over the repos. Every call is its own unit of work: one Session,
    one BEGIN/COMMIT, nothing held open between calls.

    Owned by the dispatcher thread; not meant to be shared across threads.
    """

    def __init__(self, sessions: sessionmaker) -> None:
        self._sessions = sessions

    @classmethod
    def from_engine(cls, engine: Engine) -> "Store":
        return cls(make_session_factory(engine))

    @contextmanager
    def _unit(self) -> Iterator[Session]:
        with self._sessions() as db:
            try:
                with transactional(db):
                    yield db
            except IntegrityError as e:
                # The read-then-insert path should make this impossible with a single writer.
                logger.error("Integrity failure: %s", e.orig)
                raise ConstraintViolation(str(e.orig)) from e

    # ---------- mutations ----------

    def upsert_media(self, file_reference: str, kind: MediaKind) -> int:
        identity = MediaIdentity(file_reference=file_reference, kind=kind)
        with self._unit() as db:
            return SqlAlchemyMediaRepo(db).upsert_media(identity)

    def upsert_tag(self, media_id: int, tag_text: str) -> int:
        with self._unit() as db:
            return TagRepo(db).upsert_tag(media_id, tag_text)

    def record_access(self, media_id: int, owner_id: int, owner_kind: OwnerKind) -> Access:
        with self._unit() as db:
            return SqlAlchemyAccessRepo(db).record(media_id=media_id, owner_id=owner_id, owner_kind=OwnerKind(owner_kind))

    def bump_tag_counter(self, media_id: int, tag_prefix: str) -> int:
        with self._unit() as db:
            n = TagRepo(db).bump_counter(media_id, tag_prefix)
        logger.debug("Bumped %d tag(s) on media_id %s for prefix %r", n, media_id, tag_prefix)
        return n

    # ---------- reads ----------

    def query_media(self, *, limit: Optional[int] = None) -> List[Media]:
        with self._unit() as db:
            return MediaQueryRepo(db).list_ranked(limit=limit)

    def query_media_by_tag_prefix(self, prefix: str, *, limit: Optional[int] = None) -> List[Media]:
        with self._unit() as db:
            return MediaQueryRepo(db).list_ranked_by_tag_prefix(prefix, limit=limit)

    def fetch_media_by_id(self, media_id: int) -> Media:
        if not ID_MIN <= media_id <= ID_MAX:
            raise NotFound(f"media {media_id} not found")
        with self._unit() as db:
            media = SqlAlchemyMediaRepo(db).get_by_id(media_id)
        if media is None:
            raise NotFound(f"media {media_id} not found")
        return media

    def tags_for_media(self, media_id: int) -> List[Tag]:
        with self._unit() as db:
            return TagRepo(db).list_for_media(media_id)

    def access_for_media(self, media_id: int) -> List[Access]:
        with self._unit() as db:
            return SqlAlchemyAccessRepo(db).list_by_media(media_id)
