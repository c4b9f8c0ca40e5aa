# mehu/database/models/__init__.py

from mehu.database.models.media import (
    Base,
    Media,
)
from mehu.database.models.taxonomy import (
    Tag,
)
from mehu.database.models.access import (
    Access,
)

__all__ = [
    "Base",
    "Media",
    "Tag",
    "Access",
]
