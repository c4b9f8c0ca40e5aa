from mehu.domain.enums.action_kind import ActionKind
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind
__all__ = [
    "ActionKind",
    "MediaKind",
    "OwnerKind",
]
