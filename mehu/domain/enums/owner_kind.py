from __future__ import annotations
from enum import StrEnum

class OwnerKind(StrEnum):
    user = "user"
    group = "group"
