from __future__ import annotations
from enum import StrEnum

class ActionKind(StrEnum):
    tag = "tag"
