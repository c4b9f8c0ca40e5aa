from typing import List


def csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [s.strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


def words_to_tags(v: str | None) -> List[str]:
    """Whitespace-tokenize free text into lower-cased tags, dropping empties."""
    if not v:
        return []
    return [w.lower() for w in v.split() if w.strip()]
