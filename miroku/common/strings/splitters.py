from typing import List


def csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [s.strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


def normalize_name(s: str | None) -> str:
    """Collapse inner whitespace and trim; names are otherwise kept as typed."""
    return " ".join((s or "").split())
