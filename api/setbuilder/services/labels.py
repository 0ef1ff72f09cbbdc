"""Fixed lookup tables resolved at the presentation boundary."""

from typing import Dict

REQUESTERS: Dict[int, str] = {
    8: "Andreas",
    47: "Emily",
    2: "Kristin",
    60: "Katrin",
    9: "Tino",
}

UNKNOWN_REQUESTER = "Unbekannt"

SET_LABELS: Dict[str, str] = {
    "423;476": "Backofen-Set",
    "423;428": "Herdset",
    "430;432": "Spülenset",
    "mikrowellenset": "Mikrowellenset",
}


def requester_name(requester_id: int, requesters: Dict[int, str] = REQUESTERS) -> str:
    """Display name for a requester ID."""
    return requesters.get(int(requester_id), UNKNOWN_REQUESTER)


def set_label(set_type: str, labels: Dict[str, str] = SET_LABELS) -> str:
    """Human label for a set type token; unknown tokens pass through."""
    return labels.get(set_type, set_type)
