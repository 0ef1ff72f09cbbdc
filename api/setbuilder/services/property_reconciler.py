"""Merge per-component property strings into one set-level property list.

Property strings look like ``"6=A;7=Einbaugerät;42=Weiß"``. A set inherits a
value only when exactly one component carries the property and that
component assigns it once; everything else is left empty for the ERP to
decide.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel


class PropertyComponent(BaseModel):
    """Raw property strings of one component."""

    item_properties: Optional[str] = None
    variation_properties: Optional[str] = None


class ReconciledProperties(BaseModel):
    """Parallel id/value lists of equal length."""

    ids: List[str]
    values: List[str]
    occurrences: Dict[str, int]
    conflicted: Set[str]

    def joined_ids(self) -> str:
        return ";".join(self.ids)

    def joined_values(self) -> str:
        return ";".join(self.values)


def merge_property_strings(item_properties: Optional[str], variation_properties: Optional[str]) -> str:
    """Item-level first, then variation-level; either may be absent."""
    item_raw = item_properties or ""
    variation_raw = variation_properties or ""
    if item_raw.strip() and variation_raw.strip():
        return f"{item_raw};{variation_raw}"
    return item_raw or variation_raw


def parse_property_pairs(raw: str, ignored_ids: Iterable[str] = ()) -> List[Tuple[str, str]]:
    """Split ``id=value`` pairs on ``;`` and the first ``=``, dropping ignored ids."""
    ignored = {str(pid) for pid in ignored_ids}
    pairs = []
    for piece in raw.split(";"):
        piece = piece.strip()
        if not piece or "=" not in piece:
            continue
        prop_id, value = piece.split("=", 1)
        prop_id = prop_id.strip()
        if not prop_id or prop_id in ignored:
            continue
        pairs.append((prop_id, value))
    return pairs


def sort_property_ids(prop_ids: Iterable[str]) -> List[str]:
    """Numeric order if every id is all ASCII digits, otherwise lexicographic."""
    prop_ids = list(prop_ids)
    if all(pid.isascii() and pid.isdigit() for pid in prop_ids):
        return sorted(prop_ids, key=int)
    return sorted(prop_ids)


def reconcile_properties(
    components: Sequence[PropertyComponent],
    ignored_ids: Iterable = (),
) -> ReconciledProperties:
    """
    Reconcile property ids and values across the components of one set.

    Args:
        components: Property strings per component, in component order
        ignored_ids: Property ids that are neither counted nor emitted

    Returns:
        Sorted ids with a value where the id occurs in exactly one component
        and is assigned only once there, an empty string otherwise.
    """
    ignored = [str(pid) for pid in ignored_ids]
    occurrences: Dict[str, int] = {}
    first_values: Dict[str, List[str]] = {}
    conflicted: Set[str] = set()

    for component in components:
        merged = merge_property_strings(component.item_properties, component.variation_properties)
        component_values: Dict[str, str] = {}
        for prop_id, value in parse_property_pairs(merged, ignored):
            if prop_id in component_values:
                conflicted.add(prop_id)
            else:
                component_values[prop_id] = value

        for prop_id, value in component_values.items():
            occurrences[prop_id] = occurrences.get(prop_id, 0) + 1
            first_values.setdefault(prop_id, []).append(value)

    ids = sort_property_ids(occurrences)
    values = []
    for prop_id in ids:
        if occurrences[prop_id] == 1 and prop_id not in conflicted:
            values.append(first_values[prop_id][0])
        else:
            values.append("")

    return ReconciledProperties(
        ids=ids,
        values=values,
        occurrences=occurrences,
        conflicted=conflicted,
    )
