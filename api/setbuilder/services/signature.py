"""Duplicate detection by component signature.

A set's signature is its component variant IDs sorted numerically and
comma-joined. Repeats are kept, so ``[7, 7, 14]`` and ``[7, 14, 14]`` have
different signatures while any permutation of one multiset has the same one.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from setbuilder.models.set_job import SetJob
from setbuilder.models.set_job_item import SetJobItem

logger = logging.getLogger(__name__)

MIN_COMPONENTS = 2

# Arbitrary constant shared by every writer of set_job_items
SIGNATURE_LOCK_KEY = 73052211


class DuplicateMatch(BaseModel):
    """Existing job with the same signature."""

    job_id: int
    new_variant_id: Optional[int] = None


def positive_variant_ids(variant_ids: Iterable) -> List[int]:
    """Keep strictly positive integer IDs in input order (repeats kept)."""
    out = []
    for value in variant_ids:
        try:
            vid = int(value)
        except (TypeError, ValueError):
            continue
        if vid > 0:
            out.append(vid)
    return out


def normalize_variant_ids(variant_ids: Iterable) -> List[int]:
    """Positive IDs sorted numerically; this order is only used for comparison."""
    return sorted(positive_variant_ids(variant_ids))


def build_signature(variant_ids: Iterable) -> str:
    """Comma-joined canonical signature, e.g. ``"7,7,14"``."""
    return ",".join(str(v) for v in normalize_variant_ids(variant_ids))


def lock_signatures(db: Session) -> None:
    """Serialize duplicate checks with their writes for the current transaction.

    PostgreSQL only; the advisory lock is released on commit or rollback.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": SIGNATURE_LOCK_KEY})


def find_duplicate(
    db: Session,
    candidate_variant_ids: Iterable,
    exclude_job_id: Optional[int] = None,
) -> Optional[DuplicateMatch]:
    """
    Find an existing set job with the same component multiset.

    Args:
        db: Database session
        candidate_variant_ids: Requested component IDs in any order
        exclude_job_id: Job to ignore (the job being edited)

    Returns:
        First matching job, or None. Candidates with fewer than two positive
        IDs never match.
    """
    normalized = normalize_variant_ids(candidate_variant_ids)
    if len(normalized) < MIN_COMPONENTS:
        return None

    needle = ",".join(str(v) for v in normalized)

    same_size = db.query(SetJobItem.set_job_id).group_by(SetJobItem.set_job_id).having(
        func.count(SetJobItem.id) == len(normalized)
    )
    if exclude_job_id:
        same_size = same_size.filter(SetJobItem.set_job_id != exclude_job_id)
    job_ids = [row[0] for row in same_size.all()]
    if not job_ids:
        return None

    components: Dict[int, List[int]] = defaultdict(list)
    rows = db.query(SetJobItem.set_job_id, SetJobItem.variant_id).filter(
        SetJobItem.set_job_id.in_(job_ids)
    ).all()
    for job_id, variant_id in rows:
        components[job_id].append(variant_id)

    for job_id in sorted(components):
        if build_signature(components[job_id]) == needle:
            job = db.query(SetJob).filter(SetJob.id == job_id).first()
            logger.info(f"Duplicate set signature {needle} matches job {job_id}")
            return DuplicateMatch(
                job_id=job_id,
                new_variant_id=job.new_variant_id if job else None,
            )

    return None
