"""Set builder exception hierarchy."""

from typing import List, Optional


class SetBuilderError(Exception):
    """Base exception for set builder errors."""
    pass


class SetValidationError(SetBuilderError):
    """Request input is malformed or insufficient."""
    pass


class DuplicateSetError(SetBuilderError):
    """A set job with the same component multiset already exists."""

    def __init__(self, job_id: int, variant_ids: List[int], new_variant_id: Optional[int] = None):
        self.job_id = job_id
        self.variant_ids = variant_ids
        self.new_variant_id = new_variant_id
        message = (
            f"Set already exists (variant IDs: {', '.join(str(v) for v in variant_ids)}). "
            f"No new record created."
        )
        if new_variant_id:
            message += f" Set variant ID: {new_variant_id}"
        super().__init__(message)


class SetJobNotFoundError(SetBuilderError):
    """Set job not found."""
    pass


class InvalidSetJobStateError(SetBuilderError):
    """Set job is in invalid state for operation."""
    pass


class AggregationError(SetBuilderError):
    """Aggregation of one set job failed; the job moves to error."""
    pass


class InsufficientComponentsError(AggregationError):
    """Fewer than two components are stored for the job."""
    pass


class MissingComponentError(AggregationError):
    """A referenced variant has no component record."""

    def __init__(self, job_id: int, missing_ids: List[int]):
        self.job_id = job_id
        self.missing_ids = missing_ids
        super().__init__(
            f"Job {job_id}: variants not found: {', '.join(str(v) for v in missing_ids)}"
        )


class MissingBarcodeError(AggregationError):
    """The barcode pool has no unused barcode left."""
    pass


class UnexpectedAggregationError(AggregationError):
    """Any other failure while aggregating one job."""
    pass


class MissingPriceError(SetBuilderError):
    """A component has no usable minimum gross price; set price forced to 0."""

    def __init__(self, variant_ids: List[int]):
        self.variant_ids = variant_ids
        super().__init__(
            "No set price computed, missing minimum gross price for variants: "
            + ", ".join(str(v) for v in variant_ids)
        )


class ImportFileError(SetBuilderError):
    """Import file is missing or malformed."""
    pass


class ExportWriteError(SetBuilderError):
    """An export row could not be written; the run aborts."""
    pass
