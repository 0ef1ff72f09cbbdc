"""Set job schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SetJobStatus:
    """Set job status values."""

    OPEN = "open"
    WAITING_FOR_COMPONENTS = "waiting_for_components"
    COMPONENTS_ADDED = "components_added"
    ERROR = "error"


class SetJobBase(BaseModel):
    """Fields an operator supplies for a set job."""

    requested_by: int = Field(..., description="Requester ID")
    set_type: str = Field(..., description="Set type token, e.g. '423;476' or 'mikrowellenset'")
    variant_ids: List[int] = Field(
        ...,
        description="Component variant IDs in reassembly order (repeats allowed)",
    )


class SetJobCreateRequest(SetJobBase):
    """Request to create a set job."""

    pass


class SetJobUpdateRequest(SetJobBase):
    """Request to replace a set job's header and component list."""

    pass


class SetJobResponse(BaseModel):
    """Set job with its ordered components."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    requested_by_id: int
    requested_by: str = Field(..., description="Resolved requester name")
    set_type: str
    set_label: str
    status: Optional[str]
    new_item_id: Optional[int]
    new_variant_id: Optional[int]
    barcode: Optional[str]
    error_message: Optional[str]
    variant_ids: List[int]
    created_at: datetime
    updated_at: datetime


class SetJobListResponse(BaseModel):
    """All set jobs plus the requester table for the form."""

    jobs: List[SetJobResponse]
    requesters: Dict[int, str]
