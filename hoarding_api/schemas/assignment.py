from datetime import datetime

from hoarding_api.models.enums import AssignmentStatus
from hoarding_api.schemas.base import CamelModel


class AssignmentCreate(CamelModel):
    hoarding_id: str
    photographer_id: str
    due_date: datetime
    notes: str | None = None


class AssignmentStatusUpdate(CamelModel):
    status: AssignmentStatus
    notes: str | None = None


class AssignmentResponse(CamelModel):
    id: str
    hoarding_id: str
    photographer_id: str
    assigned_by_id: str
    due_date: str
    notes: str | None = None
    status: AssignmentStatus
    created_at: str
    updated_at: str


class PhotographerStats(CamelModel):
    assigned: int
    in_progress: int
    completed: int
    assigned_hoardings: int
    pending_uploads: int
    due_soon: int
    locations: int
    photos_uploaded: int
    this_month: int
