from datetime import datetime

from pydantic import Field, model_validator

from hoarding_api.models.enums import ContractStatus
from hoarding_api.schemas.base import CamelModel


class ContractCreate(CamelModel):
    hoarding: str
    client: str
    start_date: datetime
    end_date: datetime
    total_amount: float = Field(gt=0)
    terms_and_conditions: str | None = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class ContractUpdate(CamelModel):
    status: ContractStatus | None = None
    total_amount: float | None = Field(default=None, gt=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    terms_and_conditions: str | None = None


class ContractResponse(CamelModel):
    id: str
    contract_number: str
    hoarding_id: str
    client_id: str
    owner_id: str
    start_date: str
    end_date: str
    total_amount: float
    status: ContractStatus
    terms_and_conditions: str | None = None
    created_at: str
    updated_at: str
