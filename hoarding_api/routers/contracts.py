import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.contract import Contract
from hoarding_api.models.enums import ContractStatus, Role
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.profile import ClientProfile
from hoarding_api.models.user import User
from hoarding_api.schemas.contract import ContractCreate, ContractResponse, ContractUpdate
from hoarding_api.schemas.hoarding import HoardingResponse
from hoarding_api.schemas.user import UserResponse
from hoarding_api.services.numbering import CONTRACT_TAG, next_number
from hoarding_api.utils.dates import to_iso
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404, validate_id
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["contracts"])


async def _load_client(db: AsyncSession, client_id: str) -> User:
    validate_id(client_id, "client")
    client = await db.get(User, client_id)
    if client is None or client.role != Role.CLIENT.value:
        raise AppException("Client not found", status_code=404)
    return client


async def _load_readable(db: AsyncSession, current_user: User, contract_id: str) -> Contract:
    contract = await get_or_404(db, Contract, contract_id, "Contract")
    await policy.authorize(db, current_user, "contract", "read", contract, "You don't have access to this contract")
    return contract


@router.post("", status_code=201)
async def create_contract(
    payload: ContractCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, payload.hoarding, "Hoarding")
    client = await _load_client(db, payload.client)

    policy.require(current_user, "contract", "create", "Only owners can create contracts")
    await policy.authorize(
        db, current_user, "hoarding", "update", hoarding,
        "You can only contract your own hoardings",
    )

    contract = Contract(
        id=str(uuid.uuid4()),
        contract_number=await next_number(db, CONTRACT_TAG),
        hoarding_id=hoarding.id,
        client_id=client.id,
        owner_id=current_user.id,
        start_date=to_iso(payload.start_date),
        end_date=to_iso(payload.end_date),
        total_amount=payload.total_amount,
        status=ContractStatus.PENDING.value,
        terms_and_conditions=payload.terms_and_conditions,
    )
    db.add(contract)

    result = await db.execute(select(ClientProfile).where(ClientProfile.user_id == client.id))
    profile = result.scalars().first()
    if profile is not None:
        profile.contracts_count += 1

    await db.commit()
    await db.refresh(contract)

    logger.info("Contract %s created for client %s", contract.contract_number, client.id)
    return success_response(
        data=ContractResponse.serialize(contract),
        message="Contract created successfully",
        status_code=201,
    )


@router.get("")
async def list_contracts(
    status: ContractStatus | None = None,
    client_id: str | None = Query(default=None, alias="clientId"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters = policy.scope(current_user, "contract", "read", "You don't have permission to view contracts")
    if status:
        filters.append(Contract.status == status.value)
    if client_id:
        filters.append(Contract.client_id == client_id)

    result = await db.execute(select(Contract).where(*filters).order_by(Contract.created_at.desc()))
    data = [ContractResponse.serialize(c) for c in result.scalars().all()]
    return success_response(data=data, message="Contracts fetched successfully")


@router.get("/{contract_id}")
async def get_contract(
    contract_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    contract = await _load_readable(db, current_user, contract_id)
    return success_response(data=ContractResponse.serialize(contract), message="Contract fetched successfully")


@router.put("/{contract_id}")
async def update_contract(
    contract_id: str,
    payload: ContractUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    contract = await get_or_404(db, Contract, contract_id, "Contract")
    await policy.authorize(
        db, current_user, "contract", "update", contract,
        "You don't have permission to update this contract",
    )

    start_date = to_iso(payload.start_date) if payload.start_date else contract.start_date
    end_date = to_iso(payload.end_date) if payload.end_date else contract.end_date
    if end_date < start_date:
        raise AppException("endDate must not be before startDate", status_code=400)

    if payload.status:
        contract.status = payload.status.value
    if payload.total_amount:
        contract.total_amount = payload.total_amount
    contract.start_date = start_date
    contract.end_date = end_date
    if payload.terms_and_conditions:
        contract.terms_and_conditions = payload.terms_and_conditions

    await db.commit()
    await db.refresh(contract)
    return success_response(data=ContractResponse.serialize(contract), message="Contract updated successfully")


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    contract = await get_or_404(db, Contract, contract_id, "Contract")
    await policy.authorize(
        db, current_user, "contract", "delete", contract,
        "You don't have permission to delete this contract",
    )

    await db.delete(contract)
    await db.commit()
    return success_response(message="Contract deleted successfully")


@router.get("/{contract_id}/download")
async def download_contract(
    contract_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    contract = await _load_readable(db, current_user, contract_id)
    hoarding = await db.get(Hoarding, contract.hoarding_id)
    client = await db.get(User, contract.client_id)
    owner = await db.get(User, contract.owner_id)

    data = {
        "contract": ContractResponse.serialize(contract),
        "hoarding": HoardingResponse.serialize(hoarding) if hoarding else None,
        "client": UserResponse.serialize(client) if client else None,
        "owner": UserResponse.serialize(owner) if owner else None,
    }
    return success_response(data=data, message="Contract details for PDF generation")
