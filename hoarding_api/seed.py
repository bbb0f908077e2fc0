"""Demo fixture set: five users, their profiles, hoardings, assignments,
photos, contracts and invoices. Every run wipes the tables and reinserts
the same rows under the same ids."""
import logging
import os
import uuid
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api.config import settings
from hoarding_api.models import (
    Assignment,
    Billing,
    ClientProfile,
    Contract,
    Counter,
    Hoarding,
    Photo,
    PhotographerProfile,
    User,
)
from hoarding_api.models.enums import (
    AssignmentStatus,
    ContractStatus,
    HoardingStatus,
    PaymentStatus,
    PhotoStatus,
    ProfileStatus,
    Role,
)
from hoarding_api.services.security import hash_password
from hoarding_api.services.storage import URL_PREFIX
from hoarding_api.utils.dates import to_iso, utcnow

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"

# Children before parents.
CLEAR_ORDER = (Photo, Billing, Contract, Assignment, Hoarding, ClientProfile, PhotographerProfile, User, Counter)


def seed_id(name: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_DNS, f"hoarding-api-{name}"))


OWNER_ID = seed_id("user-owner")
PHOTOGRAPHER_ID = seed_id("user-photographer")
CLIENT_ID = seed_id("user-client")
SECOND_PHOTOGRAPHER_ID = seed_id("user-photographer-2")
SECOND_CLIENT_ID = seed_id("user-client-2")

SEED_USERS = [
    {"id": OWNER_ID, "name": "Om Prakash", "email": "om@gmail.com", "role": Role.OWNER,
     "phone": "+91 98765 43210", "location": "Mumbai"},
    {"id": PHOTOGRAPHER_ID, "name": "Photo Grapher", "email": "photo@gmail.com", "role": Role.PHOTOGRAPHER,
     "phone": "+91 87654 32109", "location": "Delhi"},
    {"id": CLIENT_ID, "name": "Client User", "email": "client@gmail.com", "role": Role.CLIENT,
     "phone": "+91 76543 21098", "location": "Bangalore"},
    {"id": SECOND_PHOTOGRAPHER_ID, "name": "John Photographer", "email": "john@gmail.com",
     "role": Role.PHOTOGRAPHER, "phone": "+91 89654 33109", "location": "Chennai"},
    {"id": SECOND_CLIENT_ID, "name": "Acme Advertising", "email": "acme@gmail.com", "role": Role.CLIENT,
     "phone": "+91 76543 98765", "location": "Hyderabad"},
]

SEED_PHOTOGRAPHER_PROFILES = [
    {"id": seed_id("photographer-profile-1"), "user_id": PHOTOGRAPHER_ID, "assigned_hoardings": 3,
     "photos_uploaded": 15,
     "bio": "Professional photographer with 5+ years experience in outdoor advertising photography."},
    {"id": seed_id("photographer-profile-2"), "user_id": SECOND_PHOTOGRAPHER_ID, "assigned_hoardings": 2,
     "photos_uploaded": 8,
     "bio": "Specializing in urban billboard photography with excellent editing skills."},
]

SEED_CLIENT_PROFILES = [
    {"id": seed_id("client-profile-1"), "user_id": CLIENT_ID, "contact_person": "John Smith",
     "hoardings_count": 2, "contracts_count": 2},
    {"id": seed_id("client-profile-2"), "user_id": SECOND_CLIENT_ID, "contact_person": "Sarah Johnson",
     "hoardings_count": 1, "contracts_count": 1},
]

# (name, address, city, state, zip, lat, lng, width, height, daily rate)
SEED_HOARDINGS = [
    ("MG Road Billboard", "MG Road, Near Metro Station", "Bangalore", "Karnataka", "560001",
     12.9716, 77.5946, 30, 20, 5000),
    ("Highway Digital Board", "NH-48, Near Toll Plaza", "Mumbai", "Maharashtra", "400001",
     19.0760, 72.8777, 40, 15, 7500),
    ("Airport Hoarding", "Airport Road, Near Terminal 3", "Delhi", "Delhi", "110001",
     28.5355, 77.2510, 50, 25, 10000),
    ("Central Mall Display", "Central Mall, Main Road", "Chennai", "Tamil Nadu", "600001",
     13.0827, 80.2707, 35, 18, 6500),
    ("Railway Station Display", "Main Railway Station, Platform 1", "Hyderabad", "Telangana", "500001",
     17.3850, 78.4867, 25, 15, 4500),
]

# (hoarding index, photographer, due in days, notes, status)
SEED_ASSIGNMENTS = [
    (0, PHOTOGRAPHER_ID, 7, "Take photos of the new advertisement for Coca Cola", AssignmentStatus.ASSIGNED),
    (1, PHOTOGRAPHER_ID, 3, "Capture the new Samsung billboard from different angles", AssignmentStatus.IN_PROGRESS),
    (2, PHOTOGRAPHER_ID, -2, "Take photos at night to show illumination", AssignmentStatus.COMPLETED),
    (3, SECOND_PHOTOGRAPHER_ID, 5, "Take wide-angle photos during peak traffic hours", AssignmentStatus.ASSIGNED),
    (4, SECOND_PHOTOGRAPHER_ID, -5, "Capture during morning rush hour", AssignmentStatus.COMPLETED),
]

# (hoarding index, client, start offset days, end offset days, amount, status, terms)
SEED_CONTRACTS = [
    (0, CLIENT_ID, 0, 30, 150000, ContractStatus.ACTIVE, "Standard terms and conditions apply."),
    (1, CLIENT_ID, 10, 40, 225000, ContractStatus.PENDING, "Payment must be made in advance."),
    (2, SECOND_CLIENT_ID, -15, 15, 300000, ContractStatus.ACTIVE, "Premium location with guaranteed visibility."),
]

# (contract index, amount, status, due offset days, paid offset days, method, transaction, notes)
SEED_INVOICES = [
    (0, 150000, PaymentStatus.PENDING, 15, None, None, None, "Please pay by bank transfer"),
    (1, 225000, PaymentStatus.PENDING, 5, None, None, None, "Payment must be made before the contract starts"),
    (2, 150000, PaymentStatus.PAID, -20, -18, "Credit Card", "TXID12345678", "First installment"),
    (2, 150000, PaymentStatus.OVERDUE, -5, None, None, None, "Second installment"),
]

PHOTOS_PER_STATUS = {AssignmentStatus.COMPLETED: 3, AssignmentStatus.IN_PROGRESS: 2}


def _placeholder(folder: str, filename: str, content: bytes) -> str:
    directory = os.path.join(settings.upload_dir, folder)
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, filename)
    if not os.path.exists(path):
        with open(path, "wb") as f:
            f.write(content)
    return f"{URL_PREFIX}/{folder}/{filename}"


def _hoardings() -> list[Hoarding]:
    hoardings = []
    for index, (name, address, city, state, zip_code, lat, lng, width, height, rate) in enumerate(SEED_HOARDINGS, 1):
        image = _placeholder("hoardings", f"hoarding-{index}.jpg", b"placeholder image")
        hoardings.append(Hoarding(
            id=seed_id(f"hoarding-{index}"),
            hoarding_number=f"H-2023-{index:04d}",
            name=name,
            address=address,
            city=city,
            state=state,
            country="India",
            zip_code=zip_code,
            latitude=lat,
            longitude=lng,
            width=width,
            height=height,
            unit="feet",
            daily_rate=rate,
            status=HoardingStatus.ACTIVE.value,
            images=[image],
            owner_id=OWNER_ID,
        ))
    return hoardings


def _photos(assignments: list[Assignment]) -> list[Photo]:
    now = utcnow()
    photos = []
    counter = 0
    for assignment in assignments:
        per_assignment = PHOTOS_PER_STATUS.get(AssignmentStatus(assignment.status), 0)
        completed = assignment.status == AssignmentStatus.COMPLETED.value
        for i in range(1, per_assignment + 1):
            counter += 1
            filename = f"photo-{counter}.jpg"
            photos.append(Photo(
                id=seed_id(f"photo-{counter}"),
                file_name=filename,
                file_path=_placeholder("photos", filename, b"placeholder photo"),
                hoarding_id=assignment.hoarding_id,
                uploaded_by_id=assignment.photographer_id,
                assignment_id=assignment.id,
                taken_at=to_iso(now - timedelta(days=counter)),
                size=1_000_000 + counter * 250_000,
                width=1920,
                height=1080,
                format="jpg",
                caption=f"{'Photo' if completed else 'In-progress photo'} {i} of hoarding {assignment.hoarding_id}",
                status=(PhotoStatus.APPROVED if completed else PhotoStatus.PENDING).value,
            ))
    return photos


async def clear_data(session: AsyncSession) -> None:
    for model in CLEAR_ORDER:
        await session.execute(delete(model))


async def seed_data(session: AsyncSession) -> None:
    await clear_data(session)
    now = utcnow()

    password_hash = hash_password(SEED_PASSWORD)
    for user in SEED_USERS:
        session.add(User(**{**user, "role": user["role"].value}, password_hash=password_hash))

    for profile in SEED_PHOTOGRAPHER_PROFILES:
        session.add(PhotographerProfile(status=ProfileStatus.ACTIVE.value, **profile))
    for profile in SEED_CLIENT_PROFILES:
        session.add(ClientProfile(status=ProfileStatus.ACTIVE.value, **profile))

    hoardings = _hoardings()
    session.add_all(hoardings)

    assignments = [
        Assignment(
            id=seed_id(f"assignment-{index}"),
            hoarding_id=hoardings[hoarding_index].id,
            photographer_id=photographer_id,
            assigned_by_id=OWNER_ID,
            due_date=to_iso(now + timedelta(days=due_in)),
            notes=notes,
            status=status.value,
        )
        for index, (hoarding_index, photographer_id, due_in, notes, status) in enumerate(SEED_ASSIGNMENTS, 1)
    ]
    session.add_all(assignments)
    session.add_all(_photos(assignments))

    contracts = [
        Contract(
            id=seed_id(f"contract-{index}"),
            contract_number=f"CON-2023-{index:04d}",
            hoarding_id=hoardings[hoarding_index].id,
            client_id=client_id,
            owner_id=OWNER_ID,
            start_date=to_iso(now + timedelta(days=start)),
            end_date=to_iso(now + timedelta(days=end)),
            total_amount=amount,
            status=status.value,
            terms_and_conditions=terms,
        )
        for index, (hoarding_index, client_id, start, end, amount, status, terms) in enumerate(SEED_CONTRACTS, 1)
    ]
    session.add_all(contracts)

    for index, (contract_index, amount, status, due, paid, method, txid, notes) in enumerate(SEED_INVOICES, 1):
        contract = contracts[contract_index]
        session.add(Billing(
            id=seed_id(f"invoice-{index}"),
            invoice_number=f"INV-2023-{index:04d}",
            contract_id=contract.id,
            client_id=contract.client_id,
            owner_id=OWNER_ID,
            amount=amount,
            payment_status=status.value,
            due_date=to_iso(now + timedelta(days=due)),
            payment_date=to_iso(now + timedelta(days=paid)) if paid is not None else None,
            payment_method=method,
            transaction_id=txid,
            notes=notes,
        ))

    await session.commit()
    logger.info(
        "Seeded %d users, %d hoardings, %d assignments, %d contracts, %d invoices",
        len(SEED_USERS), len(hoardings), len(assignments), len(contracts), len(SEED_INVOICES),
    )
