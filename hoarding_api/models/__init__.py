from hoarding_api.models.user import User
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.assignment import Assignment
from hoarding_api.models.contract import Contract
from hoarding_api.models.billing import Billing
from hoarding_api.models.photo import Photo
from hoarding_api.models.profile import PhotographerProfile, ClientProfile
from hoarding_api.models.counter import Counter

__all__ = [
    "User",
    "Hoarding",
    "Assignment",
    "Contract",
    "Billing",
    "Photo",
    "PhotographerProfile",
    "ClientProfile",
    "Counter",
]
