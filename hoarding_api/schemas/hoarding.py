from pydantic import Field

from hoarding_api.models.enums import HoardingStatus
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.schemas.base import CamelModel


class Coordinates(CamelModel):
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class Location(CamelModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    coordinates: Coordinates | None = None


class Size(CamelModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    unit: str = "feet"


class RemoveImageRequest(CamelModel):
    image_path: str


class HoardingResponse(CamelModel):
    id: str
    hoarding_number: str
    name: str
    location: Location
    size: Size
    daily_rate: float
    status: HoardingStatus
    images: list[str]
    owner_id: str
    created_at: str
    updated_at: str

    @classmethod
    def serialize(cls, obj: Hoarding) -> dict:
        return super().serialize({
            "id": obj.id,
            "hoarding_number": obj.hoarding_number,
            "name": obj.name,
            "location": {
                "address": obj.address,
                "city": obj.city,
                "state": obj.state,
                "country": obj.country,
                "zip_code": obj.zip_code,
                "coordinates": {"latitude": obj.latitude, "longitude": obj.longitude},
            },
            "size": {"width": obj.width, "height": obj.height, "unit": obj.unit},
            "daily_rate": obj.daily_rate,
            "status": obj.status,
            "images": list(obj.images or []),
            "owner_id": obj.owner_id,
            "created_at": obj.created_at,
            "updated_at": obj.updated_at,
        })


def location_columns(location: Location) -> dict:
    coordinates = location.coordinates or Coordinates()
    return {
        "address": location.address,
        "city": location.city,
        "state": location.state,
        "country": location.country,
        "zip_code": location.zip_code,
        "latitude": coordinates.latitude,
        "longitude": coordinates.longitude,
    }


def size_columns(size: Size) -> dict:
    return {"width": size.width, "height": size.height, "unit": size.unit}
