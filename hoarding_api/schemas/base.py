from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from hoarding_api.utils.exceptions import AppException


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @classmethod
    def serialize(cls, obj: Any) -> dict:
        return cls.model_validate(obj).model_dump(by_alias=True, mode="json")


def parse_payload(model: type[BaseModel], data: Any, label: str = "request data"):
    """Validate data that arrived outside a JSON body (form fields, embedded JSON strings)."""
    try:
        if isinstance(data, (str, bytes)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        raise AppException(f"Invalid {label}", status_code=400, error=errors)
