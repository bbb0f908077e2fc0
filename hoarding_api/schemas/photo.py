from hoarding_api.models.enums import PhotoStatus
from hoarding_api.models.photo import Photo
from hoarding_api.schemas.base import CamelModel


class PhotoUpdate(CamelModel):
    caption: str | None = None
    status: PhotoStatus | None = None


class PhotoMetadata(CamelModel):
    size: int | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None


class PhotoResponse(CamelModel):
    id: str
    file_name: str
    file_path: str
    hoarding_id: str
    uploaded_by_id: str
    assignment_id: str | None = None
    taken_at: str
    metadata: PhotoMetadata
    caption: str | None = None
    status: PhotoStatus
    created_at: str
    updated_at: str

    @classmethod
    def serialize(cls, obj: Photo) -> dict:
        return super().serialize({
            "id": obj.id,
            "file_name": obj.file_name,
            "file_path": obj.file_path,
            "hoarding_id": obj.hoarding_id,
            "uploaded_by_id": obj.uploaded_by_id,
            "assignment_id": obj.assignment_id,
            "taken_at": obj.taken_at,
            "metadata": {
                "size": obj.size,
                "width": obj.width,
                "height": obj.height,
                "format": obj.format,
            },
            "caption": obj.caption,
            "status": obj.status,
            "created_at": obj.created_at,
            "updated_at": obj.updated_at,
        })
