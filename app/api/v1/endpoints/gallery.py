"""Installation gallery.

- GET /api/v1/gallery → Projects parsed from installation photo filenames
"""

from pathlib import Path

from fastapi import APIRouter

from app.core.config import settings
from app.services.project_parser import (
    load_gallery,
    estimated_savings,
    project_description,
    project_tags,
)

router = APIRouter()


def _photo_out(photo) -> dict:
    return {"filename": photo.filename, "path": photo.path, "photoNumber": photo.photo_number}


@router.get("/gallery")
async def gallery():
    projects = load_gallery(Path(settings.GALLERY_DIR))
    return [
        {
            "id": p.id,
            "customerName": p.customer_name,
            "location": p.location,
            "systemSize": p.system_size,
            "installDate": p.install_date,
            "estimatedSavings": estimated_savings(p.system_size),
            "description": project_description(p),
            "tags": project_tags(p),
            "mainPhoto": _photo_out(p.main_photo),
            "additionalPhotos": [_photo_out(photo) for photo in p.additional_photos],
        }
        for p in projects
    ]
