from fastapi import APIRouter
from app.api.v1.endpoints import (
    splash_leads,
    bill_upload,
    contact,
    facebook_conversions,
    gallery,
    crm_leads,
    crm_projects,
    crm_candidates,
    crm_photos,
    crm_import,
    integrations,
)

api_router = APIRouter()
api_router.include_router(splash_leads.router, tags=["leads"])
api_router.include_router(bill_upload.router, tags=["uploads"])
api_router.include_router(contact.router, tags=["contact"])
api_router.include_router(facebook_conversions.router, tags=["conversions"])
api_router.include_router(gallery.router, tags=["gallery"])
api_router.include_router(crm_leads.router, tags=["crm"])
api_router.include_router(crm_projects.router, tags=["crm"])
api_router.include_router(crm_candidates.router, tags=["crm"])
api_router.include_router(crm_photos.router, tags=["crm"])
api_router.include_router(crm_import.router, tags=["crm"])
api_router.include_router(integrations.router, tags=["integrations"])
