from fastapi import APIRouter

from teambuilder.api.admin import router as admin_router
from teambuilder.api.companies import router as companies_router
from teambuilder.api.partnerships import router as partnerships_router
from teambuilder.api.users import router as users_router

api_router = APIRouter(prefix="/api")

api_router.include_router(admin_router)
api_router.include_router(companies_router)
api_router.include_router(users_router)
api_router.include_router(partnerships_router)
