# clinic_app/api/router.py
from fastapi import APIRouter
from clinic_app.api import (
    routes_billing,
    routes_patients,
    routes_prescriptions,
    routes_settings,
)

api_router = APIRouter()

api_router.include_router(routes_patients.router)
api_router.include_router(routes_billing.router)
api_router.include_router(routes_prescriptions.router)
api_router.include_router(routes_settings.router)
