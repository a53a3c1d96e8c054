from __future__ import annotations

from fastapi import APIRouter

from stayrules.api.routes import admin_occupancy, admin_stay_rules, public

api_router = APIRouter()

api_router.include_router(public.router, prefix="/public/properties", tags=["public"])

# Admin
api_router.include_router(admin_stay_rules.router, prefix="/admin/properties", tags=["admin-stay-rules"])
api_router.include_router(admin_occupancy.router, prefix="/admin/properties", tags=["admin-occupancy"])
