"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, health, shipments, users

api_router = APIRouter()

# Liveness
api_router.include_router(health.router)

# Auth (register, login, current user)
api_router.include_router(auth.router)

# User listings & account management
api_router.include_router(users.router)

# Shipments, tracking, driver assignment
api_router.include_router(shipments.router)
