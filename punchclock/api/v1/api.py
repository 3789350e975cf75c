"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from punchclock.api.v1.endpoints import attendance, auth, health, policy, users

api_router = APIRouter()

# Auth (login, user registration)
api_router.include_router(auth.router)

# Directory (profile, scoped listing)
api_router.include_router(users.router)

# Policy must be registered before the parameterised attendance routes
api_router.include_router(policy.router)

# Punch, listing, corrections
api_router.include_router(attendance.router)

# Health
api_router.include_router(health.router)
