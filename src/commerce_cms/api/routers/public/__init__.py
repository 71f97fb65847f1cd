"""
commerce_cms.api.routers.public

Public read API (posts, products, current user), gated by maintenance mode.
"""

from __future__ import annotations

from fastapi import APIRouter

from commerce_cms.api.routers.public import posts, products, users

router = APIRouter()

router.include_router(posts.router)
router.include_router(products.router)
router.include_router(users.router)
