"""
commerce_cms.api.routers.admin

Admin router aggregator. Every route below requires role ADMIN.
"""

from __future__ import annotations

from fastapi import APIRouter

from commerce_cms.api.routers.admin import maintenance, posts, products

router = APIRouter()

router.include_router(posts.router)
router.include_router(products.router)
router.include_router(maintenance.router)
