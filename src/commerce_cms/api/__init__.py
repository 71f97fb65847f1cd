"""
commerce_cms.api

HTTP layer: app factory, dependencies and routers.
"""
