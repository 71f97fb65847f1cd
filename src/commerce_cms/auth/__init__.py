"""
commerce_cms.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependencies (Principal, current user, role checks).
"""

# Package marker.
