"""
commerce_cms.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) decoded from a bearer token.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, before the user row is loaded.
    """

    user_id: int
    role: str
