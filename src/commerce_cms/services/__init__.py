"""
commerce_cms.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Coordinate DB writes with upload cleanup and job publishing.
"""

# Package marker.
