"""
commerce_cms

Top-level package for the content/commerce backend.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; the Celery worker imports this package too.
