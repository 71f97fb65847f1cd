"""
commerce_cms.cache

Response cache package (Redis).
"""

# Package marker.
