"""
commerce_cms.storage

Upload storage package.
"""

# Package marker.
