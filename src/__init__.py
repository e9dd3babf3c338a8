"""
Upload storage service for the learning platform.

This package contains the complete application:
- core: Object keys and the storage error taxonomy
- infrastructure: Local disk and remote object store tiers
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
