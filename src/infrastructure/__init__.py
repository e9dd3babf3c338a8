"""
Infrastructure layer - external service integrations.

- storage: local disk and S3-compatible object storage

These wrappers translate between external formats and our domain models.
"""
