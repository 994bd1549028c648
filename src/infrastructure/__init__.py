"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (B2/S3)
- media: FFmpeg and Pillow

These wrappers translate between external formats and our domain models.
"""
