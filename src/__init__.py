"""
Bucket Browser - a web file manager for a B2/S3 bucket.

This package contains the complete application:
- core: Framework-agnostic listing, upload and thumbnail logic
- infrastructure: Object storage, FFmpeg and Pillow integrations
- api: FastAPI routes, templates and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
