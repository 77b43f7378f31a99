"""
S3 HTTP Proxy - serve objects from an S3-compatible bucket over plain HTTP.

This package contains the complete application:
- core: Framework-agnostic logic (content type resolution)
- infrastructure: Object storage integration (boto3)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
