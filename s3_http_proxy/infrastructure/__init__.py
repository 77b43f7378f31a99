"""
Infrastructure layer - external service integrations.

- storage: Object storage (S3-compatible, via boto3)

These wrappers translate between boto3 responses and our own types.
"""
