"""Infrastructure layer - External dependencies and implementations.

This layer contains all external dependencies including:
- Document storage adapters (S3 via boto3, local filesystem, memory)
- Persistence of the schema registry and record collections on top of them
"""
