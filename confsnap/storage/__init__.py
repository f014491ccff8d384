"""
Blob storage backends for snapshots, indexes and history documents.
"""

from .base import BlobStore
from .local import LocalBlobStore
from .s3 import S3BlobStore

__all__ = [
    'BlobStore',
    'LocalBlobStore',
    'S3BlobStore',
]
