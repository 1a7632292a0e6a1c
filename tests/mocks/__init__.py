"""
Mock implementations for external dependencies in service testing.
"""

from .mock_blob_storage import MockBlobStorage

__all__ = [
    'MockBlobStorage',
]
