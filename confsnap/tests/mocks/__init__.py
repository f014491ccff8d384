"""
Mock components for testing confsnap.

These mocks stand in for the remote configuration service and the blob
store so the snapshot engine can be exercised without AWS access.
"""

from .golden_data import (
    DISTRIBUTION_ID,
    TARGET_ID,
    BASE_DISTRIBUTION_CONFIG,
    FLAG_ON,
    FLAG_OFF,
    pretty_urls_config,
    encode,
)
from .mock_remote import MockConfigurationService
from .mock_storage import MockBlobStore, MockClock, FrozenClock

__all__ = [
    # Collaborator mocks
    'MockConfigurationService',
    'MockBlobStore',
    'MockClock',
    'FrozenClock',
    # Golden data
    'DISTRIBUTION_ID',
    'TARGET_ID',
    'BASE_DISTRIBUTION_CONFIG',
    'FLAG_ON',
    'FLAG_OFF',
    'pretty_urls_config',
    'encode',
]
