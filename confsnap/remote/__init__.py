"""
Remote configuration services.
"""

from .base import ConfigurationService, ConfigurationState
from .cloudfront import CloudFrontConfigurationService

__all__ = [
    'ConfigurationService',
    'ConfigurationState',
    'CloudFrontConfigurationService',
]
