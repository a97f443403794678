"""
Error taxonomy for the Freshdesk sync pipeline.

None of these are fatal: the pipeline catches them at the page/request
boundary, logs them and keeps whatever was collected so far.
"""

from typing import Optional


class FreshdeskError(Exception):
    """Base class for sync pipeline errors"""


class TransportError(FreshdeskError):
    """Network failure or non-200 response from the helpdesk API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FreshdeskError):
    """Response body is not JSON or does not have the expected shape"""


class NotConfigured(FreshdeskError):
    """API key or domain is missing"""
