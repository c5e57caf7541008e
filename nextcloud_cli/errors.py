"""
Exceptions raised by the Nextcloud client.
"""

from typing import Optional


class NextcloudError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(NextcloudError):
    """Missing or invalid URL / credentials at client construction."""


class TransportError(NextcloudError):
    """Network-level failure (DNS, TLS, refused connection, timeout)."""

    def __init__(self, original: Exception):
        super().__init__(str(original))
        self.original = original


class DecodeError(NextcloudError):
    """A response that should carry XML could not be decoded."""


class RemoteError(NextcloudError):
    """Error reported by the WebDAV server in its response body."""

    def __init__(self, exception: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"Exception: {exception}, Message: {message}")
        self.exception = exception
        self.message = message
        self.status_code = status_code


class APIError(NextcloudError):
    """An Apps or OCS endpoint answered with an unexpected status code."""

    def __init__(self, operation: str, status_code: Optional[int], message: str = ""):
        super().__init__(f"{operation}: share API returned an unsuccessful status code {status_code}")
        self.operation = operation
        self.status_code = status_code
        self.message = message


class ResponseDecodeError(DecodeError, APIError):
    """Undecodable Apps/OCS response; counts as a failed API call too."""

    def __init__(self, operation: str, reason: str):
        APIError.__init__(self, operation, None, reason)
        self.args = (f"{operation}: could not decode response: {reason}",)
