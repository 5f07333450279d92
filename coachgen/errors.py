"""
Error taxonomy for the coaching content generation service.

Configuration-class faults (bad key, bad URL, unencodable request) are
surfaced to the caller. Everything else is absorbed by the orchestrator
and answered with offline content.
"""

import time
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Structured error categories for precise handling"""
    CONFIGURATION = "configuration"    # Request could not be built, don't retry
    AUTHENTICATION = "authentication"  # Auth errors, check credentials
    RATE_LIMIT = "rate_limit"          # Rate limiting, backoff required
    SERVER = "server"                  # 5xx from the remote service
    PROTOCOL = "protocol"              # Unexpected status or malformed envelope
    NETWORK = "network"                # Transport failure (timeout, reset)
    CONNECTIVITY = "connectivity"      # No usable network at all


class GenerationError(Exception):
    """Base exception for generation operations"""

    surfaced = False

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        retryable: bool = False,
        original_exception: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.original_exception = original_exception
        self.user_message = user_message or self._generate_user_message()
        self.timestamp = time.time()

    def _generate_user_message(self) -> str:
        """Generate user-friendly error message"""
        if self.category == ErrorCategory.AUTHENTICATION:
            return "The coaching service rejected the API key. Check your configuration."
        elif self.category == ErrorCategory.CONFIGURATION:
            return "The coaching service is misconfigured. Check your settings."
        elif self.category == ErrorCategory.RATE_LIMIT:
            return "Service is busy. Please wait a moment..."
        elif self.category == ErrorCategory.SERVER:
            return "Server error. Please try again in a few moments."
        elif self.category == ErrorCategory.NETWORK:
            return "Network connection issue. Switching to offline mode..."
        elif self.category == ErrorCategory.CONNECTIVITY:
            return "No internet connection available. Using offline program..."
        else:
            return "Unexpected response from the coaching service. Using offline program..."


class InvalidURLError(GenerationError):
    surfaced = True

    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url!r}", ErrorCategory.CONFIGURATION)
        self.url = url


class SerializationError(GenerationError):
    surfaced = True

    def __init__(self, original_exception: Exception):
        super().__init__(
            f"Serialization Error: {original_exception}",
            ErrorCategory.CONFIGURATION,
            original_exception=original_exception
        )


class AuthenticationError(GenerationError):
    """401 from the remote service, or no API key at all"""
    surfaced = True

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(f"Authentication Error: {message}", ErrorCategory.AUTHENTICATION)


class InvalidResponseError(GenerationError):
    def __init__(self, message: str = "Invalid response from server", original_exception: Optional[Exception] = None):
        super().__init__(message, ErrorCategory.PROTOCOL, original_exception=original_exception)


class RateLimitError(GenerationError):
    def __init__(self, attempts: int):
        super().__init__(
            f"Rate Limit Error: still throttled after {attempts} attempts",
            ErrorCategory.RATE_LIMIT,
            retryable=True
        )
        self.attempts = attempts


class ServerError(GenerationError):
    def __init__(self, status_code: int, attempts: int):
        super().__init__(
            f"Server Error: HTTP {status_code} after {attempts} attempts",
            ErrorCategory.SERVER,
            retryable=True
        )
        self.status_code = status_code
        self.attempts = attempts


class HttpError(GenerationError):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP Error: {status_code}", ErrorCategory.PROTOCOL)
        self.status_code = status_code


class NetworkError(GenerationError):
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(
            f"Network Error: {message}",
            ErrorCategory.NETWORK,
            retryable=True,
            original_exception=original_exception
        )


class NoInternetConnectionError(GenerationError):
    def __init__(self):
        super().__init__(
            "No internet connection available",
            ErrorCategory.CONNECTIVITY
        )
