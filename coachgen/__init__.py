"""
Coachgen - weekly training program generation

Turns a training request into a role-tagged program document:
- Remote language-model generation with bounded retries
- Connectivity monitoring with a reachability probe
- Session response cache with size and age bounds
- Deterministic offline programs when the remote path is unavailable
"""

__version__ = "0.1.0"

from .config import GenerationConfig, ConfigManager, ConfigurationError
from .errors import (
    ErrorCategory, GenerationError, InvalidURLError, InvalidResponseError,
    AuthenticationError, RateLimitError, ServerError, HttpError,
    SerializationError, NetworkError, NoInternetConnectionError
)
from .connectivity import (
    ConnectivityMonitor, ConnectivityState, PathStatus, InterfaceClass,
    InterfaceScanner, create_connectivity_monitor
)
from .response_cache import ResponseCache, CacheEntry
from .offline_templates import TemplateCategory
from .offline_generator import OfflineFallbackGenerator, SubstitutionRule, OFFLINE_MARKER
from .formatter import (
    OutputFormatter, StyledDocument, StyledSegment, SegmentRole,
    LineClassifier, RegexLineClassifier
)
from .orchestrator import (
    RequestOrchestrator, GenerationRequest, ProgressTracker, create_request_orchestrator
)
from .program_prompt import ProgramParameters, build_program_prompt

__all__ = [
    "GenerationConfig", "ConfigManager", "ConfigurationError",
    "ErrorCategory", "GenerationError", "InvalidURLError", "InvalidResponseError",
    "AuthenticationError", "RateLimitError", "ServerError", "HttpError",
    "SerializationError", "NetworkError", "NoInternetConnectionError",
    "ConnectivityMonitor", "ConnectivityState", "PathStatus", "InterfaceClass",
    "InterfaceScanner", "create_connectivity_monitor",
    "ResponseCache", "CacheEntry",
    "TemplateCategory", "OfflineFallbackGenerator", "SubstitutionRule", "OFFLINE_MARKER",
    "OutputFormatter", "StyledDocument", "StyledSegment", "SegmentRole",
    "LineClassifier", "RegexLineClassifier",
    "RequestOrchestrator", "GenerationRequest", "ProgressTracker", "create_request_orchestrator",
    "ProgramParameters", "build_program_prompt",
]
