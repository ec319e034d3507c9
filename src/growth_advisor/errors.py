"""Exception taxonomy for the growth advisor engine."""

from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Why a report session ended up in the failed state."""
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    SCHEMA = "schema"
    QUOTA = "quota"
    SERVICE = "service"


class AdvisorError(Exception):
    """Base exception for growth advisor errors."""
    kind: Optional[FailureKind] = None


class NotFoundError(AdvisorError):
    """Raised when the student profile cannot be resolved."""
    kind = FailureKind.NOT_FOUND


class ConfigurationError(AdvisorError):
    """Raised when the generation service credential or endpoint is unusable."""
    kind = FailureKind.CONFIGURATION


class SchemaError(AdvisorError):
    """Raised when the generated report cannot be parsed or is incomplete."""
    kind = FailureKind.SCHEMA


class QuotaError(AdvisorError):
    """Raised when the generation service signals rate or quota exhaustion."""
    kind = FailureKind.QUOTA


class ServiceError(AdvisorError):
    """Raised for any other failure communicating with the generation service."""
    kind = FailureKind.SERVICE


class StorageError(ServiceError):
    """Raised when the local persistence medium is unavailable."""
    pass


class CorruptValueError(StorageError):
    """Raised when a stored value cannot be decoded."""
    pass


class GenerationCancelledError(AdvisorError):
    """Raised when a generation result arrives for a cancelled request."""
    pass


class GenerationInProgressError(AdvisorError):
    """Raised when a generation is requested while one is still pending."""
    pass


class UnknownWidgetError(AdvisorError, KeyError):
    """Raised for a widget id that is not part of the default widget map."""
    pass


class LayoutNotLoadedError(AdvisorError):
    """Raised when the widget layout is mutated before being loaded."""
    pass
