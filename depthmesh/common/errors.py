"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for unexpected failures inside a pipeline stage."""

    error_code = "STAGE_ERROR"


class InvalidFilterError(PipelineError):
    """Raised when a bounding filter has a minimum above its maximum."""

    error_code = "INVALID_FILTER"


class InvalidSourceNameError(PipelineError):
    """Raised when a source identifier does not carry a mesh base name."""

    error_code = "INVALID_SOURCE_NAME"


class SourceUnavailableError(PipelineError):
    """Raised when the source archive cannot be fetched or unpacked."""

    error_code = "SOURCE_UNAVAILABLE"


class RequestCancelledError(PipelineError):
    """Raised when the caller cancels a request while its source is loading."""

    error_code = "REQUEST_CANCELLED"


class EmptySourceError(PipelineError):
    """Raised when a conversion needs records and the source has none."""

    error_code = "EMPTY_SOURCE"


class EmptyFilterResultError(PipelineError):
    """Raised when a bounding filter matches no records."""

    error_code = "EMPTY_FILTER_RESULT"
