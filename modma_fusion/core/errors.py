"""
Pipeline error taxonomy

Every failure that reaches the pipeline boundary is one of these types. Each
carries the short user-facing message that the result object reports, while the
exception text keeps the diagnostic detail for the logs.
"""

from .config import MSG_CANCELLED, MSG_FORMAT_ERROR, MSG_PROCESSING_ERROR, MSG_QUALITY_ERROR


class PipelineError(Exception):
    """Base class for failures surfaced as a PipelineResult error"""

    user_message = MSG_PROCESSING_ERROR


class FormatError(PipelineError):
    """Input does not conform to the dataset structure; the user must fix it"""

    user_message = MSG_FORMAT_ERROR


class QualityError(PipelineError):
    """Signal integrity thresholds were not met; the user must supply better data"""

    user_message = MSG_QUALITY_ERROR


class ProcessingError(PipelineError):
    """Unexpected failure after the validation gate"""

    user_message = MSG_PROCESSING_ERROR


class PipelineCancelled(PipelineError):
    """A cancellation token was triggered between stages"""

    user_message = MSG_CANCELLED
