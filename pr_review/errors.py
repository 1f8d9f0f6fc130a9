"""Error kinds surfaced by the review pipeline."""


class PRReviewError(Exception):
    """Base error for every stage of the pipeline."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(PRReviewError):
    """Home directory, config file open, or config parse failure."""


class InvalidURLError(PRReviewError):
    """Pull request URL is too short to contain org, repo and number."""


class DiffFetchError(PRReviewError):
    """The diff command could not be started or exited non-zero."""


class ReviewGenerationError(PRReviewError):
    """Error while asking the language model for a review."""


class SerializationError(ReviewGenerationError):
    pass


class RequestError(ReviewGenerationError):
    pass


class ResponseReadError(ReviewGenerationError):
    pass


class DeserializationError(ReviewGenerationError):
    pass


class EmptyResponseError(ReviewGenerationError):
    pass
