"""Typed failures surfaced by the story pipeline."""


class StoryGenerationError(Exception):
    """Base class for failures reported to the caller."""

    code = "StoryGenerationError"
    status_code = 500
    default_message = "Failed to generate image"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingQuoteError(StoryGenerationError):
    """The quote was absent or blank."""

    code = "MissingQuote"
    status_code = 400
    default_message = "Quote text is required"


class MissingImageError(StoryGenerationError):
    """No cover image was supplied."""

    code = "MissingImage"
    status_code = 400
    default_message = "Cover image is required"


class UnprocessableImageError(StoryGenerationError):
    """Decoding or rendering failed; the cause is logged, not exposed."""

    code = "UnprocessableImage"
    status_code = 500
    default_message = "Failed to generate image"
