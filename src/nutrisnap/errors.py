"""Error taxonomy for the ingestion pipeline and chat."""


class NutriSnapError(Exception):
    """Base error carrying a short user-facing message."""

    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ValidationError(NutriSnapError):
    """Malformed submission, rejected before any model call."""

    status_code = 422
    default_message = "Invalid submission."


class ExtractionError(NutriSnapError):
    """Nutrition extraction call failed or returned invalid output."""

    status_code = 502
    default_message = "Could not analyze food. Please try again."


class RecognitionError(NutriSnapError):
    """Food recognition call failed or returned invalid output."""

    status_code = 502
    default_message = "Could not analyze food from the image. Please try again."


class EmptyResultError(NutriSnapError):
    """The model succeeded but identified no food."""

    status_code = 422
    default_message = (
        "Could not recognize any food. "
        "Try a clearer image or a different description."
    )


class PersistenceError(NutriSnapError):
    """Entries were extracted but could not be saved."""

    status_code = 503
    default_message = "Could not save new entries."


class ChatError(NutriSnapError):
    """Dietician chat call failed."""

    status_code = 502
    default_message = "The dietician is unavailable right now. Please try again."
