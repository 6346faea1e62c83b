class InterviewError(Exception):
    """Base for every failure the request pipeline maps to a JSON error."""

    status_code = 500
    default_message = "Failed to process interview"

    def __init__(self, message: str | None = None):
        self.message = str(message or self.default_message)
        super().__init__(self.message)


class InputError(InterviewError):
    status_code = 400
    default_message = "No audio file provided"


class TranscriptionError(InterviewError):
    default_message = "Transcription failed"


class GenerationError(InterviewError):
    default_message = "Answer generation failed"


class EncodingError(InterviewError):
    default_message = "Failed to encode answer payload"
