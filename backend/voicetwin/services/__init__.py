from voicetwin.services.transcription_service import (
    AssemblyAIProvider,
    DeepgramProvider,
    TranscriptionGateway,
    build_transcription_gateway,
)

__all__ = ["AssemblyAIProvider", "DeepgramProvider", "TranscriptionGateway", "build_transcription_gateway"]
