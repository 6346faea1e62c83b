from voicetwin.client.api import ClientRequestError, InterviewAnswer, InterviewApiClient
from voicetwin.client.audio import CaptureError, Recording, SoundDeviceCapture
from voicetwin.client.recorder import ClientRecorder, RecorderMachine
from voicetwin.client.speech import ConsoleSpeechRenderer, SystemSpeechRenderer

__all__ = [
    "CaptureError",
    "ClientRecorder",
    "ClientRequestError",
    "ConsoleSpeechRenderer",
    "InterviewAnswer",
    "InterviewApiClient",
    "RecorderMachine",
    "Recording",
    "SoundDeviceCapture",
    "SystemSpeechRenderer",
]
