from .summarization import SummarizationRequest, SummarizationResponse
from .transcription import TranscriptionRequest, TranscriptionResponse

__all__ = [
    "SummarizationRequest",
    "SummarizationResponse",
    "TranscriptionRequest",
    "TranscriptionResponse",
]
