"""VoiceSign API: speech transcription and Thai text summarization proxies."""

__version__ = "0.1.0"
