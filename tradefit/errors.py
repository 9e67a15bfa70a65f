from __future__ import annotations


class TradeFitError(Exception):
    """Base class for errors raised by tradefit."""


class ResumeExtractionError(TradeFitError):
    """The resume could not be read. Callers may retry or ask for a new upload."""


class UnsupportedResumeError(ResumeExtractionError):
    def __init__(self, filename: str, content_type: str | None = None):
        self.filename = filename
        self.content_type = content_type
        super().__init__(f"Please upload a PDF, DOC, or DOCX file (got '{filename}').")


class TranscriptFormatError(TradeFitError):
    pass


class InvalidTransitionError(TradeFitError):
    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while demo is {state}.")
