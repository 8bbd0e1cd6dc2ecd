"""Shared exception hierarchy used across layers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced on analysis reports."""

    INPUT_TOO_LARGE = "input_too_large"
    EMPTY_INPUT = "empty_input"
    PARSE_TOLERANCE = "parse_tolerance"
    INSUFFICIENT_SAMPLES = "insufficient_samples"
    NUMERIC_DEGENERACY = "numeric_degeneracy"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INVALID_OPTIONS = "invalid_options"
    STAGE_FAILURE = "stage_failure"


class AnalysisError(Exception):
    """Base class for failures detected inside a pipeline stage."""

    kind: ErrorKind = ErrorKind.STAGE_FAILURE

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ParsingError(AnalysisError):
    """Raised when source text cannot be read or normalized."""

    kind = ErrorKind.PARSE_TOLERANCE


class InputTooLargeError(AnalysisError):
    """Raised before parsing when the source exceeds the configured bound."""

    kind = ErrorKind.INPUT_TOO_LARGE


class EmptyInputError(AnalysisError):
    """Raised for blank input when the caller opted into rejecting it."""

    kind = ErrorKind.EMPTY_INPUT


class InsufficientSamplesError(AnalysisError):
    """Raised when fewer samples than required are available for fitting."""

    kind = ErrorKind.INSUFFICIENT_SAMPLES


class NumericDegeneracyError(AnalysisError):
    """Raised when every candidate fit is non-finite or explains nothing."""

    kind = ErrorKind.NUMERIC_DEGENERACY


class SamplingTimeoutError(AnalysisError):
    """Raised when the sampling ceiling elapsed before any sample completed."""

    kind = ErrorKind.TIMEOUT
