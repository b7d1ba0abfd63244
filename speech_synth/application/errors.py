from __future__ import annotations


class SynthesisError(RuntimeError):
    """Base class for failures raised by the synthesis pipeline."""


class AssetLoadError(SynthesisError):
    """Raised when a model or voice asset cannot be fetched or constructed."""


class StageInvocationError(SynthesisError):
    """Raised when an inference stage fails or returns malformed output."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class InputError(SynthesisError, ValueError):
    """Raised for invalid request parameters (e.g. speed <= 0)."""
