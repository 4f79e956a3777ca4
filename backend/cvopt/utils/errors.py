"""Exceptions raised along the optimisation pipeline."""

from typing import Optional


class OptimizationError(Exception):
    """
    Base class for failures while producing or serving an optimised CV.

    Attributes:
        message: Error description
        stage: Pipeline stage that failed (e.g. 'generation', 'storage')
    """

    stage = "optimization"

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        if stage:
            self.stage = stage
        super().__init__(message)


class GenerationError(OptimizationError):
    """The chat model call failed or returned unusable content."""

    stage = "generation"


class StorageError(OptimizationError):
    """Writing or reading a rendered document failed."""

    stage = "storage"


class DocumentNotFoundError(OptimizationError):
    """No document is stored under the requested handle."""

    stage = "download"

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(f"Document not found: {handle}")
