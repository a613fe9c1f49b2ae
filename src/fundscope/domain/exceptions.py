class FundscopeError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(FundscopeError):
    """Requested resource does not exist."""


class VectorLengthError(FundscopeError, ValueError):
    """Two vectors being compared have different lengths."""

    def __init__(self, left: int, right: int) -> None:
        self.left = left
        self.right = right
        super().__init__(f"Vector lengths differ: {left} != {right}")


class StageError(FundscopeError):
    """A search or ingestion stage failed; ``stage`` names which one."""

    stage = "unknown"


class EmbeddingGenerationError(StageError):
    """The embedding service failed or returned an unusable vector."""

    stage = "generation"


class ScanError(StageError):
    """The query could not be scored against stored embeddings."""

    stage = "scan"


class BackendError(StageError):
    """The record store could not serve a read or write."""

    stage = "backend"
