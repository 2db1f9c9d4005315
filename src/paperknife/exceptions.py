"""Custom exceptions for the document transcoding engine."""


class PaperknifeError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class DocumentLoadError(PaperknifeError):
    """Raised when input bytes cannot be parsed as a document."""

    pass


class DocumentLockedError(PaperknifeError):
    """Raised when an operation needs an unlocked document."""

    def __init__(self, message: str = "Document is password protected"):
        super().__init__(message)


class IncorrectPasswordError(PaperknifeError):
    """Raised when a decryption credential does not open the document."""

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)


class NoUsablePagesError(PaperknifeError):
    """Raised when rasterization produced zero frames."""

    def __init__(self, message: str, skipped: list[int] | None = None, *args, **kwargs):
        self.skipped = skipped or []
        super().__init__(message, *args, **kwargs)


class ReconstructionError(PaperknifeError):
    """Raised when the isolated reconstruction context does not deliver a result."""

    pass


class ReconstructionFailed(ReconstructionError):
    """Raised when the context reports an explicit error."""

    pass


class ReconstructionCrashed(ReconstructionError):
    """Raised when the context fails to start or dies without answering."""

    def __init__(self, message: str, exitcode: int | None = None, *args, **kwargs):
        self.exitcode = exitcode
        super().__init__(message, *args, **kwargs)


class ReconstructionTimeout(ReconstructionError):
    """Raised when the context does not finish within the configured timeout."""

    def __init__(self, message: str, timeout: float, *args, **kwargs):
        self.timeout = timeout
        super().__init__(message, *args, **kwargs)


class ReconstructionCancelled(ReconstructionError):
    """Raised when the caller cancels an in-flight request."""

    def __init__(self, message: str = "Reconstruction cancelled"):
        super().__init__(message)


class ArchiveError(PaperknifeError):
    """Raised when the archive container cannot be produced."""

    pass


class JobStateError(PaperknifeError):
    """Raised on an illegal processing job state transition."""

    pass


class InvalidOptionError(PaperknifeError):
    """Raised when tool options are missing or inconsistent."""

    pass


class NoImagesFoundError(InvalidOptionError):
    """Raised when a document has no embedded images to extract."""

    def __init__(self, message: str = "No embedded images found"):
        super().__init__(message)
