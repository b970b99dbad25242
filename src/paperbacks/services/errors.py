"""Service-layer exceptions."""


class StoryEngineError(Exception):
    """Raised when the engine is asked for something its state does not allow."""


class TraversalInvariantError(StoryEngineError):
    """Raised when choice gating and the current node disagree."""


class SnapshotError(Exception):
    """Raised when a story snapshot is malformed or of an unsupported version."""


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""
