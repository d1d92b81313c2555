class KnowledgeError(Exception):
    """Base class for errors raised by the knowledge store."""


class StorageError(KnowledgeError):
    """A database operation failed and the unit of work was rolled back."""


class WordNotFound(KnowledgeError, LookupError):
    def __init__(self, word: str) -> None:
        super().__init__(f"Word '{word}' is not in the knowledge database")
        self.word = word


class InvalidInput(KnowledgeError, ValueError):
    """Rejected before anything was written."""
