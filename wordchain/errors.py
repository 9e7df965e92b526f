"""
Exception Types

Errors raised while reading corpora, building transition tables and
generating text.
"""

from pathlib import Path
from typing import Optional, Tuple, Union


class WordchainError(Exception):
    """Base class for all wordchain errors."""


class CorpusReadError(WordchainError, OSError):
    """A source document could not be read."""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        message = f"Cannot read document {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EmptyInputError(WordchainError, ValueError):
    """No (context, next token) pairs could be extracted from the input."""


class UnknownContextError(WordchainError, KeyError):
    """A context was never observed while building the transition table."""

    def __init__(self, context: Tuple[str, ...]):
        self.context = tuple(context)
        super().__init__(self.context)

    def __str__(self) -> str:
        shown = ' '.join(self.context) if self.context else '<empty>'
        return f"Unknown context: ({shown})"
