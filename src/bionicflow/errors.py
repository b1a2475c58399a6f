from __future__ import annotations


class BionicFlowError(Exception):
    """Base class for errors raised by the bionicflow package."""


class InvalidInputError(BionicFlowError, ValueError):
    """Raised when a word or token sequence cannot be presented."""


class EmptyInputError(InvalidInputError):
    """Raised when text contains no words to tokenize."""


class ExtractionError(BionicFlowError, RuntimeError):
    """Raised when a source document cannot be turned into text."""


class PersistenceError(BionicFlowError, RuntimeError):
    """Raised when reading statistics cannot be read or written."""
