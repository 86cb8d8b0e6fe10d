"""Errors raised by the vocabulary services."""


class VocabError(Exception):
    """Base class for all errors shown to the user as a notice."""


class ValidationError(VocabError, ValueError):
    """Missing, too short or duplicate field."""


class AuthError(VocabError):
    """Unknown user or wrong password."""


class NotFoundError(VocabError, LookupError):
    """Operation on a word id that is not in the list."""


class EmptyListError(VocabError):
    """Quiz started with no words."""


class NotActiveError(VocabError):
    """Quiz operation that needs an active quiz."""


class FormatError(VocabError):
    """Imported data could not be parsed or has the wrong shape."""


class StorageError(VocabError):
    """Reading from or writing to the store failed."""
