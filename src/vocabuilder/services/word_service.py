"""Service for managing a user's word list."""
import logging
import unicodedata
from typing import Iterable, List, Optional, Tuple, Union

from vocabuilder.config import settings
from vocabuilder.errors import AuthError, NotFoundError, StorageError, ValidationError
from vocabuilder.models.vocab_models import (
    AuthSession,
    SortMode,
    WordEntry,
    new_entry_id,
    now_iso,
    now_millis,
)
from vocabuilder.monitoring import words_added, words_deleted, words_updated
from vocabuilder.services.user_service import UserService

logger = logging.getLogger(__name__)


def collation_key(text: str) -> Tuple[str, str]:
    """Sort key that ignores case and accents first, like a locale compare."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    # lowercase before uppercase on otherwise equal words
    return base.casefold(), text.swapcase()


def parse_sort_mode(value: Union[str, SortMode]) -> SortMode:
    """Parse a sort mode name."""
    if isinstance(value, SortMode):
        return value
    try:
        return SortMode(value)
    except ValueError as e:
        modes = ", ".join(mode.value for mode in SortMode)
        raise ValidationError(f"Unknown sort order '{value}'. Use one of: {modes}") from e


def sort_words(entries: Iterable[WordEntry], mode: Union[str, SortMode]) -> List[WordEntry]:
    """Return a sorted copy of the entries. Unknown modes keep the order."""
    words = list(entries)
    try:
        mode = SortMode(mode)
    except ValueError:
        return words

    if mode is SortMode.NEWEST:
        return sorted(words, key=lambda w: w.timestamp, reverse=True)
    if mode is SortMode.OLDEST:
        return sorted(words, key=lambda w: w.timestamp)
    if mode is SortMode.ALPHABETICAL:
        return sorted(words, key=lambda w: collation_key(w.word))
    return sorted(words, key=lambda w: collation_key(w.word), reverse=True)


def filter_words(entries: Iterable[WordEntry], query: str) -> List[WordEntry]:
    """Case-insensitive substring search over all text fields."""
    needle = (query or "").lower()
    return [
        w for w in entries
        if needle in w.word.lower()
        or needle in w.meaning.lower()
        or needle in w.translation.lower()
        or needle in w.example.lower()
    ]


class WordService:
    """Service for managing the word list of the logged in user.

    The list is loaded once and kept in memory. When saving fails the in-memory
    list keeps the change and the next successful save writes it out.
    """

    def __init__(self, user_service: UserService, session: AuthSession):
        """Initialize the service for the user of the given session."""
        self.user_service = user_service
        self.session = session
        user = user_service.get_user(session.username)
        if user is None:
            raise AuthError("Please log in first!")
        self.words: List[WordEntry] = list(user.words)

    def _save(self) -> None:
        try:
            self.user_service.save_user_words(self.session.username, self.words)
        except StorageError:
            logger.error(f"Error saving words of {self.session.username}")
            raise

    def _find_index(self, word_id: str) -> int:
        for index, word in enumerate(self.words):
            if word.id == word_id:
                return index
        raise NotFoundError(f"Word {word_id} not found")

    def _check_duplicate(self, text: str, exclude_id: Optional[str] = None) -> None:
        lowered = text.lower()
        for word in self.words:
            if word.id != exclude_id and word.word.lower() == lowered:
                raise ValidationError("This word already exists in your vocabulary!")

    def count(self) -> int:
        """Get the number of words in the list."""
        return len(self.words)

    def get_words(self) -> List[WordEntry]:
        """Get a copy of the list in stored order (newest added first)."""
        return list(self.words)

    def get_word(self, word_id: str) -> WordEntry:
        """Get a word by id."""
        return self.words[self._find_index(word_id)]

    def add_word(
        self,
        word: str,
        meaning: str,
        translation: str = "",
        example: str = "",
    ) -> WordEntry:
        """Add a word to the front of the list."""
        word = (word or "").strip()
        meaning = (meaning or "").strip()
        if not word or not meaning:
            raise ValidationError("Please fill in at least the word and meaning fields.")
        self._check_duplicate(word)

        entry = WordEntry(
            id=new_entry_id(),
            word=word,
            meaning=meaning,
            translation=(translation or "").strip(),
            example=(example or "").strip(),
            date_added=now_iso(),
            timestamp=now_millis(),
            status=settings.words.default_status,
        )
        self.words.insert(0, entry)
        self._save()

        words_added.inc()
        logger.info(f"Word added for {self.session.username}: {entry.word}")
        return entry

    def delete_word(self, word_id: str) -> WordEntry:
        """Remove a word from the list and return it."""
        entry = self.words.pop(self._find_index(word_id))
        self._save()

        words_deleted.inc()
        logger.info(f"Word deleted for {self.session.username}: {entry.word}")
        return entry

    def edit_word(
        self,
        word_id: str,
        word: Optional[str] = None,
        meaning: Optional[str] = None,
        translation: Optional[str] = None,
        example: Optional[str] = None,
    ) -> WordEntry:
        """Update the given fields of a word in place, keeping its id and position."""
        entry = self.words[self._find_index(word_id)]

        new_word = entry.word if word is None else word.strip()
        new_meaning = entry.meaning if meaning is None else meaning.strip()
        if not new_word or not new_meaning:
            raise ValidationError("Please fill in at least the word and meaning fields.")
        # merge imports may already hold case duplicates; only a changed word is checked
        if new_word.lower() != entry.word.lower():
            self._check_duplicate(new_word, exclude_id=entry.id)

        entry.word = new_word
        entry.meaning = new_meaning
        if translation is not None:
            entry.translation = translation.strip()
        if example is not None:
            entry.example = example.strip()
        self._save()

        words_updated.inc()
        logger.info(f"Word updated for {self.session.username}: {entry.word}")
        return entry

    def take_for_edit(self, word_id: str) -> WordEntry:
        """Remove a word so that it can be added again with new values."""
        entry = self.delete_word(word_id)
        logger.info(f"Word taken out for editing: {entry.word}")
        return entry

    def filter_words(self, query: str) -> List[WordEntry]:
        """Search the list."""
        return filter_words(self.words, query)

    def sort_words(self, entries: Iterable[WordEntry], mode: Union[str, SortMode]) -> List[WordEntry]:
        """Sort entries without changing the list."""
        return sort_words(entries, mode)

    def search(self, query: str = "", mode: Union[str, SortMode, None] = None) -> List[WordEntry]:
        """Filter then sort, the way the saved words page shows the list."""
        return sort_words(self.filter_words(query), mode or settings.words.default_sort)

    def replace_words(self, words: List[WordEntry]) -> None:
        """Replace the whole list."""
        self.words = list(words)
        self._save()

    def prepend_words(self, words: List[WordEntry]) -> None:
        """Put words in front of the current list."""
        self.words = list(words) + self.words
        self._save()
