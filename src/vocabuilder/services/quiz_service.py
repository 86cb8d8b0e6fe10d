"""Quiz service drawing random flashcards from the word list."""
import logging
import math
import random
from typing import Optional

from vocabuilder.config import settings
from vocabuilder.errors import EmptyListError, NotActiveError, StorageError
from vocabuilder.models.vocab_models import QuizAnswer, QuizState, QuizStats, WordEntry
from vocabuilder.monitoring import quiz_words_completed
from vocabuilder.services.store_service import PersistentStore
from vocabuilder.services.word_service import WordService

logger = logging.getLogger(__name__)


class QuizService:
    """Random flashcard quiz with show/hide answer and a completed counter.

    Each card is drawn independently, so the same word can come up twice in a
    row.
    """

    def __init__(
        self,
        word_service: WordService,
        store: Optional[PersistentStore] = None,
        rng: Optional[random.Random] = None,
    ):
        self.word_service = word_service
        self.store = store or word_service.user_service.store
        self.rng = rng or random.Random()
        self.state = QuizState(completed_count=self._load_count())

    def _load_count(self) -> int:
        try:
            raw = self.store.get(settings.storage.quiz_count_key)
        except StorageError:
            return 0
        try:
            return max(int(raw), 0) if raw else 0
        except ValueError:
            logger.warning(f"Ignoring corrupt quiz count: {raw!r}")
            return 0

    def _save_count(self) -> None:
        self.store.set(settings.storage.quiz_count_key, str(self.state.completed_count))

    def _draw(self) -> WordEntry:
        words = self.word_service.words
        if not words:
            raise EmptyListError("Please add some words first before starting the quiz!")
        index = math.floor(self.rng.random() * len(words))
        self.state.current_word = words[index]
        self.state.revealed = False
        return self.state.current_word

    @property
    def current_word(self) -> Optional[WordEntry]:
        return self.state.current_word

    @property
    def is_active(self) -> bool:
        return self.state.active

    @property
    def is_revealed(self) -> bool:
        return self.state.revealed

    def start(self) -> WordEntry:
        """Start the quiz and draw the first card."""
        word = self._draw()
        self.state.active = True
        logger.info(f"Quiz started for {self.word_service.session.username}")
        return word

    def reveal(self) -> QuizAnswer:
        """Show the meaning, translation and example of the current card."""
        word = self.state.current_word
        if not self.state.active or word is None:
            raise NotActiveError("Start the quiz first!")
        self.state.revealed = True
        return QuizAnswer(
            word=word.word,
            meaning=word.meaning,
            translation=word.translation or None,
            example=word.example or None,
        )

    def hide(self) -> None:
        """Hide the answer again."""
        self.state.revealed = False

    def toggle(self) -> Optional[QuizAnswer]:
        """Reveal a hidden answer or hide a revealed one."""
        if self.state.revealed:
            self.hide()
            return None
        return self.reveal()

    def next_word(self) -> WordEntry:
        """Count the current card as done and draw another one."""
        if not self.state.active:
            raise NotActiveError("Start the quiz first!")
        self.state.completed_count += 1
        quiz_words_completed.inc()
        self._save_count()
        return self._draw()

    def reset(self, confirmed: bool = False) -> bool:
        """Reset the progress counter and stop the quiz. Needs confirmation."""
        if not confirmed:
            return False
        self.state.completed_count = 0
        self.state.active = False
        self.state.revealed = False
        self.state.current_word = None
        self._save_count()
        logger.info("Quiz progress reset")
        return True

    def stats(self) -> QuizStats:
        """Get the word total and the number of completed cards."""
        return QuizStats(
            total_words=self.word_service.count(),
            completed_count=self.state.completed_count,
        )
