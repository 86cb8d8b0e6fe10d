"""Application object wiring the services together."""
import logging
import random
from typing import Optional

from sqlalchemy.orm import Session

from vocabuilder.config import settings
from vocabuilder.errors import AuthError
from vocabuilder.models.base import SessionLocal, init_db
from vocabuilder.models.vocab_models import AuthSession
from vocabuilder.monitoring import start_monitoring
from vocabuilder.services.quiz_service import QuizService
from vocabuilder.services.store_service import PersistentStore
from vocabuilder.services.transfer_service import TransferService
from vocabuilder.services.user_service import UserService
from vocabuilder.services.word_service import WordService


class VocabApp:
    """Main application class."""

    def __init__(self, db: Optional[Session] = None):
        """Initialize the application, optionally on an existing database session."""
        self.db = db
        self.owns_db = db is None
        self.store: Optional[PersistentStore] = None
        self.user_service: Optional[UserService] = None
        self.transfer_service: Optional[TransferService] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        if self.owns_db:
            init_db()
            self.db = SessionLocal()
            self.logger.debug("Database initialized")

        self.store = PersistentStore(self.db)
        self.user_service = UserService(self.db, self.store)
        self.transfer_service = TransferService(self.user_service)

        if settings.monitoring.enabled:
            start_monitoring(settings.monitoring.port)
            self.logger.info(f"Metrics served on port {settings.monitoring.port}")

        self.running = True

    def stop(self) -> None:
        """Stop the application."""
        if not self.running:
            return

        if self.owns_db and self.db:
            self.db.close()
            self.db = None
            self.logger.debug("Database session closed")

        self.store = None
        self.user_service = None
        self.transfer_service = None
        self.running = False

    def require_session(self) -> AuthSession:
        """Get the current session or fail when nobody is logged in."""
        session = self.user_service.current_session()
        if session is None or self.user_service.get_user(session.username) is None:
            raise AuthError("Please log in first!")
        return session

    def word_service(self, session: Optional[AuthSession] = None) -> WordService:
        """Word list of the given (or current) user."""
        return WordService(self.user_service, session or self.require_session())

    def quiz_service(
        self,
        session: Optional[AuthSession] = None,
        rng: Optional[random.Random] = None,
    ) -> QuizService:
        """Quiz over the word list of the given (or current) user."""
        return QuizService(self.word_service(session), self.store, rng)
