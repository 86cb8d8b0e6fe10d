"""User service for registration, login and per-user word storage."""
import hmac
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from vocabuilder.config import settings
from vocabuilder.errors import AuthError, NotFoundError, StorageError, ValidationError
from vocabuilder.models.vocab_models import AuthSession, UserRecord, WordEntry, now_iso
from vocabuilder.monitoring import logins, registrations
from vocabuilder.services.store_service import PersistentStore

# Configure logging
logger = logging.getLogger(__name__)


class UserService:
    """Service for managing the user directory and the login session."""

    def __init__(self, db: Session, store: Optional[PersistentStore] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.store = store or PersistentStore(db)
        self.keys = settings.storage

    def _users_from_raw(self, raw: Any) -> Dict[str, UserRecord]:
        # Old installs kept users as an array of records instead of a mapping
        if isinstance(raw, list):
            records = [UserRecord.from_dict(item) for item in raw if isinstance(item, dict)]
            return {record.username: record for record in records if record.username}
        if isinstance(raw, dict):
            return {
                username: UserRecord.from_dict({**record, "username": username})
                for username, record in raw.items()
                if isinstance(record, dict)
            }
        logger.warning(f"Unexpected users directory of type {type(raw).__name__}, reading as empty")
        return {}

    def get_users(self) -> Dict[str, UserRecord]:
        """Get the whole user directory keyed by username."""
        return self._users_from_raw(self.store.get_json(self.keys.users_key, {}))

    def save_users(self, users: Dict[str, UserRecord]) -> None:
        """Persist the whole user directory."""
        self.store.set_json(
            self.keys.users_key,
            {username: user.to_dict() for username, user in users.items()},
        )

    def get_user(self, username: str) -> Optional[UserRecord]:
        """Get a user by exact username."""
        return self.get_users().get(username)

    def get_users_count(self) -> int:
        """Get the number of registered users."""
        return len(self.get_users())

    def register(self, username: str, password: str) -> UserRecord:
        """Register a new user with an empty word list."""
        if not username or len(username) < settings.auth.min_username_length:
            raise ValidationError(
                f"Username must be at least {settings.auth.min_username_length} characters long!"
            )
        if not password or len(password) < settings.auth.min_password_length:
            raise ValidationError(
                f"Password must be at least {settings.auth.min_password_length} characters long!"
            )

        users = self.get_users()
        if username in users:
            raise ValidationError("Username already exists! Please choose a different username.")

        user = UserRecord(
            username=username,
            password_hash=generate_password_hash(password),
            created_at=now_iso(),
            words=[],
        )
        users[username] = user
        self.save_users(users)

        registrations.inc()
        logger.info(f"User registered: {username}")
        return user

    def _check_password(self, user: UserRecord, password: str) -> bool:
        if user.password_hash:
            return check_password_hash(user.password_hash, password)
        if user.password is not None:
            return hmac.compare_digest(user.password.encode("utf-8"), password.encode("utf-8"))
        return False

    def authenticate(self, username: str, password: str) -> UserRecord:
        """Check credentials and store the session."""
        users = self.get_users()
        user = users.get(username)
        if user is None or not self._check_password(user, password):
            logins.labels(result="failed").inc()
            logger.info(f"Failed login for {username}")
            raise AuthError("Invalid username or password!")

        if not user.password_hash:
            # Replace the cleartext password of an old record with a hash
            user.password_hash = generate_password_hash(password)
            user.password = None
            self.save_users(users)
            logger.info(f"Upgraded stored password of {username} to a hash")

        self.store.set(self.keys.session_key, username)
        logins.labels(result="success").inc()
        logger.info(f"User logged in: {username}")
        return user

    def login(self, username: str, password: str) -> AuthSession:
        """Authenticate and return the session to pass to other services."""
        user = self.authenticate(username, password)
        return AuthSession(username=user.username)

    def current_session(self) -> Optional[AuthSession]:
        """Get the stored session, if any."""
        try:
            username = self.store.get(self.keys.session_key)
        except StorageError:
            return None
        if not username:
            return None
        return AuthSession(username=username)

    def current_user(self) -> Optional[UserRecord]:
        """Get the logged in user, or None when there is no valid session."""
        session = self.current_session()
        if session is None:
            return None
        return self.get_user(session.username)

    def logout(self) -> None:
        """Clear the stored session."""
        self.store.remove(self.keys.session_key)
        logger.info("User logged out")

    def get_user_words(self, username: str) -> List[WordEntry]:
        """Get the word list of a user; unknown users have no words."""
        user = self.get_user(username)
        return user.words if user else []

    def save_user_words(self, username: str, words: List[WordEntry]) -> None:
        """Replace the stored word list of a user."""
        users = self.get_users()
        if username not in users:
            raise NotFoundError(f"User {username} not found")
        users[username].words = list(words)
        self.save_users(users)

    def migrate_legacy_data(self, username: str) -> int:
        """Move data from old storage layouts into the user's record.

        Converts an array-shaped users directory to the mapping layout, and moves
        the old global word list into the user's list when that list is empty.
        Returns the number of words moved.
        """
        raw = self.store.get_json(self.keys.users_key, {})
        users = self._users_from_raw(raw)
        if isinstance(raw, list):
            self.save_users(users)
            logger.info(f"Converted {len(users)} users to the mapping layout")

        user = users.get(username)
        if user is None or user.words:
            return 0

        old_words = self.store.get_json(self.keys.legacy_words_key, None)
        if not isinstance(old_words, list) or not old_words:
            return 0

        user.words = [WordEntry.from_dict(word) for word in old_words if isinstance(word, dict)]
        self.save_users(users)
        self.store.remove(self.keys.legacy_words_key)
        logger.info(f"Migrated {len(user.words)} old words to user {username}")
        return len(user.words)
