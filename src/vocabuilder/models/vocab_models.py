"""Models for the vocabulary data kept in the store."""
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

WORD_FIELDS = ("id", "word", "meaning", "translation", "example", "dateAdded", "timestamp", "status")


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def now_iso() -> str:
    """Current time in the ISO format used for dateAdded/createdAt."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_entry_id() -> str:
    """Generate a unique word id."""
    return uuid.uuid4().hex


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _millis(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class SortMode(Enum):
    """Orderings of the word list."""
    NEWEST = "newest"  # timestamp descending
    OLDEST = "oldest"  # timestamp ascending
    ALPHABETICAL = "alphabetical"  # word A-Z
    REVERSE = "reverse"  # word Z-A


class ImportMode(Enum):
    """How imported words are combined with the current list."""
    REPLACE = "replace"  # discard current list, keep imported ids
    MERGE = "merge"  # prepend imported words with fresh ids


@dataclass
class WordEntry:
    """One vocabulary flashcard."""
    id: str
    word: str
    meaning: str
    translation: str = ""
    example: str = ""
    date_added: str = ""
    timestamp: int = 0
    status: str = "new"
    extra: Dict[str, Any] = field(default_factory=dict)  # unknown keys from imports

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "word": self.word,
            "meaning": self.meaning,
            "translation": self.translation,
            "example": self.example,
            "dateAdded": self.date_added,
            "timestamp": self.timestamp,
            "status": self.status,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordEntry":
        """Build an entry from stored or imported JSON, tolerating missing keys."""
        return cls(
            id=_text(data.get("id")),
            word=_text(data.get("word")),
            meaning=_text(data.get("meaning")),
            translation=_text(data.get("translation")),
            example=_text(data.get("example")),
            date_added=_text(data.get("dateAdded")),
            timestamp=_millis(data.get("timestamp")),
            status=_text(data.get("status")) or "new",
            extra={k: v for k, v in data.items() if k not in WORD_FIELDS},
        )


@dataclass
class UserRecord:
    """A registered user and their word list."""
    username: str
    password_hash: str = ""
    created_at: str = ""
    words: List[WordEntry] = field(default_factory=list)
    password: Optional[str] = None  # cleartext from old records, dropped on next login

    def to_dict(self, include_credentials: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {"username": self.username}
        if include_credentials:
            if self.password_hash:
                data["passwordHash"] = self.password_hash
            if self.password is not None:
                data["password"] = self.password
        data["createdAt"] = self.created_at
        data["words"] = [word.to_dict() for word in self.words]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        words = data.get("words") or []
        return cls(
            username=_text(data.get("username")),
            password_hash=_text(data.get("passwordHash")),
            created_at=_text(data.get("createdAt")),
            words=[WordEntry.from_dict(word) for word in words if isinstance(word, dict)],
            password=data.get("password"),
        )


@dataclass(frozen=True)
class AuthSession:
    """The currently authenticated user."""
    username: str


@dataclass
class QuizAnswer:
    """Information shown when the answer of a quiz card is revealed."""
    word: str
    meaning: str
    translation: Optional[str] = None
    example: Optional[str] = None


@dataclass
class QuizStats:
    """Numbers shown on the quiz page."""
    total_words: int
    completed_count: int


@dataclass
class QuizState:
    """State of the running quiz. Only completed_count is persisted."""
    current_word: Optional[WordEntry] = None
    revealed: bool = False
    active: bool = False
    completed_count: int = 0
