"""Export and import of word lists as JSON documents."""
import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from vocabuilder.errors import FormatError, ValidationError
from vocabuilder.models.vocab_models import (
    ImportMode,
    UserRecord,
    WordEntry,
    new_entry_id,
    now_iso,
    now_millis,
)
from vocabuilder.monitoring import words_imported
from vocabuilder.services.user_service import UserService
from vocabuilder.services.word_service import WordService

logger = logging.getLogger(__name__)


def _dump(data: Any) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


class TransferService:
    """Service for backups of word lists and user data."""

    def __init__(self, user_service: UserService):
        """Initialize the service with the user directory."""
        self.user_service = user_service

    @staticmethod
    def export_filename(entity: str = "backup", day: Optional[date] = None) -> str:
        """File name for an export, e.g. vocabulary-backup-2024-01-31.json."""
        day = day or date.today()
        return f"vocabulary-{entity}-{day.isoformat()}.json"

    def export_words(self, words: Iterable[WordEntry]) -> bytes:
        """Serialize a word list as a pretty-printed JSON array."""
        words = list(words)
        if not words:
            raise ValidationError("No words to export!")
        logger.info(f"Exporting {len(words)} words")
        return _dump([word.to_dict() for word in words])

    def export_user(self, user: UserRecord) -> bytes:
        """Serialize one user's account data and words."""
        return _dump({
            "username": user.username,
            "createdAt": user.created_at,
            "words": [word.to_dict() for word in user.words],
            "exportedAt": now_iso(),
        })

    def export_all_users(self) -> bytes:
        """Serialize the whole user directory, without credentials."""
        users = self.user_service.get_users()
        logger.info(f"Exporting data of {len(users)} users")
        return _dump({
            username: user.to_dict(include_credentials=False)
            for username, user in users.items()
        })

    def parse_import(self, data: Union[bytes, str]) -> List[Dict[str, Any]]:
        """Parse an import file into a list of word records."""
        try:
            text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
            records = json.loads(text)
        except (UnicodeDecodeError, ValueError) as e:
            raise FormatError("Error importing words. Please check the file format.") from e

        if not isinstance(records, list):
            raise FormatError("Invalid file format: expected a list of words.")
        if not all(isinstance(record, dict) for record in records):
            raise FormatError("Invalid file format: every word must be an object.")
        return records

    def _replace_entry(self, record: Dict[str, Any]) -> WordEntry:
        entry = WordEntry.from_dict(record)
        entry.id = entry.id or new_entry_id()
        entry.date_added = entry.date_added or now_iso()
        entry.timestamp = entry.timestamp or now_millis()
        return entry

    def _merge_entry(self, record: Dict[str, Any]) -> WordEntry:
        entry = WordEntry.from_dict(record)
        entry.id = new_entry_id()
        entry.date_added = now_iso()
        entry.timestamp = now_millis()
        return entry

    def import_words(
        self,
        word_service: WordService,
        data: Union[bytes, str],
        mode: ImportMode,
    ) -> int:
        """Import words, replacing or extending the current list.

        Replace keeps the ids, dates and timestamps found in the file and fills
        in missing ones. Merge always gives the imported words new ones.
        """
        records = self.parse_import(data)
        mode = ImportMode(mode)

        if mode is ImportMode.REPLACE:
            word_service.replace_words([self._replace_entry(record) for record in records])
        else:
            word_service.prepend_words([self._merge_entry(record) for record in records])

        words_imported.labels(mode=mode.value).inc(len(records))
        logger.info(f"Imported {len(records)} words ({mode.value})")
        return len(records)
