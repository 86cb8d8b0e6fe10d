"""Command line entry point for the vocabulary builder."""
import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from vocabuilder.app import VocabApp
from vocabuilder.config import ensure_directories, settings
from vocabuilder.errors import VocabError
from vocabuilder.logging_config import setup_logging
from vocabuilder.models.vocab_models import ImportMode, WordEntry
from vocabuilder.monitoring import error_count
from vocabuilder.services.word_service import parse_sort_mode

logger = logging.getLogger(__name__)

QUIZ_HELP = "[s] show/hide information  [n] next word  [r] reset progress  [q] quit"


def confirm(question: str, ask: Optional[Callable[[str], str]] = None) -> bool:
    """Ask a yes/no question; anything but yes means no."""
    try:
        answer = (ask or input)(f"{question} [y/N] ")
    except EOFError:
        print()
        return False
    return answer.strip().lower() in ("y", "yes")


def format_word(word: WordEntry) -> str:
    lines = [f"{word.word}  ({word.id})"]
    if word.translation:
        lines.append(f"  translation: {word.translation}")
    lines.append(f"  meaning: {word.meaning}")
    if word.example:
        lines.append(f"  example: {word.example}")
    lines.append(f"  added: {word.date_added[:10]}")
    return "\n".join(lines)


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


def cmd_register(app: VocabApp, args: argparse.Namespace) -> int:
    app.user_service.register(args.username, _password(args))
    print("Registration successful! You can now log in.")
    return 0


def cmd_login(app: VocabApp, args: argparse.Namespace) -> int:
    session = app.user_service.login(args.username, _password(args))
    migrated = app.user_service.migrate_legacy_data(session.username)
    print(f"Welcome, {session.username}!")
    if migrated:
        print(f"Moved {migrated} words from the old word list to your account.")
    return 0


def cmd_logout(app: VocabApp, args: argparse.Namespace) -> int:
    app.user_service.logout()
    print("Logged out.")
    return 0


def cmd_whoami(app: VocabApp, args: argparse.Namespace) -> int:
    user = app.user_service.current_user()
    if user is None:
        print("Not logged in.")
        return 1
    print(f"{user.username} ({len(user.words)} words saved)")
    return 0


def cmd_add(app: VocabApp, args: argparse.Namespace) -> int:
    words = app.word_service()
    entry = words.add_word(args.word, args.meaning, args.translation, args.example)
    print(f"Word added successfully! ({entry.id})")
    print(f"Build your vocabulary one word at a time ({words.count()} words saved)")
    return 0


def cmd_list(app: VocabApp, args: argparse.Namespace) -> int:
    words = app.word_service()
    mode = parse_sort_mode(args.sort or settings.words.default_sort)
    found = words.search(args.search or "", mode)
    if not found:
        if args.search:
            print("No words found. Try adjusting your search.")
        else:
            print("No words saved yet. Start adding words to build your vocabulary!")
        return 0
    for word in found:
        print(format_word(word))
    print(f"{len(found)} of {words.count()} words")
    return 0


def cmd_edit(app: VocabApp, args: argparse.Namespace) -> int:
    entry = app.word_service().edit_word(
        args.id,
        word=args.word,
        meaning=args.meaning,
        translation=args.translation,
        example=args.example,
    )
    print("Word updated successfully!")
    print(format_word(entry))
    return 0


def cmd_delete(app: VocabApp, args: argparse.Namespace) -> int:
    words = app.word_service()
    words.get_word(args.id)
    if not args.yes and not confirm("Are you sure you want to delete this word?"):
        print("Cancelled.")
        return 0
    words.delete_word(args.id)
    print("Word deleted successfully!")
    return 0


def cmd_stats(app: VocabApp, args: argparse.Namespace) -> int:
    stats = app.quiz_service().stats()
    print(f"Total words: {stats.total_words}")
    print(f"Words practiced: {stats.completed_count}")
    return 0


def cmd_reset_quiz(app: VocabApp, args: argparse.Namespace) -> int:
    quiz = app.quiz_service()
    confirmed = args.yes or confirm("Are you sure you want to reset your quiz progress?")
    if quiz.reset(confirmed):
        print("Quiz progress reset!")
    else:
        print("Cancelled.")
    return 0


def cmd_quiz(app: VocabApp, args: argparse.Namespace) -> int:
    quiz = app.quiz_service()
    word = quiz.start()
    print(QUIZ_HELP)
    print(f"\n>> {word.word}")
    while True:
        try:
            choice = input("> ").strip().lower()
        except EOFError:
            print()
            return 0
        if choice == "s":
            answer = quiz.toggle()
            if answer is None:
                print("(information hidden)")
                continue
            print(f"  meaning: {answer.meaning}")
            if answer.translation:
                print(f"  translation: {answer.translation}")
            if answer.example:
                print(f"  example: {answer.example}")
        elif choice == "n":
            word = quiz.next_word()
            print(f"Words practiced: {quiz.stats().completed_count}")
            print(f"\n>> {word.word}")
        elif choice == "r":
            if quiz.reset(confirm("Are you sure you want to reset your quiz progress?")):
                print("Quiz progress reset!")
                return 0
        elif choice in ("q", "quit", ""):
            return 0
        else:
            print(QUIZ_HELP)


def _write_export(data: bytes, output: Optional[str], filename: str) -> Path:
    path = Path(output) if output else settings.paths.exports_dir / filename
    try:
        if not output:
            ensure_directories()
        path.write_bytes(data)
    except OSError as e:
        raise VocabError(f"Could not write {path}: {e.strerror}") from e
    return path


def cmd_export(app: VocabApp, args: argparse.Namespace) -> int:
    transfer = app.transfer_service
    if args.user_data:
        user = app.user_service.get_user(app.require_session().username)
        data = transfer.export_user(user)
        path = _write_export(data, args.output, transfer.export_filename(user.username))
        print(f"Exported account data to {path}")
        return 0

    words = app.word_service()
    data = transfer.export_words(words.get_words())
    path = _write_export(data, args.output, transfer.export_filename("backup"))
    print(f"Exported {words.count()} words successfully! ({path})")
    return 0


def cmd_export_all(app: VocabApp, args: argparse.Namespace) -> int:
    transfer = app.transfer_service
    data = transfer.export_all_users()
    path = _write_export(data, args.output, transfer.export_filename("all-users"))
    print(f"Exported all users to {path}")
    return 0


def cmd_import(app: VocabApp, args: argparse.Namespace) -> int:
    words = app.word_service()
    try:
        data = Path(args.path).read_bytes()
    except OSError as e:
        raise VocabError(f"Could not read {args.path}: {e.strerror}") from e

    records = app.transfer_service.parse_import(data)
    if args.mode is None:
        replace = confirm(
            f"Import {len(records)} words? Replace all current words (otherwise add to them)?"
        )
        mode = ImportMode.REPLACE if replace else ImportMode.MERGE
    else:
        mode = ImportMode(args.mode)

    count = app.transfer_service.import_words(words, data, mode)
    print(f"Successfully imported {count} words!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabuilder", description="Vocabulary flashcards")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("register", cmd_register, "Create an account"),
        ("login", cmd_login, "Log in"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("username")
        p.add_argument("--password", default=None)
        p.set_defaults(func=func)

    sub.add_parser("logout", help="Log out").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the logged in user").set_defaults(func=cmd_whoami)

    p = sub.add_parser("add", help="Add a word")
    p.add_argument("word")
    p.add_argument("meaning")
    p.add_argument("--translation", default="")
    p.add_argument("--example", default="")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("list", help="List saved words")
    p.add_argument("--search", default="")
    p.add_argument("--sort", default=None, help="newest, oldest, alphabetical or reverse")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("edit", help="Change a saved word")
    p.add_argument("id")
    p.add_argument("--word", default=None)
    p.add_argument("--meaning", default=None)
    p.add_argument("--translation", default=None)
    p.add_argument("--example", default=None)
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete a saved word")
    p.add_argument("id")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_delete)

    sub.add_parser("quiz", help="Practice with random words").set_defaults(func=cmd_quiz)
    sub.add_parser("stats", help="Show quiz statistics").set_defaults(func=cmd_stats)

    p = sub.add_parser("reset-quiz", help="Reset quiz progress")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_reset_quiz)

    p = sub.add_parser("export", help="Export words to a JSON file")
    p.add_argument("--output", default=None)
    p.add_argument("--user-data", action="store_true", help="Export account data with the words")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("export-all", help="Export all users to a JSON file")
    p.add_argument("--output", default=None)
    p.set_defaults(func=cmd_export_all)

    p = sub.add_parser("import", help="Import words from a JSON file")
    p.add_argument("path")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--replace", dest="mode", action="store_const", const=ImportMode.REPLACE.value)
    mode.add_argument("--merge", dest="mode", action="store_const", const=ImportMode.MERGE.value)
    p.set_defaults(func=cmd_import)

    return parser


def main(argv: Optional[List[str]] = None, app: Optional[VocabApp] = None) -> int:
    """Run one command. Errors are shown as a notice and give exit status 1."""
    args = build_parser().parse_args(argv)
    if app is None:
        setup_logging(level=args.log_level)

    app = app or VocabApp()
    try:
        app.start()
        return args.func(app, args)
    except VocabError as e:
        error_count.labels(error_type=type(e).__name__).inc()
        logger.debug(f"Command {args.command} failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print()
        return 130
    finally:
        app.stop()


if __name__ == "__main__":
    sys.exit(main())
