"""Tests for the application and the command line."""
import json
from pathlib import Path
from typing import List

import pytest
from sqlalchemy.orm import Session

from vocabuilder.__main__ import main
from vocabuilder.app import VocabApp
from vocabuilder.errors import AuthError
from vocabuilder.services.user_service import UserService


@pytest.fixture
def app(db: Session) -> VocabApp:
    """Create an application on the test database."""
    return VocabApp(db)


@pytest.fixture
def logged_in(app: VocabApp) -> VocabApp:
    """Register and log in a user through the command line."""
    assert main(["register", "alice", "--password", "secret"], app) == 0
    assert main(["login", "alice", "--password", "secret"], app) == 0
    return app


def feed_input(monkeypatch, answers: List[str]) -> None:
    answers = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))


def test_start_and_stop(app: VocabApp) -> None:
    """Test starting and stopping the application."""
    app.start()
    app.start()  # Should not raise or cause issues
    assert app.running
    assert app.user_service is not None

    app.stop()
    app.stop()
    assert not app.running
    assert app.user_service is None
    # The session passed in is not closed by the app
    assert app.db is not None


def test_require_session(app: VocabApp) -> None:
    """Test commands that need a login."""
    app.start()
    with pytest.raises(AuthError):
        app.require_session()
    app.stop()


def test_register_and_login(app: VocabApp, capsys) -> None:
    """Test the account commands."""
    assert main(["register", "alice", "--password", "secret"], app) == 0
    assert main(["register", "alice", "--password", "other"], app) == 1
    assert "already exists" in capsys.readouterr().err

    assert main(["login", "alice", "--password", "wrong"], app) == 1
    assert main(["whoami"], app) == 1

    assert main(["login", "alice", "--password", "secret"], app) == 0
    assert main(["whoami"], app) == 0
    assert "alice (0 words saved)" in capsys.readouterr().out

    assert main(["logout"], app) == 0
    assert main(["whoami"], app) == 1


def test_add_requires_login(app: VocabApp, capsys) -> None:
    """Test that word commands fail without a session."""
    assert main(["add", "word", "meaning"], app) == 1
    assert "Please log in first!" in capsys.readouterr().err


def test_word_commands(logged_in: VocabApp, db: Session, capsys) -> None:
    """Test adding, listing, editing and deleting words."""
    assert main(["add", "zebra", "striped animal", "--translation", "зебра"], logged_in) == 0
    assert main(["add", "apple", "a fruit", "--example", "An apple a day."], logged_in) == 0
    assert main(["add", "Apple", "duplicate"], logged_in) == 1
    capsys.readouterr()

    assert main(["list", "--sort", "alphabetical"], logged_in) == 0
    out = capsys.readouterr().out
    assert out.index("apple") < out.index("zebra")
    assert "2 of 2 words" in out

    assert main(["list", "--search", "fruit"], logged_in) == 0
    out = capsys.readouterr().out
    assert "apple" in out and "zebra" not in out

    assert main(["list", "--sort", "shuffle"], logged_in) == 1

    words = UserService(db).get_user_words("alice")
    zebra = next(w for w in words if w.word == "zebra")

    assert main(["edit", zebra.id, "--meaning", "horse with stripes"], logged_in) == 0
    assert UserService(db).get_user_words("alice")[1].meaning == "horse with stripes"

    assert main(["delete", zebra.id, "--yes"], logged_in) == 0
    assert main(["delete", zebra.id, "--yes"], logged_in) == 1
    assert [w.word for w in UserService(db).get_user_words("alice")] == ["apple"]


def test_delete_asks_for_confirmation(logged_in: VocabApp, db: Session, monkeypatch) -> None:
    """Test that delete is cancelled unless confirmed."""
    main(["add", "keep", "me"], logged_in)
    word = UserService(db).get_user_words("alice")[0]

    feed_input(monkeypatch, ["n"])
    assert main(["delete", word.id], logged_in) == 0
    assert len(UserService(db).get_user_words("alice")) == 1

    feed_input(monkeypatch, ["y"])
    assert main(["delete", word.id], logged_in) == 0
    assert UserService(db).get_user_words("alice") == []


def test_quiz_session(logged_in: VocabApp, monkeypatch, capsys) -> None:
    """Test an interactive quiz."""
    main(["add", "lucid", "clear", "--example", "A lucid explanation."], logged_in)
    capsys.readouterr()

    feed_input(monkeypatch, ["s", "s", "n", "q"])
    assert main(["quiz"], logged_in) == 0

    out = capsys.readouterr().out
    assert ">> lucid" in out
    assert "meaning: clear" in out
    assert "example: A lucid explanation." in out
    assert "(information hidden)" in out
    assert "Words practiced: 1" in out

    assert main(["stats"], logged_in) == 0
    assert "Words practiced: 1" in capsys.readouterr().out

    assert main(["reset-quiz", "--yes"], logged_in) == 0
    main(["stats"], logged_in)
    assert "Words practiced: 0" in capsys.readouterr().out


def test_quiz_without_words(logged_in: VocabApp, capsys) -> None:
    """Test that an empty list cannot be quizzed."""
    assert main(["quiz"], logged_in) == 1
    assert "add some words first" in capsys.readouterr().err


def test_export_and_import(logged_in: VocabApp, db: Session, tmp_path: Path) -> None:
    """Test a backup round trip through files."""
    main(["add", "first", "1"], logged_in)
    main(["add", "second", "2"], logged_in)
    backup = tmp_path / "backup.json"

    assert main(["export", "--output", str(backup)], logged_in) == 0
    assert [w["word"] for w in json.loads(backup.read_text(encoding="utf-8"))] == ["second", "first"]

    main(["add", "third", "3"], logged_in)
    assert main(["import", str(backup), "--replace"], logged_in) == 0
    assert [w.word for w in UserService(db).get_user_words("alice")] == ["second", "first"]

    assert main(["import", str(backup), "--merge"], logged_in) == 0
    assert len(UserService(db).get_user_words("alice")) == 4


def test_import_asks_for_mode(logged_in: VocabApp, db: Session, tmp_path: Path, monkeypatch) -> None:
    """Test that import without a mode asks whether to replace."""
    main(["add", "existing", "e"], logged_in)
    source = tmp_path / "words.json"
    source.write_text(json.dumps([{"word": "imported", "meaning": "i"}]), encoding="utf-8")

    feed_input(monkeypatch, ["n"])
    assert main(["import", str(source)], logged_in) == 0
    assert [w.word for w in UserService(db).get_user_words("alice")] == ["imported", "existing"]


def test_import_errors(logged_in: VocabApp, tmp_path: Path, capsys) -> None:
    """Test missing and malformed import files."""
    assert main(["import", str(tmp_path / "missing.json"), "--merge"], logged_in) == 1

    bad = tmp_path / "bad.json"
    bad.write_text('{"word": "not a list"}', encoding="utf-8")
    assert main(["import", str(bad), "--merge"], logged_in) == 1
    assert "Invalid file format" in capsys.readouterr().err


def test_export_user_data_and_all(logged_in: VocabApp, tmp_path: Path) -> None:
    """Test account and admin exports."""
    main(["add", "word", "meaning"], logged_in)

    user_file = tmp_path / "user.json"
    assert main(["export", "--user-data", "--output", str(user_file)], logged_in) == 0
    assert json.loads(user_file.read_text(encoding="utf-8"))["username"] == "alice"

    all_file = tmp_path / "all.json"
    assert main(["export-all", "--output", str(all_file)], logged_in) == 0
    data = json.loads(all_file.read_text(encoding="utf-8"))
    assert list(data) == ["alice"]
    assert "passwordHash" not in data["alice"]


def close_input(monkeypatch) -> None:
    def raise_eof(prompt=""):
        raise EOFError
    monkeypatch.setattr("builtins.input", raise_eof)


def test_export_to_missing_directory(logged_in: VocabApp, tmp_path: Path, capsys) -> None:
    """Test that a failed export write is shown as an error."""
    main(["add", "word", "meaning"], logged_in)
    capsys.readouterr()

    target = tmp_path / "nope" / "out.json"
    assert main(["export", "--output", str(target)], logged_in) == 1
    assert "Could not write" in capsys.readouterr().err
    assert not target.exists()


def test_quiz_ends_on_closed_input(logged_in: VocabApp, monkeypatch, capsys) -> None:
    """Test that end of input quits the quiz cleanly."""
    main(["add", "brisk", "quick"], logged_in)
    close_input(monkeypatch)

    assert main(["quiz"], logged_in) == 0
    assert ">> brisk" in capsys.readouterr().out


def test_confirm_on_closed_input(logged_in: VocabApp, db: Session, monkeypatch) -> None:
    """Test that end of input answers no to a confirmation."""
    main(["add", "stay", "kept"], logged_in)
    word = UserService(db).get_user_words("alice")[0]
    close_input(monkeypatch)

    assert main(["delete", word.id], logged_in) == 0
    assert len(UserService(db).get_user_words("alice")) == 1


if __name__ == "__main__":
    pytest.main([__file__])
