"""Tests for the command surface (cli/app.py).

These tests prove that:
* The entry point, version, exception hierarchy and exit codes are wired.
* Every verb reaches the store and saves only after mutating commands.
* Output is sorted by identifier and ``--json`` emits valid JSON.
* The ``cli()`` error boundary maps errors to the documented exit codes.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from user_registry import __version__
from user_registry.cli import exit_codes
from user_registry.cli.app import cli, main
from user_registry.config import FILE_ENV_VAR
from user_registry.exceptions import (
    DeserializationError,
    EnvironmentError,
    IoError,
    NotFoundError,
    SerializationError,
    StorageError,
    UserRegistryError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(data_file: Path, *argv: str) -> int:
    return main(["-f", str(data_file), *argv])


def _run_json(data_file: Path, capsys: pytest.CaptureFixture[str], *argv: str) -> object:
    capsys.readouterr()
    assert main(["-f", str(data_file), "--json", *argv]) == exit_codes.SUCCESS
    return json.loads(capsys.readouterr().out)


def _add(data_file: Path, name: str, email: str, age: int) -> None:
    assert _run(data_file, "add", "-n", name, "-e", email, "-a", str(age)) == exit_codes.SUCCESS


def _stored(data_file: Path) -> dict[str, dict[str, object]]:
    return json.loads(data_file.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Scaffold
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ValidationError,
            StorageError,
            IoError,
            SerializationError,
            DeserializationError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[UserRegistryError]) -> None:
        assert issubclass(exc_class, UserRegistryError)

    @pytest.mark.parametrize("exc_class", [IoError, SerializationError, DeserializationError])
    def test_persistence_errors_are_storage_errors(self, exc_class: type[StorageError]) -> None:
        assert issubclass(exc_class, StorageError)

    def test_hint_is_stored(self) -> None:
        err = UserRegistryError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_not_found_carries_id(self) -> None:
        err = NotFoundError(4)
        assert err.user_id == 4
        assert str(err) == "User with id 4 not found"
        assert isinstance(err, UserRegistryError)


class TestExitCodes:
    def test_values(self) -> None:
        assert exit_codes.SUCCESS == 0
        assert exit_codes.GENERAL_ERROR == 1
        assert exit_codes.UNEXPECTED_ERROR == 2
        assert exit_codes.KEYBOARD_INTERRUPT == 130


class TestRouting:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == exit_codes.SUCCESS
        assert "add" in capsys.readouterr().out

    def test_unknown_command(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["frobnicate"])
        assert exc_info.value.code == 2

    def test_doctor_dispatch(self, monkeypatch: pytest.MonkeyPatch, data_file: Path) -> None:
        from user_registry.cli import app as app_module

        seen: list[Path] = []
        monkeypatch.setattr(
            app_module, "_handle_doctor", lambda path: seen.append(path) or exit_codes.SUCCESS,
        )
        assert _run(data_file, "doctor") == exit_codes.SUCCESS
        assert seen == [data_file]


# ---------------------------------------------------------------------------
# Data file resolution
# ---------------------------------------------------------------------------

class TestDataFile:
    def test_env_var_used_without_flag(
        self, monkeypatch: pytest.MonkeyPatch, data_file: Path,
    ) -> None:
        monkeypatch.setenv(FILE_ENV_VAR, str(data_file))
        assert main(["add", "-n", "Ann", "-e", "ann@x.com", "-a", "25"]) == exit_codes.SUCCESS
        assert "1" in _stored(data_file)

    def test_flag_beats_env_var(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, data_file: Path,
    ) -> None:
        monkeypatch.setenv(FILE_ENV_VAR, str(tmp_path / "other.json"))
        _add(data_file, "Ann", "ann@x.com", 25)
        assert data_file.exists()
        assert not (tmp_path / "other.json").exists()

    def test_default_file_in_cwd(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        assert main(["add", "-n", "Ann", "-e", "ann@x.com", "-a", "25"]) == exit_codes.SUCCESS
        assert (tmp_path / "users.json").exists()


# ---------------------------------------------------------------------------
# Verbs
# ---------------------------------------------------------------------------

class TestAdd:
    def test_prints_id_and_saves(
        self, data_file: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        assert "Added user with ID: 1" in capsys.readouterr().out
        assert _stored(data_file) == {
            "1": {"id": 1, "name": "Ann", "email": "ann@x.com", "age": 25},
        }

    def test_ids_continue_across_invocations(self, data_file: Path) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        _add(data_file, "Bob", "bob@x.com", 40)
        assert list(_stored(data_file)) == ["1", "2"]

    def test_json_output(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        payload = _run_json(data_file, capsys, "add", "-n", "Ann", "-e", "ann@x.com", "-a", "25")
        assert payload == {"id": 1, "name": "Ann", "email": "ann@x.com", "age": 25}

    def test_invalid_does_not_create_file(self, data_file: Path) -> None:
        with pytest.raises(ValidationError):
            _run(data_file, "add", "-n", "Ann", "-e", "nope", "-a", "25")
        assert not data_file.exists()

    def test_non_integer_age_is_usage_error(self, data_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run(data_file, "add", "-n", "Ann", "-e", "a@b", "-a", "old")
        assert exc_info.value.code == 2


class TestList:
    def test_empty(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(data_file, "list") == exit_codes.SUCCESS
        assert "No users found." in capsys.readouterr().out
        assert not data_file.exists()

    def test_table(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        _add(data_file, "Bob", "bob@x.com", 40)
        capsys.readouterr()

        assert _run(data_file, "list") == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "Ann" in out
        assert out.index("Ann") < out.index("Bob")

    def test_json_sorted_by_id(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        data_file.write_text(
            json.dumps({
                "2": {"id": 2, "name": "Bob", "email": "bob@x.com", "age": 40},
                "1": {"id": 1, "name": "Ann", "email": "ann@x.com", "age": 25},
            }),
            encoding="utf-8",
        )
        before = data_file.read_text(encoding="utf-8")

        payload = _run_json(data_file, capsys, "list")
        assert [user["id"] for user in payload] == [1, 2]  # type: ignore[index, union-attr]
        assert data_file.read_text(encoding="utf-8") == before

    def test_markup_in_names_is_literal(
        self, data_file: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _add(data_file, "[bold]Ann", "ann@x.com", 25)
        capsys.readouterr()
        _run(data_file, "list")
        assert "[bold]Ann" in capsys.readouterr().out


class TestGet:
    def test_found(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        capsys.readouterr()
        assert _run(data_file, "get", "-i", "1") == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "Name: Ann" in out
        assert "Email: ann@x.com" in out

    def test_missing_raises(self, data_file: Path) -> None:
        with pytest.raises(NotFoundError):
            _run(data_file, "get", "-i", "3")

    def test_negative_id_is_usage_error(self, data_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run(data_file, "get", "-i", "-3")
        assert exc_info.value.code == 2


class TestRemove:
    def test_removes_and_saves(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        _add(data_file, "Bob", "bob@x.com", 40)
        capsys.readouterr()

        assert _run(data_file, "remove", "-i", "1") == exit_codes.SUCCESS
        assert "Removed user: Ann (ann@x.com)" in capsys.readouterr().out
        assert list(_stored(data_file)) == ["2"]

    def test_markup_in_removed_name_is_literal(
        self, data_file: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _add(data_file, "[/x]Ann", "ann@x.com", 25)
        capsys.readouterr()
        assert _run(data_file, "remove", "-i", "1") == exit_codes.SUCCESS
        assert "Removed user: [/x]Ann (ann@x.com)" in capsys.readouterr().out

    def test_missing_raises_and_keeps_file(self, data_file: Path) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        before = data_file.read_text(encoding="utf-8")
        with pytest.raises(NotFoundError):
            _run(data_file, "remove", "-i", "9")
        assert data_file.read_text(encoding="utf-8") == before

    def test_next_add_after_reload(self, data_file: Path) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        _add(data_file, "Bob", "bob@x.com", 40)
        _run(data_file, "remove", "-i", "1")
        _add(data_file, "Cid", "cid@x.com", 33)
        assert list(_stored(data_file)) == ["2", "3"]


class TestUpdate:
    def test_single_field(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        assert _run(data_file, "update", "-i", "1", "--email", "ann@y.org") == exit_codes.SUCCESS
        assert "Updated user with ID: 1" in capsys.readouterr().out
        assert _stored(data_file)["1"] == {
            "id": 1, "name": "Ann", "email": "ann@y.org", "age": 25,
        }

    def test_json_output(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        payload = _run_json(data_file, capsys, "update", "-i", "1", "--age", "26")
        assert payload == {"id": 1, "name": "Ann", "email": "ann@x.com", "age": 26}

    def test_requires_a_field(self, data_file: Path) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        with pytest.raises(SystemExit) as exc_info:
            _run(data_file, "update", "-i", "1")
        assert exc_info.value.code == 2

    def test_invalid_keeps_file(self, data_file: Path) -> None:
        _add(data_file, "Ann", "ann@x.com", 25)
        before = data_file.read_text(encoding="utf-8")
        with pytest.raises(ValidationError):
            _run(data_file, "update", "-i", "1", "--age", "500")
        assert data_file.read_text(encoding="utf-8") == before


class TestSearch:
    def test_matches(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        for name in ("John", "Jojo", "jOHN", "Amy"):
            _add(data_file, name, f"{name.lower()}@x.com", 30)
        payload = _run_json(data_file, capsys, "search", "-q", "jo")
        assert [user["name"] for user in payload] == ["John", "Jojo", "jOHN"]  # type: ignore[index, union-attr]

    def test_no_match(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Amy", "amy@x.com", 30)
        capsys.readouterr()
        assert _run(data_file, "search", "-q", "zed") == exit_codes.SUCCESS
        assert "No users found matching 'zed'." in capsys.readouterr().out

    def test_table_title(self, data_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(data_file, "Amy", "amy@x.com", 30)
        capsys.readouterr()
        _run(data_file, "search", "-q", "am")
        assert "Found 1 user(s)" in capsys.readouterr().out

    def test_markup_in_query_is_literal(
        self, data_file: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _add(data_file, "Amy", "amy@x.com", 30)
        capsys.readouterr()
        assert _run(data_file, "search", "-q", "[/nope]") == exit_codes.SUCCESS
        assert "No users found matching '[/nope]'." in capsys.readouterr().out

    def test_markup_in_table_title_is_literal(
        self, data_file: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _add(data_file, "Amy [/b]", "amy@x.com", 30)
        capsys.readouterr()
        assert _run(data_file, "search", "-q", "[/b]") == exit_codes.SUCCESS
        assert "matching '[/b]'" in capsys.readouterr().out


class TestCorruptFile:
    def test_load_error_surfaces(self, data_file: Path) -> None:
        data_file.write_text("not json", encoding="utf-8")
        with pytest.raises(DeserializationError):
            _run(data_file, "list")


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _cli(self, monkeypatch: pytest.MonkeyPatch, *argv: str) -> int | str | None:
        monkeypatch.setattr(sys, "argv", ["user-registry", *argv])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        return exc_info.value.code

    def test_success(self, monkeypatch: pytest.MonkeyPatch, data_file: Path) -> None:
        code = self._cli(monkeypatch, "-f", str(data_file), "list")
        assert code == exit_codes.SUCCESS

    def test_registry_error(
        self,
        monkeypatch: pytest.MonkeyPatch,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = self._cli(monkeypatch, "-f", str(data_file), "get", "-i", "9")
        assert code == exit_codes.GENERAL_ERROR
        assert "User with id 9 not found" in capsys.readouterr().err

    def test_hint_rendered(
        self,
        monkeypatch: pytest.MonkeyPatch,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = self._cli(
            monkeypatch, "-f", str(data_file), "add", "-n", "A", "-e", "a@b", "-a", "300",
        )
        assert code == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "Age must be realistic" in err
        assert "Hint:" in err

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from user_registry.cli import app as app_module

        def _interrupt(argv: list[str] | None = None) -> int:
            raise KeyboardInterrupt

        monkeypatch.setattr(app_module, "main", _interrupt)
        assert self._cli(monkeypatch) == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        from user_registry.cli import app as app_module

        def _explode(argv: list[str] | None = None) -> int:
            raise RuntimeError("kaboom")

        monkeypatch.setattr(app_module, "main", _explode)
        assert self._cli(monkeypatch) == exit_codes.UNEXPECTED_ERROR
        assert "RuntimeError: kaboom" in capsys.readouterr().err

    def test_markup_in_error_message_is_literal(
        self,
        monkeypatch: pytest.MonkeyPatch,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        data_file.write_text('{"[/k]": {}}', encoding="utf-8")
        code = self._cli(monkeypatch, "-f", str(data_file), "list")
        assert code == exit_codes.GENERAL_ERROR
        assert "'[/k]'" in capsys.readouterr().err

    def test_markup_in_unexpected_error_is_literal(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        from user_registry.cli import app as app_module

        def _explode(argv: list[str] | None = None) -> int:
            raise RuntimeError("[/boom]")

        monkeypatch.setattr(app_module, "main", _explode)
        assert self._cli(monkeypatch) == exit_codes.UNEXPECTED_ERROR
        assert "RuntimeError: [/boom]" in capsys.readouterr().err

    def test_unencodable_name_is_reported(
        self,
        monkeypatch: pytest.MonkeyPatch,
        data_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = self._cli(
            monkeypatch, "-f", str(data_file), "add", "-n", "a\udc80", "-e", "a@b", "-a", "1",
        )
        assert code == exit_codes.GENERAL_ERROR
        assert "Cannot encode users" in capsys.readouterr().err
        assert not data_file.exists()
