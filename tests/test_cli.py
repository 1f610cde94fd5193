"""
tests/test_cli.py
Tests for the entitygen command-line interface (exit codes and output).
"""

from __future__ import annotations

from typing import List

import pytest

from entitygen import __version__
from entitygen.cli import (
    EXIT_PARSE_ERROR,
    EXIT_PRECONDITION_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SUCCESS,
    EXIT_WRITE_ERROR,
    cli_main,
)


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return exc_info.value.code


@pytest.fixture()
def base_args(project, sqlite_url) -> List[str]:
    return ["-p", str(project.root), "--database-url", sqlite_url]


class TestSuccess:

    def test_creates_entity(self, project, user_model_source, base_args, capsys) -> None:
        project.write_model("User", user_model_source)

        assert _run(["User", *base_args]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert out.startswith("Entity class [UserEntity] created at [")
        assert "UserEntity.php]." in out
        content = project.entity_path("UserEntity").read_text(encoding="utf-8")
        assert "final class UserEntity extends Data" in content

    def test_options(self, project, user_model_source, base_args) -> None:
        project.write_model("User", user_model_source)

        code = _run(["User", *base_args, "-N", "Http\\Resources", "-s", "Resource", "--resource"])

        assert code == EXIT_SUCCESS
        content = (project.root / "app" / "Http" / "Resources" / "UserResource.php").read_text(
            encoding="utf-8"
        )
        assert "namespace App\\Http\\Resources;" in content
        assert "final class UserResource extends Resource" in content

    def test_dry_run_prints_class(self, project, user_model_source, base_args, capsys) -> None:
        project.write_model("User", user_model_source)

        assert _run(["User", *base_args, "--dry-run"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert out.startswith("<?php\n")
        assert "public readonly string $email_verified_at\n" in out
        assert not project.entity_path("UserEntity").exists()

    def test_quiet(self, project, user_model_source, base_args, capsys) -> None:
        project.write_model("User", user_model_source)
        assert _run(["User", *base_args, "-q"]) == EXIT_SUCCESS
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_force_overwrites(self, project, user_model_source, base_args) -> None:
        project.write_model("User", user_model_source)
        output = project.write("app/Entities/UserEntity.php", "<?php // stale\n")

        assert _run(["User", *base_args, "--force"]) == EXIT_SUCCESS
        assert "UserEntity extends Data" in output.read_text(encoding="utf-8")

    def test_version(self, capsys) -> None:
        assert _run(["--version"]) == 0
        assert capsys.readouterr().out.strip() == f"entitygen v{__version__}"


class TestExitCodes:

    def test_missing_model(self, base_args, capsys) -> None:
        assert _run(["User", *base_args]) == EXIT_PRECONDITION_ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_existing_output(self, project, user_model_source, base_args, capsys) -> None:
        project.write_model("User", user_model_source)
        project.write("app/Entities/UserEntity.php", "<?php // keep\n")

        assert _run(["User", *base_args]) == EXIT_PRECONDITION_ERROR
        assert "already exists" in capsys.readouterr().err

    def test_invalid_model_name(self, base_args, capsys) -> None:
        assert _run(["9Lives", *base_args]) == EXIT_PRECONDITION_ERROR
        assert "not a valid PHP class name" in capsys.readouterr().err

    def test_parse_error(self, project, base_args, capsys) -> None:
        project.write_model("User", "<?php\n\nclass User {\n    public function (\n")

        assert _run(["User", *base_args]) == EXIT_PARSE_ERROR
        assert "Parse error in model file" in capsys.readouterr().err
        assert not project.entity_path("UserEntity").exists()

    def test_schema_error(self, project, user_model_source, base_args) -> None:
        project.write_model("User", user_model_source)
        assert _run(["User", *base_args, "--table", "missing_table"]) == EXIT_SCHEMA_ERROR

    def test_write_error(self, project, user_model_source, base_args) -> None:
        project.write_model("User", user_model_source)
        project.write("app/Entities", "not a directory")
        assert _run(["User", *base_args]) == EXIT_WRITE_ERROR

    def test_missing_model_argument(self, capsys) -> None:
        assert _run([]) == 2
        assert "MODEL" in capsys.readouterr().err
