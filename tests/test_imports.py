"""
tests/test_imports.py
Unit tests for entitygen.imports (use-statement resolution).
"""

from __future__ import annotations

import pytest

from entitygen.imports import collect_imports, qualify, resolve_class_name


class TestCollectImports:
    """Single, aliased and grouped use statements."""

    def test_single_use(self, parse) -> None:
        tree = parse(r"use App\Casts\AsUuid;")
        assert collect_imports(tree) == {"AsUuid": r"App\Casts\AsUuid"}

    def test_leading_backslash_is_dropped(self, parse) -> None:
        tree = parse(r"use \Illuminate\Support\Carbon;")
        assert collect_imports(tree) == {"Carbon": r"Illuminate\Support\Carbon"}

    def test_aliased_use(self, parse) -> None:
        tree = parse(r"use App\Casts\AsUuid as Uuid;")
        assert collect_imports(tree) == {"Uuid": r"App\Casts\AsUuid"}

    def test_comma_separated_use(self, parse) -> None:
        tree = parse(r"use App\Casts\AsUuid, App\Casts\AsMoney as Money;")
        assert collect_imports(tree) == {
            "AsUuid": r"App\Casts\AsUuid",
            "Money": r"App\Casts\AsMoney",
        }

    def test_grouped_use(self, parse) -> None:
        tree = parse(r"use App\Casts\{AsUuid, AsMoney as Money};")
        assert collect_imports(tree) == {
            "AsUuid": r"App\Casts\AsUuid",
            "Money": r"App\Casts\AsMoney",
        }

    def test_single_name_import(self, parse) -> None:
        tree = parse("use Closure;")
        assert collect_imports(tree) == {"Closure": "Closure"}

    def test_one_entry_per_imported_name(self, parse) -> None:
        tree = parse(r"""
            namespace App\Models;

            use App\Casts\AsUuid;
            use App\Casts\{AsMoney, AsJson as Json};
            use Illuminate\Database\Eloquent\Model as Eloquent;
        """)
        imports = collect_imports(tree)
        assert sorted(imports) == ["AsMoney", "AsUuid", "Eloquent", "Json"]

    def test_last_declaration_wins(self, parse) -> None:
        tree = parse(r"""
            use App\Casts\Money;
            use App\Support\Money;
        """)
        assert collect_imports(tree) == {"Money": r"App\Support\Money"}

    def test_function_and_const_imports_are_ignored(self, parse) -> None:
        tree = parse(r"""
            use function App\Helpers\money;
            use const App\Helpers\CURRENCY;
            use App\Casts\AsMoney;
        """)
        assert collect_imports(tree) == {"AsMoney": r"App\Casts\AsMoney"}

    def test_only_function_and_const_imports_give_empty_map(self, parse) -> None:
        tree = parse(r"""
            use function App\Helpers\money;
            use const App\Helpers\CURRENCY;
        """)
        assert collect_imports(tree) == {}

    def test_trait_use_inside_class_is_not_an_import(self, parse) -> None:
        tree = parse(r"""
            use Illuminate\Database\Eloquent\Factories\HasFactory;

            class User
            {
                use HasFactory;
            }
        """)
        assert collect_imports(tree) == {
            "HasFactory": r"Illuminate\Database\Eloquent\Factories\HasFactory",
        }

    def test_file_without_imports(self, parse) -> None:
        assert collect_imports(parse("class User {}")) == {}


class TestResolveClassName:

    @pytest.mark.parametrize(
        "written, expected",
        [
            ("AsUuid", r"\App\Casts\AsUuid"),
            (r"\AsUuid", r"\App\Casts\AsUuid"),
            (r"App\Casts\Other", r"\App\Casts\Other"),
            (r"\Vendor\Cast", r"\Vendor\Cast"),
            ("Unknown", r"\Unknown"),
        ],
    )
    def test_resolution(self, written: str, expected: str) -> None:
        imports = {"AsUuid": r"App\Casts\AsUuid"}
        assert resolve_class_name(written, imports) == expected

    def test_qualify_normalises_backslashes(self) -> None:
        assert qualify(r"\\App\Foo") == r"\App\Foo"
        assert qualify(r"App\Foo") == r"\App\Foo"
