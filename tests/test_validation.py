"""Tests for file discovery and pre-flight validation."""

from pathlib import Path

import pytest

from neurolint.core.config import ValidationConfig
from neurolint.core.errors import FileValidationError, NoFilesFoundError
from neurolint.validation import (
    ValidationSeverity,
    discover_files,
    expand_braces,
    is_excluded,
    validate_files,
    validate_single_file,
)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A project with sources, build output and dependencies."""
    for rel in (
        "src/index.ts",
        "src/App.tsx",
        "src/util/math.js",
        "src/styles.css",
        "dist/bundle.js",
        "node_modules/pkg/index.js",
        "src/node_modules/inner.js",
    ):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("export const x = 1;\n")
    return tmp_path


def _names(files: list[str], base: Path) -> list[str]:
    return [Path(f).relative_to(base).as_posix() for f in files]


class TestExpandBraces:
    def test_no_braces(self):
        assert expand_braces("src/*.ts") == ["src/*.ts"]

    def test_single_group(self):
        assert expand_braces("**/*.{ts,tsx}") == ["**/*.ts", "**/*.tsx"]

    def test_multiple_groups(self):
        assert expand_braces("{a,b}/*.{x,y}") == ["a/*.x", "a/*.y", "b/*.x", "b/*.y"]


class TestIsExcluded:
    def test_root_and_nested_directories(self):
        assert is_excluded("node_modules/pkg/index.js", ["node_modules/**"])
        assert is_excluded("src/node_modules/inner.js", ["node_modules/**"])
        assert not is_excluded("src/index.ts", ["node_modules/**"])


class TestDiscoverFiles:
    def test_glob_with_braces_and_default_excludes(self, tree: Path):
        files = discover_files(["**/*.{ts,tsx,js}"], cwd=tree)
        assert sorted(_names(files, tree)) == ["src/App.tsx", "src/index.ts", "src/util/math.js"]

    def test_paths_are_absolute(self, tree: Path):
        files = discover_files(["src/index.ts"], cwd=tree)
        assert files == [str((tree / "src/index.ts").resolve())]

    def test_recursive_directory(self, tree: Path):
        files = discover_files(["src"], recursive=True, cwd=tree)
        assert sorted(_names(files, tree)) == ["src/App.tsx", "src/index.ts", "src/util/math.js"]

    def test_non_recursive_directory(self, tree: Path):
        files = discover_files(["src"], cwd=tree)
        assert sorted(_names(files, tree)) == ["src/App.tsx", "src/index.ts"]

    def test_deduplicates_preserving_order(self, tree: Path):
        files = discover_files(["src/index.ts", "src/*.ts", "src/index.ts"], cwd=tree)
        assert _names(files, tree) == ["src/index.ts"]

    def test_include_and_exclude(self, tree: Path):
        files = discover_files(
            ["src/index.ts"],
            include=["src/util/*.js"],
            exclude=["src/util/**"],
            cwd=tree,
        )
        assert _names(files, tree) == ["src/index.ts"]

    def test_nothing_matches(self, tree: Path):
        assert discover_files(["lib/**/*.ts"], cwd=tree) == []


class TestValidateSingleFile:
    def test_clean_file(self, tmp_path: Path):
        path = tmp_path / "ok.ts"
        path.write_text("const a = 1;\n")
        assert validate_single_file(str(path), ValidationConfig()) == []

    def test_missing_file(self, tmp_path: Path):
        issues = validate_single_file(str(tmp_path / "gone.ts"), ValidationConfig())
        assert [i.check_id for i in issues] == ["F002"]
        assert issues[0].severity == ValidationSeverity.ERROR

    def test_too_large(self, tmp_path: Path):
        path = tmp_path / "big.ts"
        path.write_text("x" * 200)
        issues = validate_single_file(str(path), ValidationConfig(max_file_size=100))
        assert [i.check_id for i in issues] == ["F003"]

    def test_unsupported_extension_warns(self, tmp_path: Path):
        path = tmp_path / "style.css"
        path.write_text("a {}\n")
        issues = validate_single_file(str(path), ValidationConfig())
        assert [(i.check_id, i.severity) for i in issues] == [("F101", ValidationSeverity.WARNING)]

    def test_unsupported_extension_can_be_error(self, tmp_path: Path):
        path = tmp_path / "style.css"
        path.write_text("a {}\n")
        issues = validate_single_file(str(path), ValidationConfig(extension_errors=True))
        assert issues[0].severity == ValidationSeverity.ERROR

    def test_binary_content_warns(self, tmp_path: Path):
        path = tmp_path / "blob.js"
        path.write_bytes(b"abc\x00def")
        issues = validate_single_file(str(path), ValidationConfig())
        assert [i.check_id for i in issues] == ["F102"]

    def test_control_characters_warn(self, tmp_path: Path):
        path = tmp_path / "ctrl.js"
        path.write_bytes(b"const a = 1;\x01\x02\x03\x7f\n")
        issues = validate_single_file(str(path), ValidationConfig())
        assert [i.check_id for i in issues] == ["F102"]

    def test_null_byte_beyond_sniff_window_warns(self, tmp_path: Path):
        path = tmp_path / "late.js"
        path.write_bytes(b"const a = 1;\n" * 200 + b"\x00")
        issues = validate_single_file(str(path), ValidationConfig())
        assert [i.check_id for i in issues] == ["F102"]

    def test_line_endings_and_tabs_are_text(self, tmp_path: Path):
        path = tmp_path / "crlf.js"
        path.write_bytes(b"\tconst a = 1;\r\n\x0cconst b = 2;\r\n")
        assert validate_single_file(str(path), ValidationConfig()) == []

    def test_binary_and_minified_both_reported(self, tmp_path: Path):
        path = tmp_path / "bundle.js"
        path.write_bytes(b"\x01" + b"x" * 50 + b"\n")
        issues = validate_single_file(str(path), ValidationConfig(long_line_threshold=10))
        assert [i.check_id for i in issues] == ["F102", "F103"]

    def test_minified_warns(self, tmp_path: Path):
        path = tmp_path / "min.js"
        path.write_text("x" * 50 + "\n")
        issues = validate_single_file(str(path), ValidationConfig(long_line_threshold=10))
        assert [i.check_id for i in issues] == ["F103"]


class TestValidateFiles:
    def test_empty_set(self):
        with pytest.raises(NoFilesFoundError):
            validate_files([])

    def test_too_many_files(self, tmp_path: Path):
        files = []
        for i in range(3):
            path = tmp_path / f"f{i}.ts"
            path.write_text("x\n")
            files.append(str(path))
        with pytest.raises(FileValidationError) as exc_info:
            validate_files(files, ValidationConfig(max_files=2))
        assert "Too many files" in exc_info.value.errors[0]

    def test_collects_all_errors(self, tmp_path: Path):
        with pytest.raises(FileValidationError) as exc_info:
            validate_files([str(tmp_path / "a.ts"), str(tmp_path / "b.ts")])
        assert len(exc_info.value.errors) == 2
        assert "and 1 more" in str(exc_info.value)

    def test_warnings_do_not_block(self, tmp_path: Path):
        path = tmp_path / "style.css"
        path.write_text("a {}\n")
        result = validate_files([str(path)])
        assert result.is_valid
        assert len(result.warnings) == 1
