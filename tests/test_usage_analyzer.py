import asyncio
import json
import os
import sys

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from codelens_i18n.analysis.usage_analyzer import (
    CancellationToken,
    UsageAnalyzer,
    analyze,
    default_file_globs,
    expand_braces,
    in_generated_dir,
    matches_glob,
)
from codelens_i18n.config import DEFAULT_EXCLUDE_PATTERNS
from codelens_i18n.models.analysis_result import AnalysisOutcome


def write_locale(root, name, data):
    path = root / "i18n" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def write_source(root, name, text):
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def make_analyzer(root, extensions=("ts", "js"), excludes=DEFAULT_EXCLUDE_PATTERNS):
    return UsageAnalyzer(root, ["i18n"], list(extensions), list(excludes))


def test_unused_keys_single_file(tmp_path):
    write_locale(tmp_path, "en.json", {"a": {"b": "AB"}, "c": "C"})
    write_source(tmp_path, "src/app.ts", "const x = t('a.b');")

    result = asyncio.run(make_analyzer(tmp_path).analyze())

    assert result.outcome == AnalysisOutcome.COMPLETED
    assert result.total_keys == 2
    assert result.unused_keys == ["c"]
    assert result.scanned_file_count == 1
    assert result.used_count == 1


def test_no_locale_files_skips_scanning(tmp_path):
    write_source(tmp_path, "src/app.ts", "t('a')")
    seen = []

    async def progress(percentage, message, **extra):
        seen.append(percentage)

    result = asyncio.run(make_analyzer(tmp_path).analyze(progress_callback=progress))

    assert result.outcome == AnalysisOutcome.NO_LOCALE_FILES
    assert result.total_keys == 0
    assert result.scanned_file_count == 0
    assert max(seen) < 40


def test_locales_without_string_keys(tmp_path):
    write_locale(tmp_path, "en.json", {"count": 1, "list": ["a"]})
    result = asyncio.run(make_analyzer(tmp_path).analyze())
    assert result.outcome == AnalysisOutcome.NO_KEYS


def test_unused_order_follows_declaration_order(tmp_path):
    write_locale(tmp_path, "en.json", {"z": "Z", "m": "M", "a": "A"})
    write_locale(tmp_path, "fr.json", {"b": "B", "z": "Z"})
    write_source(tmp_path, "main.js", "use('m')")

    result = asyncio.run(make_analyzer(tmp_path).analyze())

    assert result.unused_keys == ["z", "a", "b"]


def test_generated_and_excluded_files_are_not_scanned(tmp_path):
    write_locale(tmp_path, "en.json", {"used": "U", "hidden": "H", "minified": "M", "other": "O"})
    write_source(tmp_path, "src/app.ts", "t('used')")
    write_source(tmp_path, "node_modules/pkg/index.js", "t('hidden')")
    write_source(tmp_path, "dist/bundle.js", "t('hidden')")
    write_source(tmp_path, "src/vendor.min.js", "t('minified')")
    write_source(tmp_path, "src/readme.md", "'other'")

    result = asyncio.run(make_analyzer(tmp_path).analyze())

    assert result.unused_keys == ["hidden", "minified", "other"]
    assert result.scanned_file_count == 1


def test_generated_dirs_skipped_even_without_excludes(tmp_path):
    write_locale(tmp_path, "en.json", {"hidden": "H"})
    write_source(tmp_path, "build/out.js", "t('hidden')")

    result = asyncio.run(make_analyzer(tmp_path, excludes=()).analyze())

    assert result.unused_keys == ["hidden"]


def test_binary_and_oversized_files_are_skipped(tmp_path, monkeypatch):
    write_locale(tmp_path, "en.json", {"big": "B", "bin": "X"})
    write_source(tmp_path, "big.ts", "t('big')" + " " * 100)
    (tmp_path / "bin.ts").write_bytes(b"t('bin')\x00\xff\xfe")

    monkeypatch.setattr("codelens_i18n.analysis.usage_analyzer.MAX_FILE_SIZE", 50)
    result = asyncio.run(make_analyzer(tmp_path).analyze())

    assert result.unused_keys == ["big", "bin"]
    assert result.scanned_file_count == 0
    assert result.candidate_file_count == 2


def test_cancellation_before_start_returns_no_results(tmp_path):
    write_locale(tmp_path, "en.json", {"a": "A"})
    write_source(tmp_path, "a.ts", "t('a')")
    token = CancellationToken()
    token.cancel()

    result = asyncio.run(make_analyzer(tmp_path).analyze(token))

    assert result.cancelled
    assert result.unused_keys == []
    assert result.scanned_file_count == 0


def test_cancellation_during_scan(tmp_path):
    write_locale(tmp_path, "en.json", {"a": "A"})
    for index in range(30):
        write_source(tmp_path, f"src/file{index:02d}.ts", "t('a')")
    token = CancellationToken()

    async def progress(percentage, message, **extra):
        if extra.get("scanned_files") == 20:
            token.cancel()

    result = asyncio.run(make_analyzer(tmp_path).analyze(token, progress))

    assert result.outcome == AnalysisOutcome.CANCELLED
    assert result.unused_keys == []


def test_progress_milestones(tmp_path):
    write_locale(tmp_path, "en.json", {"a": "A"})
    write_source(tmp_path, "a.ts", "t('a')")
    seen = []

    async def progress(percentage, message, **extra):
        seen.append(percentage)

    asyncio.run(make_analyzer(tmp_path).analyze(progress_callback=progress))

    assert seen[0] == 0
    assert seen[-1] == 100
    assert seen == sorted(seen)
    assert 80 in seen


def test_repeated_runs_are_identical(tmp_path):
    write_locale(tmp_path, "en.json", {"x": "X", "y": "Y", "z": "Z"})
    write_source(tmp_path, "b.ts", "'y'")
    write_source(tmp_path, "a.ts", "'q'")

    first = asyncio.run(analyze(tmp_path, ["i18n"], ["ts"]))
    second = asyncio.run(analyze(tmp_path, ["i18n"], ["ts"]))

    assert first.unused_keys == second.unused_keys == ["x", "z"]


def test_glob_helpers():
    assert expand_braces("**/*.{ts,js}") == ["**/*.ts", "**/*.js"]
    assert default_file_globs(["ts", "tsx"]) == ["**/*.{ts,tsx}"]
    assert matches_glob("app.ts", "**/*.{ts,js}")
    assert matches_glob("src/deep/app.js", "**/*.{ts,js}")
    assert not matches_glob("src/app.py", "**/*.{ts,js}")
    assert matches_glob("node_modules/a/b.js", "**/node_modules/**")
    assert in_generated_dir("src/dist/x.js")
    assert not in_generated_dir("src/distance/x.js")
