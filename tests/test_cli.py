import json
import os
import sys

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from click.testing import CliRunner

from codelens_i18n.cli import cli


def prepare_project(root):
    i18n = root / "i18n"
    (i18n / "ja").mkdir(parents=True)
    (i18n / "en.json").write_text(
        json.dumps({"home": {"title": "Home"}, "stale": "Old"}), encoding="utf-8"
    )
    (i18n / "ja" / "common.json").write_text(
        json.dumps({"home": {"title": "ホーム"}}, ensure_ascii=False), encoding="utf-8"
    )
    src = root / "src"
    src.mkdir()
    (src / "app.ts").write_text("const title = t('home.title');\n", encoding="utf-8")
    return root


def invoke(root, *args, input=None):
    runner = CliRunner()
    return runner.invoke(cli, ["--root", str(root), "--folders", "i18n", *args], input=input)


def test_locales_lists_loaded_files(tmp_path):
    result = invoke(prepare_project(tmp_path), "locales")
    assert result.exit_code == 0
    assert "ja.common" in result.output
    assert "Total keys" in result.output


def test_resolve_uses_grouped_locale(tmp_path):
    result = invoke(prepare_project(tmp_path), "resolve", "home.title", "-l", "ja")
    assert result.exit_code == 0
    assert "ホーム" in result.output


def test_resolve_missing_key(tmp_path):
    result = invoke(prepare_project(tmp_path), "resolve", "nope")
    assert result.exit_code == 0
    assert "Not found" in result.output


def test_lens_shows_translations(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "lens", str(root / "src" / "app.ts"), "-l", "en")
    assert result.exit_code == 0
    assert "home.title" in result.output
    assert "Home" in result.output


def test_set_writes_value(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "set", "home.subtitle", "en", "Welcome")

    assert result.exit_code == 0
    assert "Saved" in result.output
    data = json.loads((root / "i18n" / "en.json").read_text(encoding="utf-8"))
    assert data["home"]["subtitle"] == "Welcome"


def test_set_writes_grouped_locale_to_its_origin(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "set", "home.subtitle", "ja.common", "ようこそ")

    assert result.exit_code == 0
    data = json.loads((root / "i18n" / "ja" / "common.json").read_text(encoding="utf-8"))
    assert data["home"]["subtitle"] == "ようこそ"


def test_delete_requires_confirmation(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "delete", "stale", input="n\n")

    assert result.exit_code == 0
    assert "Nothing deleted" in result.output
    assert "stale" in json.loads((root / "i18n" / "en.json").read_text(encoding="utf-8"))


def test_delete_with_yes(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "delete", "stale", "--yes")

    assert result.exit_code == 0
    assert "stale" not in json.loads((root / "i18n" / "en.json").read_text(encoding="utf-8"))


def test_unused_writes_report(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "unused")

    assert result.exit_code == 0
    assert "stale" in result.output
    reports = list(root.glob("i18n-unused-resources-*.md"))
    assert len(reports) == 1
    assert "`stale`" in reports[0].read_text(encoding="utf-8")


def test_unused_delete_removes_keys(tmp_path):
    root = prepare_project(tmp_path)
    result = invoke(root, "unused", "--no-report", "--delete", "--yes")

    assert result.exit_code == 0
    assert list(root.glob("i18n-unused-resources-*.md")) == []
    assert "from 1 locale files" in result.output
    data = json.loads((root / "i18n" / "en.json").read_text(encoding="utf-8"))
    assert data == {"home": {"title": "Home"}}


def test_unused_without_locale_files(tmp_path):
    result = CliRunner().invoke(cli, ["--root", str(tmp_path), "--folders", "missing", "unused"])
    assert result.exit_code == 0
    assert "No i18n files found" in result.output


def test_invalid_root_aborts(tmp_path):
    result = CliRunner().invoke(cli, ["--root", str(tmp_path / "nope"), "locales"])
    assert result.exit_code != 0
    assert "Configuration errors" in result.output


def test_folders_add_and_remove(tmp_path, monkeypatch):
    monkeypatch.setenv("CODELENS_I18N_FOLDERS", "i18n")
    root = prepare_project(tmp_path)

    added = invoke(root, "folders", "add", "locales")
    assert added.exit_code == 0
    assert "Added" in added.output
    assert "locales" in (root / ".env").read_text(encoding="utf-8")

    removed = invoke(root, "folders", "remove", "missing")
    assert "is not an i18n folder" in removed.output


def test_locales_with_folder_outside_root(tmp_path):
    root = tmp_path / "proj"
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "en.json").write_text(json.dumps({"a": "A"}), encoding="utf-8")

    result = CliRunner().invoke(cli, ["--root", str(root), "--folders", str(outside), "locales"])

    assert result.exit_code == 0
    assert "en" in result.output
