import asyncio
import json
import os
import sys
from pathlib import Path

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from codelens_i18n.extraction.locale_loader import LocaleLoader
from codelens_i18n.models.locale_tree import from_json
from codelens_i18n.models.snapshot import LocaleSnapshot
from codelens_i18n.resolution.resolver import (
    LocaleResolver,
    classify_locales,
    dedupe_priority,
    find_suffix_match,
    select_primary,
)


def make_snapshot(locales):
    trees = {locale: from_json(data) for locale, data in locales.items()}
    origins = {locale: Path(f"/tmp/{locale}.json") for locale in locales}
    return LocaleSnapshot(trees=trees, origins=origins)


def test_exact_priority_locale_wins():
    snapshot = make_snapshot({"en": {"k": "Hello"}, "ja": {"k": "こんにちは"}})
    primary = select_primary("k", snapshot, ["ja", "en"])
    assert (primary.locale, primary.value) == ("ja", "こんにちは")


def test_only_priority_locale_has_value():
    snapshot = make_snapshot({"en": {}, "vi": {"k": "Xin chào"}})
    primary = select_primary("k", snapshot, ["vi", "en"])
    assert (primary.locale, primary.value) == ("vi", "Xin chào")


def test_suffix_match_on_earlier_candidate_beats_later_exact_match():
    snapshot = make_snapshot({
        "en": {"k": "B value"},
        "region.ja": {"k": "A value"},
    })
    primary = select_primary("k", snapshot, ["ja", "en"])
    assert (primary.locale, primary.value) == ("region.ja", "A value")


def test_exact_match_is_tried_before_suffix_match():
    snapshot = make_snapshot({
        "region.ja": {"k": "grouped"},
        "ja": {"k": "plain"},
    })
    primary = select_primary("k", snapshot, ["ja"])
    assert primary.locale == "ja"


def test_suffix_match_used_when_exact_locale_lacks_key():
    snapshot = make_snapshot({
        "ja": {},
        "region.ja": {"k": "grouped"},
    })
    primary = select_primary("k", snapshot, ["ja"])
    assert primary.locale == "region.ja"


def test_global_fallback_uses_first_locale_with_value():
    snapshot = make_snapshot({"de": {}, "fr": {"k": "Bonjour"}, "en": {"k": "Hello"}})
    primary = select_primary("k", snapshot, ["ja"])
    assert (primary.locale, primary.value) == ("fr", "Bonjour")


def test_missing_everywhere_returns_none():
    snapshot = make_snapshot({"en": {"other": "x"}})
    assert select_primary("k", snapshot, ["en"]) is None


def test_find_suffix_match_ignores_plain_ids():
    snapshot = make_snapshot({"ja": {}, "locales.ja": {}})
    assert find_suffix_match(snapshot, "ja") == "locales.ja"
    assert find_suffix_match(make_snapshot({"ja": {}}), "ja") is None


def test_dedupe_priority_keeps_first_occurrence():
    assert dedupe_priority(["ja", "en", "ja", "", "vi"]) == ["ja", "en", "vi"]


def test_classification_is_independent_of_priority():
    snapshot = make_snapshot({"en": {"k": "Hello"}, "ja": {}, "vi": {"k": ""}})
    classification = classify_locales("k", snapshot)
    assert classification.with_value == {"en": "Hello", "vi": ""}
    assert classification.without_value == ["ja"]
    assert classification.found


def test_resolver_grouped_locale_end_to_end(tmp_path):
    (tmp_path / "i18n" / "ja").mkdir(parents=True)
    (tmp_path / "i18n" / "en.json").write_text(json.dumps({"greeting": "Hi"}), encoding="utf-8")
    (tmp_path / "i18n" / "ja" / "common.json").write_text(
        json.dumps({"greeting": "こんにちは"}, ensure_ascii=False), encoding="utf-8"
    )

    snapshot = asyncio.run(LocaleLoader(tmp_path).reload(["i18n"]))
    primary = LocaleResolver(["ja"]).select_primary("greeting", snapshot)

    assert "ja.common" in snapshot.locales
    assert (primary.locale, primary.value) == ("ja.common", "こんにちは")
