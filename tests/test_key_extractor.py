import os
import sys

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from codelens_i18n.extraction.key_extractor import KeyExtractor, LineIndex


def keys_of(text):
    return [site.key for site in KeyExtractor().iter_call_sites(text)]


def test_call_sites_with_all_quote_styles():
    text = "t('a.b'); t(\"c\"); t(`d.e`)"
    assert keys_of(text) == ["a.b", "c", "d.e"]


def test_call_site_spanning_lines():
    text = "const label = t(\n    'common.save'\n);"
    assert keys_of(text) == ["common.save"]


def test_call_site_offsets_cover_whole_call():
    text = "x = t('k')"
    site = KeyExtractor().extract_call_sites(text)[0]
    assert text[site.start:site.end] == "t('k')"


def test_call_site_keeps_escapes_raw():
    assert keys_of(r"t('it\'s')") == [r"it\'s"]


def test_empty_call_site_is_skipped():
    assert keys_of("t('')") == []


def test_identifier_ending_in_t_is_not_a_call_site():
    assert keys_of("split('a'); format('b'); t('c')") == ["c"]


def test_literals_match_identifier_paths():
    literals = KeyExtractor().extract_literals(
        "const a = 'common.save'; x(\"title\"); y(`$root._x`); z('not a key'); w('1abc')"
    )
    assert literals == {"common.save", "title", "$root._x"}


def test_literal_in_any_context_counts():
    extractor = KeyExtractor()
    text = "const keys = ['menu.open', \"menu.close\"];"
    assert extractor.find_used_keys(text, {"menu.open", "menu.close", "menu.quit"}) == {
        "menu.open",
        "menu.close",
    }


def test_dynamic_keys_are_not_detected():
    extractor = KeyExtractor()
    text = "t(`menu.${name}`); t('menu.' + name)"
    assert extractor.find_used_keys(text, {"menu.open"}) == set()


def test_line_index_positions():
    index = LineIndex("ab\ncd\n\nef")
    assert index.position_at(0) == (0, 0)
    assert index.position_at(4) == (1, 1)
    assert index.position_at(7) == (3, 0)
