from core.desktop.devtools.interface.constants import APP_NAME, LANG_PACK, TIMESTAMP_FORMAT
from core.desktop.devtools.interface.i18n import complete_packs, plural_suffix, translate, translate_count


def test_constants_values_present():
    assert APP_NAME == "beadtree"
    assert "en" in LANG_PACK and "ru" in LANG_PACK
    assert TIMESTAMP_FORMAT == "%Y-%m-%d %H:%M"


def test_every_language_covers_the_english_keys():
    english = set(LANG_PACK["en"])
    for lang, values in LANG_PACK.items():
        missing = english - set(values)
        assert not missing, f"{lang} missing {sorted(missing)}"


def test_translate_formats_and_falls_back():
    assert translate("STATUS_CREATED", id="bd-1") == "created bd-1"
    assert translate("NO_SUCH_KEY") == "NO_SUCH_KEY"
    assert translate("STATUS_CREATED") == "created {id}"


def test_translate_honours_env_language(monkeypatch):
    monkeypatch.setenv("BEADTREE_LANG", "ru")
    assert translate("FILTER_LABEL") == "фильтр"


def test_plural_suffix_rules():
    assert [plural_suffix("en", n) for n in (0, 1, 2)] == ["", "_ONE", ""]
    assert [plural_suffix("ru", n) for n in (1, 3, 5, 11, 12, 21, 24)] == ["_ONE", "_FEW", "", "", "", "_ONE", "_FEW"]


def test_translate_count_picks_the_variant():
    assert translate_count("PROMPT_DELETE_CASCADE", 1, id="a") == "Delete a and 1 descendant? y to confirm: "
    assert translate_count("PROMPT_DELETE_CASCADE", 3, id="a") == "Delete a and 3 descendants? y to confirm: "


def test_translate_count_in_russian(monkeypatch):
    monkeypatch.setenv("BEADTREE_LANG", "ru")
    assert "3 дочерние задачи" in translate_count("PROMPT_DELETE_CASCADE", 3, id="a")
    assert "5 дочерних задач" in translate_count("PROMPT_DELETE_CASCADE", 5, id="a")


def test_complete_packs_reports_borrowed_keys():
    packs = {"en": {"A": "a", "B": "b"}, "xx": {"A": "x"}}
    assert complete_packs(packs) == {"xx": 1}
    assert packs["xx"] == {"A": "x", "B": "b"}
