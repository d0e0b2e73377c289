from types import SimpleNamespace

from core.desktop.devtools.interface.i18n import translate
from core.desktop.devtools.interface.tui_display import DisplayMixin
from core.desktop.devtools.interface.tui_footer import build_footer_text


class DummyTUI(SimpleNamespace):
    def _t(self, key, **kwargs):
        return translate(key, **kwargs)

    def _truncate_display(self, text, width):
        return DisplayMixin._truncate_display(text, width)

    def get_terminal_width(self):
        return self.width


def _text(fragments):
    return "".join(text for _, text in fragments)


def test_build_footer_text_basic():
    tui = DummyTUI(width=300, editing_mode=False, search_mode=False)
    assert _text(build_footer_text(tui)) == translate("HINTS")


def test_footer_truncates_to_terminal_width():
    tui = DummyTUI(width=20, editing_mode=False, search_mode=False)
    text = _text(build_footer_text(tui))
    assert text.endswith("…")
    assert DisplayMixin._display_width(text) <= 19


def test_footer_switches_to_prompt_hints():
    for flags in ({"editing_mode": True, "search_mode": False}, {"editing_mode": False, "search_mode": True}):
        tui = DummyTUI(width=80, **flags)
        assert _text(build_footer_text(tui)) == translate("HINTS_PROMPT")
