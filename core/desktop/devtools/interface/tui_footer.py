"""Footer renderer for BeadTreeTUI."""

from prompt_toolkit.formatted_text import FormattedText


def build_footer_text(tui) -> FormattedText:
    if getattr(tui, "editing_mode", False) or getattr(tui, "search_mode", False):
        return FormattedText([("class:text.dimmer", tui._t("HINTS_PROMPT"))])
    hints = tui._truncate_display(tui._t("HINTS"), max(1, tui.get_terminal_width() - 1))
    return FormattedText([("class:text.dimmer", hints)])


__all__ = ["build_footer_text"]
