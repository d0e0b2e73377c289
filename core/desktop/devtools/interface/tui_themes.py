#!/usr/bin/env python3
"""TUI themes and styling."""

from typing import Dict

from prompt_toolkit.styles import Style


THEMES: Dict[str, Dict[str, str]] = {
    "dark-olive": {
        "": "#d7dfe6",
        "status.active": "#e5c07b bold",
        "status.ready": "#9ad974 bold",
        "status.blocked": "#e06c75 bold",
        "status.deferred": "#7aa2c8",
        "status.closed": "#6d717a",
        "status.unknown": "#7a7f85",
        "text": "#d7dfe6",
        "text.dim": "#97a0a9",
        "text.dimmer": "#6d717a",
        "tree.guide": "#4b525a",
        "issue.id": "#8d95a0",
        "priority": "#c678dd",
        "selected": "bg:#3b3b3b #d7dfe6 bold",
        "header": "#ffb347 bold",
        "border": "#4b525a",
        "prompt": "#61afef bold",
        "error": "#e06c75 bold",
        "warning": "#e5c07b",
    },
    "dark-contrast": {
        "": "#e8eaec",
        "status.active": "#f0c674 bold",
        "status.ready": "#b8f171 bold",
        "status.blocked": "#ff6b6b bold",
        "status.deferred": "#8ab4f8",
        "status.closed": "#6f757d",
        "status.unknown": "#8a9097",
        "text": "#e8eaec",
        "text.dim": "#a7b0ba",
        "text.dimmer": "#6f757d",
        "tree.guide": "#5a6169",
        "issue.id": "#939aa4",
        "priority": "#d19af0",
        "selected": "bg:#3d4047 #e8eaec bold",
        "header": "#ffb347 bold",
        "border": "#5a6169",
        "prompt": "#79c0ff bold",
        "error": "#ff6b6b bold",
        "warning": "#f0c674",
    },
}

DEFAULT_THEME = "dark-olive"


def get_theme_palette(theme: str) -> Dict[str, str]:
    """Get theme palette, falling back to default if theme not found."""
    base = THEMES.get(theme)
    if not base:
        base = THEMES[DEFAULT_THEME]
    return dict(base)


def build_style(theme: str) -> Style:
    """Build Style object from theme name."""
    palette = get_theme_palette(theme)
    return Style.from_dict(palette)


__all__ = ["THEMES", "DEFAULT_THEME", "get_theme_palette", "build_style"]
