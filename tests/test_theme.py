import unittest

from beadtree import BeadTreeTUI, DEFAULT_THEME, THEMES


REQUIRED_KEYS = {
    "",
    "status.active",
    "status.ready",
    "status.blocked",
    "status.deferred",
    "status.closed",
    "status.unknown",
    "text",
    "text.dim",
    "text.dimmer",
    "tree.guide",
    "issue.id",
    "priority",
    "selected",
    "header",
    "border",
    "prompt",
    "error",
    "warning",
}


class ThemeTests(unittest.TestCase):
    def test_all_themes_have_required_keys(self):
        for name in THEMES.keys():
            palette = BeadTreeTUI.get_theme_palette(name)
            missing = REQUIRED_KEYS - set(palette.keys())
            self.assertFalse(missing, f"theme {name} missing {missing}")

    def test_unknown_theme_falls_back_to_default(self):
        palette_default = BeadTreeTUI.get_theme_palette(DEFAULT_THEME)
        palette_unknown = BeadTreeTUI.get_theme_palette("non-existent")
        self.assertEqual(palette_unknown, palette_default)
        self.assertIsNot(palette_unknown, palette_default)

    def test_style_builds_without_errors(self):
        style = BeadTreeTUI.build_style(DEFAULT_THEME)
        self.assertTrue(getattr(style, "style_rules", None))


if __name__ == "__main__":
    unittest.main()
