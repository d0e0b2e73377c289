"""Display utilities mixin for TUI - text width, trimming, padding, wrapping."""

from typing import List

from wcwidth import wcwidth


def _char_width(ch: str) -> int:
    w = wcwidth(ch)
    if w is None or w < 0:
        return 0
    return w


class DisplayMixin:
    """Mixin providing text display utilities with proper Unicode width handling."""

    @staticmethod
    def _display_width(text: str) -> int:
        """Return visual width of text accounting for wide/narrow characters."""
        return sum(_char_width(ch) for ch in text)

    @staticmethod
    def _trim_display(text: str, width: int) -> str:
        """Trim text so visible width doesn't exceed specified width."""
        acc = []
        used = 0
        for ch in text:
            w = _char_width(ch)
            if used + w > width:
                break
            acc.append(ch)
            used += w
        return "".join(acc)

    @classmethod
    def _truncate_display(cls, text: str, width: int) -> str:
        """Trim to `width`, marking the cut with an ellipsis."""
        if width <= 0:
            return ""
        if cls._display_width(text) <= width:
            return text
        return cls._trim_display(text, width - 1) + "…"

    @classmethod
    def _pad_display(cls, text: str, width: int) -> str:
        """Trim and pad with spaces to exact visible width."""
        trimmed = cls._trim_display(text, width)
        trimmed_width = cls._display_width(trimmed)
        if trimmed_width < width:
            trimmed += " " * (width - trimmed_width)
        return trimmed

    @classmethod
    def _wrap_display(cls, text: str, width: int) -> List[str]:
        """Wrap text into lines of at most `width` visible cells, breaking on spaces when possible."""
        width = max(1, width)
        lines: List[str] = []
        for paragraph in (text or "").splitlines() or [""]:
            current = ""
            used = 0
            for word in paragraph.split(" "):
                word_width = cls._display_width(word)
                extra = word_width if not current else word_width + 1
                if current and used + extra > width:
                    lines.append(current)
                    current, used = "", 0
                    extra = word_width
                while word_width > width:
                    head = cls._trim_display(word, width) or word[0]
                    lines.append(head)
                    word = word[len(head):]
                    word_width = cls._display_width(word)
                    extra = word_width
                current = f"{current} {word}" if current else word
                used += extra
            lines.append(current)
        return lines


__all__ = ["DisplayMixin"]
