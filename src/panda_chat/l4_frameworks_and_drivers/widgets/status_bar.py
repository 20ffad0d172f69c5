"""Status bar — bottom bar showing activity, rate-limit countdown, auth state, and keybinding hints."""

from __future__ import annotations

from rich.cells import cell_len
from textual.reactive import reactive
from textual.widgets import Static


class StatusBar(Static):
    """Bottom status bar for one chat surface."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: auto;
        background: $surface;
        color: $text;
        padding: 0 1;
        overflow: hidden hidden;
    }
    """

    surface_label: reactive[str] = reactive('')
    activity: reactive[str] = reactive('')
    countdown: reactive[str] = reactive('')
    auth_required: reactive[bool] = reactive(False)
    message_count: reactive[int] = reactive(0)
    keybinding_hints: reactive[str] = reactive('')

    def render(self) -> str:
        left_parts = []
        if self.surface_label:
            left_parts.append(self.surface_label)
        if self.auth_required:
            left_parts.append('✗ Sign in required')
        elif self.countdown:
            left_parts.append(f'⏳ Rate limited {self.countdown}')
        else:
            left_parts.append('● Ready')
        left_parts.append(f'{self.message_count} msgs')
        if self.activity:
            left_parts.append(f'⟳ {self.activity}')
        left = ' │ '.join(left_parts)

        content_width = (self.size.width or 80) - 2
        hints = self.keybinding_hints
        if hints:
            hints_width = cell_len(hints.replace(r'\[', '['))
            gap = content_width - cell_len(left) - hints_width
            if gap >= 2:
                left = left + ' ' * gap + hints
        return left
