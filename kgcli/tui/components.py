# SPDX-License-Identifier: MIT
"""Reusable view building blocks: text fields, forms, paging, dialogs, status bar.

These are plain state objects driven by Key messages and rendered to text.
They hold no reference to Textual so the update loop stays pure and can
be exercised without a terminal.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

try:
    from kgcli.tui.messages import Key
except ImportError:
    from .messages import Key

NEWLINE_KEYS = frozenset({"ctrl+j", "shift+enter"})


class TextInput:
    """Single-line editable value."""

    def __init__(self, prompt: str = "", placeholder: str = "", char_limit: int = 0) -> None:
        self.prompt = prompt
        self.placeholder = placeholder
        self.char_limit = char_limit
        self.value = ""
        self.focused = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def set_value(self, value: str) -> None:
        self.value = value[: self.char_limit] if self.char_limit else value

    def reset(self) -> None:
        self.value = ""

    def update(self, msg: Key) -> bool:
        """Apply a key; returns True if the value changed."""
        if not self.focused:
            return False
        if msg.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                return True
            return False
        if msg.key == "ctrl+u":
            changed = bool(self.value)
            self.value = ""
            return changed
        if msg.printable:
            if self.char_limit and len(self.value) >= self.char_limit:
                return False
            self.value += msg.character
            return True
        return False

    def render(self) -> str:
        shown = self.value if self.value or self.focused else self.placeholder
        cursor = "█" if self.focused else ""
        return f"{self.prompt}{shown}{cursor}"


class TextArea(TextInput):
    """Multi-line value; ctrl+j (or shift+enter) starts a new line."""

    def update(self, msg: Key) -> bool:
        if self.focused and msg.key in NEWLINE_KEYS:
            self.value += "\n"
            return True
        return super().update(msg)

    def word_count(self) -> int:
        return len(self.value.split())

    def render(self) -> str:
        if not self.value and not self.focused:
            return f"  {self.placeholder}"
        text = self.value + ("█" if self.focused else "")
        return "\n".join(f"  {line}" for line in text.split("\n"))


@dataclass
class FormField:
    """A labelled input plus its inline validation error."""
    id: str
    label: str
    input: TextInput
    error: str = ""

    @property
    def value(self) -> str:
        return self.input.value


class Form:
    """Ordered fields with one current field; tab/shift+tab move between them."""

    def __init__(self, fields: List[FormField], submit_text: str = "Submit",
                 cancel_text: str = "Cancel") -> None:
        self.fields = fields
        self.current = 0
        self.focused = False
        self.submit_text = submit_text
        self.cancel_text = cancel_text

    def field(self, field_id: str) -> FormField:
        for f in self.fields:
            if f.id == field_id:
                return f
        raise KeyError(field_id)

    def focus(self) -> None:
        self.focused = True
        if self.fields:
            self.fields[self.current].input.focus()

    def blur(self) -> None:
        self.focused = False
        for f in self.fields:
            f.input.blur()

    def set_current(self, index: int) -> None:
        if not 0 <= index < len(self.fields):
            return
        self.fields[self.current].input.blur()
        self.current = index
        if self.focused:
            self.fields[self.current].input.focus()

    def values(self) -> Dict[str, str]:
        return {f.id: f.value for f in self.fields}

    def clear_errors(self) -> None:
        for f in self.fields:
            f.error = ""

    def update(self, msg: Key) -> bool:
        """Route a key to the form; returns True if a value changed."""
        if not self.focused or not self.fields:
            return False
        if msg.key in ("tab", "down"):
            self.set_current(min(self.current + 1, len(self.fields) - 1))
            return False
        if msg.key in ("shift+tab", "up"):
            self.set_current(max(self.current - 1, 0))
            return False
        return self.fields[self.current].input.update(msg)

    def render(self) -> str:
        lines: List[str] = []
        for f in self.fields:
            if isinstance(f.input, TextArea):
                lines.append(f"{f.label}*")
            lines.append(f.input.render())
            if f.error:
                lines.append(f"⚠ {f.error}")
            lines.append("")
        hints = "TAB:next Shift+TAB:prev"
        if self.submit_text:
            hints += f" Enter:{self.submit_text}"
        if self.cancel_text:
            hints += f" ESC:{self.cancel_text}"
        lines.append(hints)
        return "\n".join(lines)


class Paginator:
    """Page bookkeeping for server- or client-side paging."""

    def __init__(self, per_page: int) -> None:
        self.per_page = per_page
        self.page = 1
        self.total_items = 0

    @property
    def total_pages(self) -> int:
        if self.total_items <= 0:
            return 1
        return max(1, -(-self.total_items // self.per_page))

    def set_total_items(self, total: int) -> None:
        self.total_items = max(0, total)
        if self.page > self.total_pages:
            self.page = self.total_pages

    def can_go_next(self) -> bool:
        return self.page < self.total_pages

    def can_go_prev(self) -> bool:
        return self.page > 1

    def next_page(self) -> bool:
        if not self.can_go_next():
            return False
        self.page += 1
        return True

    def prev_page(self) -> bool:
        if not self.can_go_prev():
            return False
        self.page -= 1
        return True

    def reset(self) -> None:
        self.page = 1
        self.total_items = 0

    def slice_bounds(self) -> Tuple[int, int]:
        """Start/end indexes of the current page within the full item list."""
        start = (self.page - 1) * self.per_page
        return start, min(start + self.per_page, self.total_items)

    def items_on_page(self) -> int:
        start, end = self.slice_bounds()
        return max(0, end - start)

    def render(self) -> str:
        return f"Page {self.page}/{self.total_pages} ({self.total_items} total)"


class ConfirmDialog:
    """Yes/no prompt embedded in a view."""

    def __init__(self, title: str, message: str) -> None:
        self.title = title
        self.message = message
        self.visible = False

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def update(self, msg: Key) -> Optional[bool]:
        """Return True on confirm, False on cancel, None for other keys."""
        if not self.visible:
            return None
        if msg.key in ("y", "Y", "enter"):
            self.visible = False
            return True
        if msg.key in ("n", "N", "escape"):
            self.visible = False
            return False
        return None

    def render(self) -> str:
        return f"{self.title}\n{self.message}\n\n[y] Yes   [n] No"


class NotificationKind:
    NONE = "none"
    ERROR = "error"
    INFO = "info"


@dataclass
class StatusBar:
    """Notification overlay with a fallback to the current view's key help.

    ``generation`` increases with every notification so a clear armed for an
    older one can be recognised and ignored.
    """
    kind: str = NotificationKind.NONE
    message: str = ""
    generation: int = 0
    deadline: Optional[float] = None
    view_label: str = ""
    key_help: str = ""

    def _show(self, kind: str, message: str, deadline: Optional[float]) -> int:
        self.kind = kind
        self.message = message
        self.deadline = deadline
        self.generation += 1
        return self.generation

    def show_error(self, message: str, deadline: Optional[float] = None) -> int:
        return self._show(NotificationKind.ERROR, message, deadline)

    def show_info(self, message: str, deadline: Optional[float] = None) -> int:
        return self._show(NotificationKind.INFO, message, deadline)

    def clear(self) -> None:
        self.kind = NotificationKind.NONE
        self.message = ""
        self.deadline = None

    def clear_if_current(self, generation: int) -> bool:
        if generation != self.generation or self.kind == NotificationKind.NONE:
            return False
        self.clear()
        return True

    def expire(self, now: float) -> bool:
        """Clear a notification whose deadline has passed."""
        if self.kind == NotificationKind.NONE or self.deadline is None:
            return False
        if now < self.deadline:
            return False
        self.clear()
        return True

    def set_view(self, label: str, key_help: str) -> None:
        self.view_label = label
        self.key_help = key_help

    @property
    def has_error(self) -> bool:
        return self.kind == NotificationKind.ERROR

    def render(self) -> str:
        if self.kind == NotificationKind.ERROR:
            return f"⚠ {self.message}"
        if self.kind == NotificationKind.INFO:
            return f"✓ {self.message}"
        return f"{self.view_label} | {self.key_help}"
