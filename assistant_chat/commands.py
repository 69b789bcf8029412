"""Pure parsing helpers for slash commands typed into the composer."""

from __future__ import annotations

from dataclasses import dataclass

SLASH_COMMANDS: dict[str, str] = {
    "/new": "Start a new conversation; text after it is sent as the first message",
    "/help": "Show help",
    "/copy": "Copy the latest assistant reply",
    "/quit": "Exit the app",
}


@dataclass(frozen=True)
class SlashCommand:
    """A recognised command and the text typed after it."""

    name: str
    args: str = ""


def parse_slash_command(text: str) -> SlashCommand | None:
    """Return the command in *text*, or ``None`` when it is a normal message.

    Unknown ``/words`` are not commands, so they reach the assistant as typed.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None
    head, _, rest = stripped.partition(" ")
    name = head.lower()
    if name not in SLASH_COMMANDS:
        return None
    return SlashCommand(name=name, args=rest.strip())


def help_text(bindings: list[tuple[str, str]] | None = None) -> str:
    """Build the help dialog body from commands and ``(key, description)`` pairs."""
    lines = ["Commands:", ""]
    for name, description in SLASH_COMMANDS.items():
        lines.append(f"{name} - {description}")
    if bindings:
        lines.append("")
        lines.append("Keys:")
        for key, description in bindings:
            lines.append(f"{key} - {description}")
    return "\n".join(lines)
