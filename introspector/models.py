"""
Data model for a guided introspection session.

Messages are immutable; a Session only ever grows by appending them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Style(str, Enum):
    """Tone of the guide. Selects one personality block of the system prompt."""

    SOCRATIC = "socratic"
    WARM = "warm"
    CHALLENGER = "challenger"

    @property
    def label(self) -> str:
        return _STYLE_LABELS[self]

    @classmethod
    def options(cls) -> list[tuple[str, str]]:
        """(value, label) pairs in display order."""
        return [(s.value, s.label) for s in cls]

    @classmethod
    def parse(cls, value: str | Style) -> Style:
        if isinstance(value, Style):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown style '{value}' (expected one of: {valid})") from None


_STYLE_LABELS = {
    Style.SOCRATIC: "Socratic Guide",
    Style.WARM: "Warm Therapist",
    Style.CHALLENGER: "Direct Challenger",
}

# Speaker labels used when the transcript is flattened for summarization
SPEAKER_LABELS = {
    Role.USER: "You",
    Role.ASSISTANT: "Introspector",
}


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


@dataclass
class Session:
    """
    One dialogue from opening haiku to finalization.

    context_text is captured once at begin() and reused for every turn.
    """

    style: Style
    context_text: str = ""
    messages: list[Message] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    opening_text: str = ""
    id: str = field(default_factory=lambda: uuid4().hex)

    def append(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content)
        self.messages.append(message)
        return message

    @property
    def start_date(self) -> str:
        return self.started_at.date().isoformat()

    @property
    def last_assistant_reply(self) -> str:
        for message in reversed(self.messages):
            if message.role is Role.ASSISTANT:
                return message.content
        return ""

    def history(self) -> list[dict]:
        """Messages in wire shape, in turn order."""
        return [m.to_dict() for m in self.messages]

    def transcript(self) -> str:
        """Flatten the dialogue into labelled blocks for the summary call."""
        return "\n\n".join(
            f"{SPEAKER_LABELS[m.role]}: {m.content}" for m in self.messages
        )


@dataclass
class SummaryResult:
    insights: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
