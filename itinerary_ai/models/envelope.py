"""Conversation and reply envelope shared by every provider adapter."""

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    """One conversation turn."""

    role: Role
    content: str


class EnvelopeMessage(BaseModel):
    """Assistant message inside an envelope choice."""

    role: str = "assistant"
    content: str | None = None


class EnvelopeChoice(BaseModel):
    """Single completion choice."""

    message: EnvelopeMessage | None = None
    text: str | None = None


class ProviderEnvelope(BaseModel):
    """Uniform reply shape every adapter decodes its backend payload into."""

    choices: list[EnvelopeChoice] = Field(default_factory=list)

    @classmethod
    def from_text(cls, content: str | None) -> "ProviderEnvelope":
        """Wrap plain completion text into a one-choice envelope."""
        return cls(
            choices=[
                EnvelopeChoice(
                    message=EnvelopeMessage(role="assistant", content=content),
                    text=content,
                )
            ]
        )

    def first_content(self) -> str | None:
        """Return the first non-blank content of the first choice, if any."""
        if not self.choices:
            return None
        first = self.choices[0]
        if first.message is not None and first.message.content and first.message.content.strip():
            return first.message.content
        if first.text and first.text.strip():
            return first.text
        return None
