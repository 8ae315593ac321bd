"""Errors raised while encoding and decoding wire-format messages."""

from __future__ import annotations


class DecodeError(ValueError):
    """The input does not hold a valid message.

    The description is a best-effort root cause; the stack records the
    (message, field) locations where decoding failed, one per nesting level.
    """

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = str(description)
        self._stack: list[tuple[str, str]] = []

    @property
    def stack(self) -> tuple[tuple[str, str], ...]:
        """The recorded (message, field) locations, in the order pushed."""
        return tuple(self._stack)

    def push(self, message: str, field: str) -> None:
        """Record a (message, field) location where decoding failed."""
        self._stack.append((message, field))

    def __str__(self) -> str:
        locations = "".join(f"{message}.{field}: " for message, field in self._stack)
        return f"failed to decode Protobuf message: {locations}{self.description}"

    def __repr__(self) -> str:
        return (
            f"DecodeError(description={self.description!r}, "
            f"stack={self._stack!r})"
        )


class EncodeError(ValueError):
    """A message could not be encoded because the buffer is too small."""

    def __init__(self, required: int, remaining: int) -> None:
        super().__init__(required, remaining)
        self.required = required
        self.remaining = remaining

    def __str__(self) -> str:
        return (
            "failed to encode Protobuf message; insufficient buffer capacity "
            f"(required: {self.required}, remaining: {self.remaining})"
        )

    def __repr__(self) -> str:
        return f"EncodeError(required={self.required}, remaining={self.remaining})"