"""Short notification messages shown to the user."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_LINE_WIDTH = 6


class ButtonType(enum.Enum):
    """Which buttons a tip offers."""

    ONLY_OK = "ok"
    OK_CANCEL = "ok_cancel"


def format_tips(message: str) -> str:
    """Break a message into lines starting every six characters.

    Each piece is sliced from its start offset with a length of
    ``offset + 6``, so later lines may repeat text from the following
    ones; this matches how the tips label has always been filled.
    """
    pieces = []
    index = 0
    while index < len(message):
        pieces.append(message[index : 2 * index + _LINE_WIDTH])
        if index + _LINE_WIDTH >= len(message):
            break
        index += _LINE_WIDTH
    return "\n".join(pieces)


@dataclass(frozen=True)
class Tip:
    """A message with the buttons the user may answer it with."""

    message: str
    button_type: ButtonType = ButtonType.ONLY_OK

    @property
    def has_cancel(self) -> bool:
        return self.button_type is ButtonType.OK_CANCEL

    def text(self) -> str:
        """The message as it is laid out on screen."""
        return format_tips(self.message)