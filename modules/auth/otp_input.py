"""Digit-by-digit OTP entry with auto-advance and backspace-to-previous focus."""

from typing import Callable, Optional

OTP_LENGTH = 6


class OtpInput:
    """
    State of a row of single-digit boxes.

    Typing a digit fills the focused box and moves focus right; backspace on
    an empty box moves focus left; pasting fills from the first box. Once
    every box holds a digit ``on_complete`` is called with the whole code.
    """

    def __init__(
        self,
        on_complete: Optional[Callable[[str], None]] = None,
        length: int = OTP_LENGTH,
    ):
        self.length = length
        self._digits: list[str] = [""] * length
        self._on_complete = on_complete
        self.focus = 0

    @property
    def digits(self) -> list[str]:
        return list(self._digits)

    @property
    def value(self) -> str:
        return "".join(self._digits)

    @property
    def complete(self) -> bool:
        return all(self._digits)

    def _notify(self) -> None:
        if self.complete and self._on_complete is not None:
            self._on_complete(self.value)

    def input(self, index: int, char: str) -> None:
        """Set box ``index`` to ``char``. Non-digits are ignored; "" clears."""
        if char and not char.isdigit():
            return
        char = char[-1:] if char else ""
        self._digits[index] = char
        if char and index < self.length - 1:
            self.focus = index + 1
        else:
            self.focus = index
        self._notify()

    def type(self, char: str) -> None:
        """Type into the focused box."""
        self.input(self.focus, char)

    def backspace(self, index: Optional[int] = None) -> None:
        """Backspace in box ``index`` (default: focused box)."""
        if index is None:
            index = self.focus
        if self._digits[index]:
            self._digits[index] = ""
            self.focus = index
        elif index > 0:
            self.focus = index - 1

    def paste(self, text: str) -> None:
        """Fill boxes from the start with the leading characters of ``text``."""
        for index, char in enumerate(text[: self.length]):
            if char.isdigit():
                self._digits[index] = char
        empty = [i for i, d in enumerate(self._digits) if not d]
        self.focus = empty[0] if empty else self.length - 1
        self._notify()

    def clear(self) -> None:
        self._digits = [""] * self.length
        self.focus = 0
