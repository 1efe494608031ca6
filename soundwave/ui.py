"""
Console output for SoundWave.

Shows the latest push/pull label and frequency. A None result never
overwrites what is on screen.
"""

import sys
from typing import Optional, TextIO

from .bands import GestureResult


class ConsoleUI:
    """
    Single-line gesture display for the terminal.
    """
    
    def __init__(self, stream: Optional[TextIO] = None, show_updates: bool = True):
        self.stream = stream if stream is not None else sys.stdout
        self.show_updates = show_updates
        self.text = "None"
        self._updates = 0
    
    def set_text(self, text: str) -> bool:
        """Replace the displayed text. Returns False if the text was "None"."""
        if text == "None":
            return False
        self.text = text
        self._updates += 1
        if self.show_updates:
            label = text.replace("\n", "  ")
            print(f"\r{label:<24}", end="", flush=True, file=self.stream)
        return True
    
    def show(self, result: GestureResult) -> bool:
        """Display a result, ignoring frames with no gesture."""
        return self.set_text(str(result))
    
    @property
    def updates(self) -> int:
        """How many times the display changed."""
        return self._updates
