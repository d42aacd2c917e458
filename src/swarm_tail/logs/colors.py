"""Stable per-source colors for the line prefixes."""

import threading
from typing import Dict, Iterable, Sequence, Tuple

from colorama import Fore, Style

from swarm_tail.core.exceptions import ConfigurationError


COLOR_NAMES = {
    'black': Fore.BLACK,
    'red': Fore.RED,
    'green': Fore.GREEN,
    'yellow': Fore.YELLOW,
    'blue': Fore.BLUE,
    'magenta': Fore.MAGENTA,
    'cyan': Fore.CYAN,
    'white': Fore.WHITE,
    'light_black': Fore.LIGHTBLACK_EX,
    'light_red': Fore.LIGHTRED_EX,
    'light_green': Fore.LIGHTGREEN_EX,
    'light_yellow': Fore.LIGHTYELLOW_EX,
    'light_blue': Fore.LIGHTBLUE_EX,
    'light_magenta': Fore.LIGHTMAGENTA_EX,
    'light_cyan': Fore.LIGHTCYAN_EX,
    'light_white': Fore.LIGHTWHITE_EX,
}

DEFAULT_PALETTE_NAMES = ('yellow', 'red', 'cyan', 'green', 'magenta')
DEFAULT_PALETTE = tuple(COLOR_NAMES[name] for name in DEFAULT_PALETTE_NAMES)

MIN_PALETTE_SIZE = 4


def palette_from_names(names: Iterable[str]) -> Tuple[str, ...]:
    """Map configured color names onto terminal colors"""
    palette = []
    for name in names:
        color = COLOR_NAMES.get(name.strip().lower())
        if color is None:
            raise ConfigurationError(
                f"Unknown palette color: {name}",
                {"available": sorted(COLOR_NAMES)}
            )
        palette.append(color)

    if len(palette) < MIN_PALETTE_SIZE:
        raise ConfigurationError(
            f"Palette needs at least {MIN_PALETTE_SIZE} colors, got {len(palette)}"
        )
    return tuple(palette)


class ColorPicker:
    """
    Assigns each identifier a color, round-robin over a fixed palette.

    Every tailer shares one picker. The lookup-or-assign step runs under a
    single lock, so an identifier keeps its first color for the whole run.
    """

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE, enabled: bool = True):
        if len(palette) < MIN_PALETTE_SIZE:
            raise ValueError(
                f"Palette needs at least {MIN_PALETTE_SIZE} colors, got {len(palette)}"
            )
        self.palette = tuple(palette)
        self.enabled = enabled
        self._colors: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._last_used = 0

    def pick(self, identifier: str) -> str:
        """Return the color of ``identifier``, assigning the next one if it is new."""
        with self._lock:
            color = self._colors.get(identifier)
            if color is not None:
                return color

            if self._last_used >= len(self.palette):
                self._last_used = 0

            color = self.palette[self._last_used]
            self._colors[identifier] = color
            self._last_used += 1
            return color

    def colorize(self, identifier: str) -> str:
        """Wrap ``identifier`` in its color"""
        if not self.enabled:
            return identifier
        return f"{self.pick(identifier)}{identifier}{Style.RESET_ALL}"

    def assigned(self) -> Dict[str, str]:
        """Snapshot of the identifier to color table"""
        with self._lock:
            return dict(self._colors)
