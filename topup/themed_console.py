"""Themed console with automatic dark/light detection."""

import configparser
import os
from pathlib import Path
from typing import Dict

from rich.console import Console as RichConsole

THEMES: Dict[str, Dict[str, str]] = {
    "dark": {
        "success": "green",
        "error": "bold red",
        "warning": "yellow",
        "info": "cyan",
        "dim": "dim",
        "header": "bold cyan",
        "command": "magenta",
    },
    "light": {
        "success": "dark_green",
        "error": "bold red",
        "warning": "dark_orange3",
        "info": "blue",
        "dim": "grey50",
        "header": "bold blue",
        "command": "purple",
    },
}


class ThemedConsole(RichConsole):
    """Console with theme support and semantic color methods."""

    def __init__(self, config_file: Path = None, **kwargs):
        super().__init__(**kwargs)
        self.config_file = config_file or Path.home() / ".topup" / "config.ini"
        self.current_theme_name = self._get_theme_from_config()
        self.theme = self._resolve_theme()

    def _get_theme_from_config(self) -> str:
        """Get theme from config, default to auto."""
        if not self.config_file.exists():
            return "auto"

        config = configparser.ConfigParser(interpolation=None)
        try:
            config.read(self.config_file)
            return config.get("ui", "theme", fallback="auto")
        except configparser.Error:
            return "auto"

    def _resolve_theme(self) -> Dict[str, str]:
        """Resolve theme name to actual theme dict."""
        if self.current_theme_name == "auto":
            detected = "dark" if self._is_dark_terminal() else "light"
            return THEMES[detected]
        return THEMES.get(self.current_theme_name, THEMES["dark"])

    def _is_dark_terminal(self) -> bool:
        """Detect if terminal has dark background."""
        # COLORFGBG is "fg;bg" in rxvt, konsole and friends
        colorfgbg = os.environ.get("COLORFGBG", "")
        if colorfgbg and ";" in colorfgbg:
            bg = colorfgbg.split(";")[-1]
            if bg.isdigit():
                return int(bg) <= 7

        if os.environ.get("THEME", "").lower() in ["dark", "dracula", "monokai", "nord"]:
            return True

        # Most terminal emulators ship a dark default
        return True

    def _colorized_print(self, text: str, style_key: str) -> None:
        """Print text with color from current theme."""
        self.print(text, style=self.theme.get(style_key, "dim"), markup=False, highlight=False)

    # Semantic color methods
    def success(self, text: str) -> None:
        """Print success message."""
        self._colorized_print(text, "success")

    def error(self, text: str) -> None:
        """Print error message."""
        self._colorized_print(text, "error")

    def warning(self, text: str) -> None:
        """Print warning message."""
        self._colorized_print(text, "warning")

    def info(self, text: str) -> None:
        """Print info message."""
        self._colorized_print(text, "info")

    def dim(self, text: str) -> None:
        """Print dimmed text."""
        self._colorized_print(text, "dim")


console = ThemedConsole()
