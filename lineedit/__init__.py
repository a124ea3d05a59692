"""Terminal capabilities, screen output, history and history expansion for line editors."""

__version__ = "0.1.0"

__all__ = ["capabilities", "screen", "echotc", "history", "tokens", "expansion"]