# CLI package for the StreamVerse backend

from .completer import StreamVerseCompleter
from .config import Config
from .console_app import ConsoleApp

__all__ = [
    "StreamVerseCompleter",
    "Config",
    "ConsoleApp",
]
