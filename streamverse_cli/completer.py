"""Command auto-completion for the CLI."""

from collections.abc import Iterable

from prompt_toolkit.completion import Completer, Completion


class StreamVerseCompleter(Completer):
    """Auto-completer for StreamVerse CLI slash commands."""

    def __init__(self):
        self.descriptions = {
            "/play": "Play a search result: /play <n> [season episode]",
            "/loaded": "Report that the player loaded the current source",
            "/fail": "Report that the current source failed to load",
            "/stop": "Stop playback",
            "/sources": "Show candidate sources of the current attempt",
            "/suggest": "Show featured titles",
            "/extract": "Extract a direct video URL: /extract <url>",
            "/sessions": "List playback sessions on the server",
            "/config": "Show/manage configuration",
            "/help": "Show help",
            "/exit": "Exit the application",
            "/quit": "Exit the application",
        }
        self.commands = list(self.descriptions)

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        """Complete slash commands only; plain text is a search query."""
        text = document.text_before_cursor

        if not text.lstrip().startswith("/") or " " in text.strip():
            return

        typed = text.lstrip()
        for cmd in self.commands:
            if cmd.startswith(typed):
                yield Completion(
                    cmd,
                    start_position=-len(typed),
                    display=cmd,
                    display_meta=self.descriptions.get(cmd, ""),
                )

    def get_commands(self) -> list[str]:
        return self.commands.copy()
