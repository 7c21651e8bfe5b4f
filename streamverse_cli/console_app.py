"""Main console application for the CLI using prompt_toolkit."""

import signal
from html import escape
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.patch_stdout import patch_stdout  # type: ignore
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .api_client import ApiClient
from .completer import StreamVerseCompleter
from .config import CONFIG_KEYS, Config
from .player_client import PlayerClient

STATUS_STYLES = {
    "loading": "yellow",
    "playing": "green",
    "failed": "red",
    "exhausted": "bold red",
    "idle": "dim",
}


def playback_kind(result: dict[str, Any]) -> str | None:
    """Map a search result's media kind onto a playback media kind."""
    kind = result.get("media_kind")
    if kind == "movie":
        return "movie"
    if kind == "tv":
        return "series"
    return None


class ConsoleApp:
    """Interactive console: plain text searches, slash commands drive playback."""

    def __init__(self, cli_config: Config):
        self._config = cli_config
        self.console = Console()
        self.api = ApiClient(self._config)
        self.player = PlayerClient(self._config)
        self.completer = StreamVerseCompleter()
        self.results: list[dict[str, Any]] = []
        self.running = True

        self.prompt_style = Style.from_dict({
            "prompt": "ansicyan bold",
            "completion-menu": "bg:default",
            "completion-menu.completion": "bg:default fg:#bbbbbb",
            "completion-menu.completion.current": "bg:#5fafff fg:#202020 bold",
            "completion-menu.meta": "bg:#202020 fg:#bbbbbb",
            "completion-menu.meta.completion": "bg:#202020 fg:#bbbbbb",
            "completion-menu.meta.completion.current": "bg:#202020 #5fafff",
            "selected": "bg:default",
        })

        self.prompt_session = PromptSession(
            completer=self.completer,
            style=self.prompt_style,
            complete_while_typing=True,
        )

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        self.console.print("\n[yellow]Received interrupt signal. Shutting down...[/yellow]")
        self.running = False

    def _print_banner(self):
        banner = Text()
        banner.append("🎬 ", style="bold blue")
        banner.append("StreamVerse CLI", style="bold white")
        banner.append(" - Search, play, and fall back across embed providers", style="dim")
        self.console.print(Panel(banner, border_style="blue", padding=(1, 2)))

        help_text = Text()
        help_text.append("Commands (with auto-completion):\n", style="bold")
        for cmd, desc in self.completer.descriptions.items():
            help_text.append(cmd, style="cyan")
            help_text.append(f" - {desc}\n", style="white")
        help_text.append("\nAny other input - Search for a movie or series", style="dim")
        self.console.print(Panel(help_text, title="Help", border_style="dim"))
        self.console.print()

    # --- Rendering ---

    def render_results(self, result: dict[str, Any]) -> None:
        if not result.get("success"):
            print_formatted_text(HTML(f"<ansiyellow>{escape(result.get('message', 'No results'))}</ansiyellow>"))
            return

        table = Table(title=f"{result['message']} for \"{result['query']}\"", title_justify="left")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Released")
        table.add_column("Type", style="magenta")
        table.add_column("TMDB id", style="dim")
        for idx, item in enumerate(self.results, 1):
            table.add_row(
                str(idx),
                Text(item.get("title") or ""),
                item.get("release_date") or "-",
                item.get("media_kind") or "-",
                str(item.get("id")),
            )
        self.console.print(table)

    def render_state(self, event: dict[str, Any]) -> None:
        if event.get("type") == "error":
            print_formatted_text(HTML(f"<ansired>Error: {escape(str(event.get('message')))}</ansired>"))
            return

        status = event.get("status", "idle")
        line = Text()
        line.append(f"[{status}] ", style=STATUS_STYLES.get(status, "white"))
        source = event.get("source")
        if source:
            total = len(event.get("candidates") or [])
            line.append(f"{source['provider_name']} ({event.get('current_index', 0) + 1}/{total}) ", style="bold")
            line.append(source["url"], style="underline")
            if event.get("player"):
                line.append(f"  via {event['player']}", style="dim")
        elif event.get("message"):
            line.append(event["message"])
        self.console.print(line)

    def render_sources(self, event: dict[str, Any] | None) -> None:
        if not event or not event.get("candidates"):
            print_formatted_text(HTML("<ansiyellow>No active playback attempt.</ansiyellow>"))
            return
        table = Table(title="Candidate sources", title_justify="left")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Provider", style="bold")
        table.add_column("URL")
        current = event.get("current_index", 0) if event.get("source") else None
        for idx, candidate in enumerate(event["candidates"]):
            marker = "→ " if idx == current else "  "
            table.add_row(f"{marker}{idx + 1}", candidate["provider_name"], Text(candidate["url"]))
        self.console.print(table)

    # --- Commands ---

    async def _search(self, query: str) -> None:
        result = await self.api.search(query)
        if "error" in result:
            print_formatted_text(HTML(f"<ansired>{escape(result['error'])}</ansired>"))
            return
        self.results = result.get("results") or []
        self.render_results(result)

    async def _ensure_player(self) -> bool:
        if self.player.is_connected:
            return True
        try:
            await self.player.connect()
        except Exception as e:
            print_formatted_text(HTML(f"<ansired>Failed to connect to playback channel: {escape(str(e))}</ansired>"))
            return False
        return True

    async def _play(self, args: list[str]) -> None:
        if not args or not args[0].isdigit():
            print_formatted_text(HTML("<ansired>Usage: /play &lt;n&gt; [season episode]</ansired>"))
            return
        idx = int(args[0])
        if not 1 <= idx <= len(self.results):
            print_formatted_text(HTML("<ansired>No such result. Search first, then pick a number.</ansired>"))
            return

        item = self.results[idx - 1]
        kind = playback_kind(item)
        if kind is None:
            print_formatted_text(HTML(f"<ansired>Cannot play a {escape(str(item.get('media_kind')))}</ansired>"))
            return
        try:
            season = int(args[1]) if len(args) > 1 else None
            episode = int(args[2]) if len(args) > 2 else None
        except ValueError:
            print_formatted_text(HTML("<ansired>Season and episode must be numbers</ansired>"))
            return

        if not await self._ensure_player():
            return
        print_formatted_text(HTML(f"<ansiblue>Selecting {escape(item.get('title') or '')}...</ansiblue>"))
        self.render_state(await self.player.select(item["id"], kind, season, episode))

    async def _signal(self, name: str) -> None:
        if not self.player.is_connected:
            print_formatted_text(HTML("<ansiyellow>Nothing is playing. Use /play first.</ansiyellow>"))
            return
        if name == "loaded":
            event = await self.player.report_loaded()
        elif name == "error":
            event = await self.player.report_error()
        else:
            event = await self.player.clear()
        self.render_state(event)

    async def _sessions(self, args: list[str]) -> None:
        if args and args[0] == "delete" and len(args) > 1:
            ok, msg = await self.api.delete_session(args[1])
            color = "ansigreen" if ok else "ansired"
            print_formatted_text(HTML(f"<{color}>{escape(msg)}</{color}>"))
            return

        result = await self.api.list_sessions()
        if "error" in result:
            print_formatted_text(HTML(f"<ansired>{escape(result['error'])}</ansired>"))
            return
        sessions = result.get("sessions", [])
        if not sessions:
            print_formatted_text(HTML("<ansiyellow>No active playback sessions.</ansiyellow>"))
            return
        print_formatted_text(HTML(f"<b>Active Sessions ({result.get('count', len(sessions))}):</b>"))
        for idx, sid in enumerate(sessions, 1):
            marker = " → " if sid == self.player.session_id else "   "
            print_formatted_text(f"{marker}{idx}. {sid}")

    async def _suggest(self) -> None:
        result = await self.api.suggestions()
        if "error" in result:
            print_formatted_text(HTML(f"<ansired>{escape(result['error'])}</ansired>"))
            return
        self.results = result.get("results") or []
        self.render_results({
            "success": bool(self.results),
            "message": f"{len(self.results)} suggestion(s)",
            "query": "featured",
        })

    async def _extract(self, args: list[str]) -> None:
        if not args:
            print_formatted_text(HTML("<ansired>Usage: /extract &lt;url&gt; [format]</ansired>"))
            return
        result = await self.api.extract(args[0], args[1] if len(args) > 1 else None)
        if result.get("error"):
            print_formatted_text(HTML(f"<ansired>{escape(result['error'])}</ansired>"))
        else:
            self.console.print(Text(result["video_url"], style="underline"))

    def _config_command(self, args: list[str]) -> None:
        if not args:
            print_formatted_text("Current Configuration:")
            for key, value in self._config.to_dict().items():
                print_formatted_text(f"  {key} = {value}")
            return
        if len(args) < 2:
            print_formatted_text(HTML("<ansired>Usage: /config &lt;key&gt; &lt;value&gt;</ansired>"))
            return
        key, value = args[0], " ".join(args[1:])
        try:
            self._config.set_value(key, value)
        except ValueError as e:
            print_formatted_text(HTML(f"<ansired>{escape(str(e))}</ansired>"))
            print_formatted_text(HTML(f"<ansiyellow>Available keys: {', '.join(CONFIG_KEYS)}</ansiyellow>"))
            return
        print_formatted_text(HTML(f"<ansigreen>Set {escape(key)} = {escape(value)}</ansigreen>"))

    async def _handle_command(self, command: str) -> bool:
        """Handle a slash command. Returns False when the app should exit."""
        parts = command.strip().split()
        if not parts:
            return True

        cmd = parts[0].lower()
        args = parts[1:]

        if cmd in ("/exit", "/quit"):
            print_formatted_text(HTML("<ansiyellow>Exiting...</ansiyellow>"))
            return False
        elif cmd == "/play":
            await self._play(args)
        elif cmd == "/loaded":
            await self._signal("loaded")
        elif cmd == "/fail":
            await self._signal("error")
        elif cmd == "/stop":
            await self._signal("clear")
        elif cmd == "/sources":
            self.render_sources(self.player.state)
        elif cmd == "/suggest":
            await self._suggest()
        elif cmd == "/extract":
            await self._extract(args)
        elif cmd == "/sessions":
            await self._sessions(args)
        elif cmd == "/config":
            self._config_command(args)
        elif cmd == "/help":
            self._print_banner()
        else:
            print_formatted_text(HTML(f"<ansired>Unknown command: {escape(cmd)}</ansired>"))
            print_formatted_text(HTML("<ansiyellow>Type /help for available commands</ansiyellow>"))

        return True

    async def run(self):
        """Run the main application."""
        self._print_banner()
        print_formatted_text(HTML("<ansigreen>Ready! Type a title to search or / for commands.</ansigreen>\n"))

        try:
            with patch_stdout():
                while self.running:
                    try:
                        user_input = await self.prompt_session.prompt_async(HTML("<prompt>› </prompt>"))
                        user_input = user_input.strip()
                        if not user_input:
                            continue

                        if user_input.startswith("/"):
                            if not await self._handle_command(user_input):
                                break
                        else:
                            await self._search(user_input)

                    except KeyboardInterrupt:
                        print_formatted_text(HTML("\n<ansiyellow>Interrupted by user.</ansiyellow>"))
                        break
                    except EOFError:
                        print_formatted_text(HTML("\n<ansiyellow>End of input.</ansiyellow>"))
                        break
                    except Exception as e:
                        print_formatted_text(HTML(f"<ansired>Unexpected error: {escape(str(e))}</ansired>"))
        finally:
            await self._cleanup()

    async def _cleanup(self):
        await self.player.disconnect()
        await self.api.close()
        print_formatted_text(HTML("<ansigreen>Goodbye!</ansigreen>"))
