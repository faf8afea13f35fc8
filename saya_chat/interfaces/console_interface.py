"""
Console implementation of ChatUserInterface and ChatLogger protocols.

This module provides Rich-based console implementations that can be used
for command-line interfaces.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence
from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.text import Text
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style
from prompt_toolkit.formatted_text import FormattedText

from ..core.conversation import Role, Turn
from ..core.protocols import ChatUserInterface, ChatLogger
from .formatting import sources_markdown


class ConsoleUserInterface(ChatUserInterface):
    """Rich console implementation of ChatUserInterface."""

    def __init__(self, console: Console = None, assistant_name: str = "Saya"):
        """
        Initialize console interface.

        Args:
            console: Rich Console instance (creates new one if None)
            assistant_name: Label shown in front of assistant turns
        """
        self.console = console or Console()
        self.assistant_name = assistant_name
        self.session = PromptSession(history=InMemoryHistory())
        self.prompt_style = Style.from_dict({
            'username': '#00aaff bold',  # Blue color for "You: "
            'passcode': '#ffaa00 bold',
        })

    def render_turn(self, turn: Turn, typing: bool = False):
        """Build the renderable for one turn."""
        if turn.role is Role.USER:
            header = Text("👤 You:", style="bold blue")
        else:
            header = Text(f"🤖 {self.assistant_name}:", style="bold green")

        parts = [header]
        if typing and not turn.content:
            parts.append(Text("…", style="dim green"))
        else:
            parts.append(Markdown(turn.content))

        sources = sources_markdown(turn.sources)
        if sources:
            parts.append(Markdown(sources, style="dim"))
        return Group(*parts)

    def display_conversation(self, turns: Sequence[Turn], typing: bool = False):
        """Print every turn in order."""
        for index, turn in enumerate(turns):
            is_last = index == len(turns) - 1
            self.console.print(self.render_turn(turn, typing=typing and is_last))
            self.console.print()

    @contextmanager
    def live_turn(self) -> Iterator[Callable[[Turn, bool], None]]:
        """Context yielding an updater that re-renders the in-flight turn in place."""
        with Live(Text(""), refresh_per_second=10, console=self.console) as live:
            def update(turn: Turn, typing: bool = False):
                live.update(self.render_turn(turn, typing=typing))
            yield update
        self.console.print()

    def display_passcode(self, masked: str, error: bool):
        """Display the masked passcode, in red after a wrong code."""
        if error:
            self.console.print(f"[bold red]🔒 {masked}  Wrong passcode[/bold red]")
        else:
            self.console.print(f"[bold yellow]🔒 {masked}[/bold yellow]")

    def display_message(self, content: str):
        """Display a message."""
        self.console.print(Markdown(content))

    async def get_passcode_input(self) -> Optional[str]:
        """Read a line of keypad input: digits, '<' for backspace, 'c' to clear."""
        try:
            return await self.session.prompt_async(
                FormattedText([('class:passcode', 'Passcode: ')]),
                is_password=True,
                style=self.prompt_style
            )
        except (KeyboardInterrupt, EOFError):
            return None

    async def get_user_input(self, prompt: str = "You: ") -> Optional[str]:
        """Get user input with enhanced editing capabilities."""
        try:
            user_input = await self.session.prompt_async(
                FormattedText([('class:username', prompt)]),
                enable_history_search=True,
                style=self.prompt_style,
                complete_style='column'
            )
            return user_input
        except (KeyboardInterrupt, EOFError):
            return None

    def display_error(self, error_message: str):
        """Display error message."""
        self.console.print(f"[bold red]❌ Error: {error_message}[/bold red]")

    def display_info(self, info: str):
        """Display informational message."""
        self.console.print(f"[blue]ℹ️  {info}[/blue]")


class ConsoleLogger(ChatLogger):
    """Console implementation of ChatLogger."""

    def __init__(self, console: Console = None, verbose: bool = True):
        """
        Initialize console logger.

        Args:
            console: Rich Console instance (creates new one if None)
            verbose: Whether to display debug messages
        """
        self.console = console or Console()
        self.verbose = verbose

    def log_debug(self, message: str):
        """Log debug message."""
        if self.verbose:
            self.console.print(f"[dim]🔍 DEBUG: {message}[/dim]")

    def log_info(self, message: str):
        """Log info message."""
        if self.verbose:
            self.console.print(f"[blue]ℹ️  INFO: {message}[/blue]")

    def log_error(self, message: str, exc_info: bool = False):
        """Log error message."""
        self.console.print(f"[bold red]❌ ERROR: {message}[/bold red]")
        if exc_info and self.verbose:
            self.console.print_exception()

    def log_warning(self, message: str):
        """Log warning message."""
        if self.verbose:
            self.console.print(f"[yellow]⚠️  WARNING: {message}[/yellow]")

    def log_llm_request(self, model: str, messages: Any, tools: Any = None):
        """Log LLM request."""
        if self.verbose:
            num_messages = len(messages) if hasattr(messages, '__len__') else 'unknown'
            num_tools = len(tools) if tools and hasattr(tools, '__len__') else 0
            self.console.print(f"[magenta]🧠 LLM REQUEST: {model} - {num_messages} messages, {num_tools} tools[/magenta]")

    def log_llm_response(self, content: str, num_citations: int = 0, duration: float = None):
        """Log LLM response."""
        if self.verbose:
            content_preview = content[:50] + "..." if content and len(content) > 50 else content or ""
            timing = f" ({duration:.2f}s)" if duration is not None else ""
            self.console.print(f"[magenta]🧠 LLM RESPONSE: '{content_preview}' - citations: {num_citations}{timing}[/magenta]")
