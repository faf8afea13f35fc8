"""
Console frontend for the passcode-gated chat.

Runs the passcode keypad and the streaming chat loop in a terminal using
the protocol-based core components.
"""

import argparse
import asyncio
from dotenv import load_dotenv
from rich.console import Console

from ..config import load_config
from ..core.application import ChatApplication
from ..core.conversation import Role
from ..core.errors import ConfigError
from ..interfaces.console_interface import ConsoleUserInterface, ConsoleLogger
from ..provider.llm_client import LLMClient

QUIT_COMMANDS = ['quit', 'exit', 'bye']


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Passcode-gated streaming chat with web-grounded citations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m saya_chat.frontends.console_frontend
  python -m saya_chat.frontends.console_frontend --model gemini/gemini-2.5-flash --verbose
        """
    )

    parser.add_argument(
        "--model",
        default=None,
        help="LLM model to use (default: $LITELLM_MODEL or gemini/gemini-2.5-flash)"
    )

    parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Temperature for LLM responses (default: 0.7)"
    )

    parser.add_argument(
        "--no-web-search",
        dest="web_search",
        action="store_false",
        default=None,
        help="Disable web-search grounding"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


def apply_keypad_input(app: ChatApplication, keys: str):
    """Feed a line of keypad input to the gate: digits, '<' for backspace, 'c' to clear."""
    for key in keys.strip():
        if key == "<":
            app.gate.backspace()
        elif key.lower() == "c":
            app.gate.clear()
        else:
            app.gate.append_digit(key)
        if app.gate.authenticated or app.gate.error_flag:
            break


async def unlock(app: ChatApplication, ui: ConsoleUserInterface) -> bool:
    """Prompt until the passcode is accepted. Returns False if the user quits."""
    while not app.gate.authenticated:
        keys = await ui.get_passcode_input()
        if keys is None:
            return False

        apply_keypad_input(app, keys)
        ui.display_passcode(app.gate.masked, app.gate.error_flag)

        if app.gate.error_flag:
            # The gate clears itself once the error delay has elapsed
            while app.gate.error_flag:
                await asyncio.sleep(0.05)
    return True


async def chat_loop(app: ChatApplication, ui: ConsoleUserInterface):
    """Main conversation loop."""
    ui.display_conversation(app.log.turns)

    while True:
        user_input = await ui.get_user_input()

        if user_input is None or user_input.strip().lower() in QUIT_COMMANDS:
            ui.display_message("Goodbye!")
            break

        if not user_input.strip():
            continue

        with ui.live_turn() as update:
            def on_change(log):
                if log.last is not None and log.last.role is Role.ASSISTANT:
                    update(log.last, app.typing)

            unsubscribe = app.log.subscribe(on_change)
            try:
                await app.send_turn(user_input)
            finally:
                unsubscribe()


async def run(app: ChatApplication, ui: ConsoleUserInterface):
    if await unlock(app, ui):
        await chat_loop(app, ui)


def load_console_config(args, ui: ConsoleUserInterface):
    """Load the configuration, reporting a bad one through the UI."""
    try:
        return load_config(
            model=args.model,
            temperature=args.temperature,
            web_search=args.web_search
        )
    except ConfigError as e:
        ui.display_error(f"Invalid configuration: {e}")
        raise SystemExit(2)


def main():
    """Main entry point."""
    load_dotenv()
    args = parse_arguments()

    console = Console()
    ui = ConsoleUserInterface(console)
    config = load_console_config(args, ui)
    ui.assistant_name = config.assistant_name

    logger = ConsoleLogger(console, verbose=args.verbose)
    provider = LLMClient(model=config.model, temperature=config.temperature, logger=logger)

    console.print(f"[bold cyan]💬 {config.assistant_name} AI[/bold cyan]")
    ui.display_info(f"Enter the {len(config.passcode)}-digit passcode: digits, '<' to delete, 'c' to clear.")
    console.print()

    app = ChatApplication(config, provider, logger)
    asyncio.run(run(app, ui))


if __name__ == "__main__":
    main()
