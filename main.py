#!/usr/bin/env python3
"""
Chatbot - Main Entry Point
==========================

This is the main entry point for the chatbot. It starts the terminal chat
window by default and offers a few one-shot modes.

Usage:
    python main.py                     # Start the chat window
    python main.py --test "Hello"      # Print the reply to one message
    python main.py --status            # Show loaded rules and settings
    python main.py --init-config       # Write a default config.yaml
    python main.py --help              # Show help
"""

import sys
import argparse
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, create_default_config, Config
from core.logging import setup_logging, get_logger
from core.exceptions import ChatbotError

logger = get_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Chatbot - rule-based terminal chatbot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  Start the chat window
  python main.py --test "my name is Anna"         Print one reply
  python main.py --conversations rules.yaml       Use another rule file
  python main.py --status                         Show rules and settings
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--tui",
        action="store_true",
        help="Start the terminal chat window (default)"
    )
    mode_group.add_argument(
        "--test",
        metavar="MESSAGE",
        help="Print the reply to a single message and exit"
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Show loaded conversation rules and settings"
    )
    mode_group.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default configuration file"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--conversations",
        type=str,
        metavar="PATH",
        help="Conversation rule file (.xml or .yaml)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def run_test_message(config: Config, message: str) -> None:
    """Print the reply to one message."""
    from services.factory import create_chatbot

    chatbot = create_chatbot(config)
    try:
        responder = chatbot.responder
        print(responder.add_user_label(message), end="")
        try:
            reply = responder.respond(message, timeout=config.dictionary.timeout + 1)
        except FutureTimeoutError:
            reply = config.chat.fallback_response
            logger.warning("Timed out waiting for a definition")
        print(responder.add_bot_label(reply), end="")
    finally:
        chatbot.close()


def run_status_check(config: Config) -> None:
    """Display loaded rules and settings."""
    from services.factory import create_chatbot

    chatbot = create_chatbot(config)
    try:
        entries = chatbot.rules.entries()
        inactive = chatbot.rules.inactive()

        print("\n" + "=" * 50)
        print(f"{config.app_name} - Status")
        print("=" * 50 + "\n")

        print("Conversation Rules")
        print("-" * 30)
        print(f"  Source: {config.chat.conversation_file or '(bundled)'}")
        print(f"  Loaded: {len(entries)}")
        print(f"  Inactive: {len(inactive)}")
        for entry in inactive:
            print(f"    ✗ [{entry.rule.type}] {entry.rule.pattern}: {entry.error}")

        types = sorted({entry.rule.type for entry in entries})
        if types:
            print(f"  Types: {', '.join(types)}")

        print("\nContext Keys")
        print("-" * 30)
        for key in chatbot.context.recognized_keys():
            print(f"  {key} -> {chatbot.context.placeholder_for(key)}")

        print("\nPipeline")
        print("-" * 30)
        print(f"  Throttle: {config.pipeline.throttle_ms}ms")
        print(f"  Debounce: {config.pipeline.debounce_ms}ms")
        print(f"  Workers: {config.pipeline.worker_threads}")

        print("\nDictionary")
        print("-" * 30)
        print(f"  API: {config.dictionary.api_base}")
        print(f"  Timeout: {config.dictionary.timeout}s")

        print("\n" + "=" * 50 + "\n")
    finally:
        chatbot.close()


def run_terminal_ui(config: Config) -> None:
    """Run the terminal UI."""
    from ui.terminal.app import run_tui

    run_tui(config=config)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.init_config:
            config = create_default_config()
            print(f"✓ Wrote {Path(config.config_dir) / 'config.yaml'}")
            return 0

        config = load_config(args.config)

        if args.conversations:
            config.chat.conversation_file = args.conversations
        if args.debug:
            config.debug = True
            config.log_level = "DEBUG"

        interactive = not (args.test or args.status)

        # the chat window owns the terminal, so logs only go to files there
        setup_logging(
            log_dir=config.log_dir,
            log_level=config.log_level,
            console_output=not interactive
        )

        if args.test:
            run_test_message(config, args.test)
        elif args.status:
            run_status_check(config)
        else:
            run_terminal_ui(config)

        return 0

    except ChatbotError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
