"""
Command-line interface for work-queue.

Commands:
- shell: interactive chat session with the /queue command
- config: show, set
"""

import sys
import asyncio
import argparse
import logging
import threading
from pathlib import Path

from work_queue.config import ConfigManager, DEFAULT_CONFIG_FILE
from work_queue.executor import ENGINES
from work_queue.session import QueueSession, session_help


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    # Suppress verbose watchdog library logging
    logging.getLogger("watchdog.observers.inotify_buffer").setLevel(logging.WARNING)
    logging.getLogger("watchdog.observers").setLevel(logging.WARNING)


async def _interactive_lines(prompt: str = "> "):
    """
    Read lines from the terminal until EOF.

    input() runs on a daemon thread so the event loop stays free, and a
    new line is only read once the previous one has been handled.
    """
    loop = asyncio.get_running_loop()
    received: asyncio.Queue = asyncio.Queue()
    wanted = threading.Event()

    def reader():
        while True:
            wanted.wait()
            wanted.clear()
            try:
                line = input(prompt)
            except EOFError:
                loop.call_soon_threadsafe(received.put_nowait, None)
                return
            loop.call_soon_threadsafe(received.put_nowait, line)

    threading.Thread(target=reader, name="work-queue-input", daemon=True).start()

    while True:
        wanted.set()
        line = await received.get()
        if line is None:
            print()
            return
        yield line


# =============================================================================
# SHELL COMMAND
# =============================================================================

def cmd_shell(args):
    """Run an interactive queue session."""
    try:
        config_manager = ConfigManager(args.config)
        config = config_manager.config
        if args.max_size is not None:
            config.settings.max_size = args.max_size if args.max_size > 0 else None

        session = QueueSession(config, engine_name=args.engine, watch_dir=args.watch)
        session.open()
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.script:
            lines = Path(args.script).read_text(encoding="utf-8").splitlines()
        else:
            print("=" * 60)
            print("📋 Work Queue Session")
            print("=" * 60)
            for line in session_help():
                print(line)
            print()
            lines = _interactive_lines()

        asyncio.run(session.run_lines(lines))
    except KeyboardInterrupt:
        print()
    except Exception as e:
        logger.error(f"Session aborted: {type(e).__name__}: {e}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    finally:
        session.close()

    return 0


# =============================================================================
# CONFIG COMMANDS
# =============================================================================

def cmd_config_show(args):
    """Show the effective configuration."""
    try:
        config = ConfigManager(args.config).config
    except Exception as e:
        print(f"❌ Error loading configuration: {e}", file=sys.stderr)
        return 1

    settings = config.settings
    print(f"\nConfiguration: {args.config}")
    print(f"Project Workspace: {config.project_workspace or 'Not set (current directory)'}")
    print(f"\n⚙️  Settings:")
    print(f"   Max size:        {settings.max_size or 'unlimited'}")
    print(f"   Model:           {settings.model}")
    print(f"   System prompt:   {settings.system_prompt or '(none)'}")
    print(f"   Permission mode: {settings.permission_mode}")
    print(f"   Checkpoint file: {settings.checkpoint_file or '(in memory)'}")
    print(f"   Watch patterns:  {', '.join(settings.watch_patterns)}")
    print(f"   Watch debounce:  {settings.watch_debounce_ms} ms")
    return 0


def cmd_config_set(args):
    """Update configuration values."""
    updates = {}
    if args.max_size is not None:
        updates["max_size"] = args.max_size if args.max_size > 0 else None
    if args.model is not None:
        updates["model"] = args.model
    if args.system_prompt is not None:
        updates["system_prompt"] = args.system_prompt or None
    if args.checkpoint_file is not None:
        updates["checkpoint_file"] = args.checkpoint_file or None

    if not updates and args.project_workspace is None:
        print("⚠️  Nothing to update. See 'work-queue config set --help'")
        return 1

    try:
        config_manager = ConfigManager(args.config)
        if args.project_workspace is not None:
            config_manager.set_project_workspace(args.project_workspace)
        if updates:
            config_manager.update_settings(**updates)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"✅ Configuration saved: {config_manager.config_file}")
    return 0


# =============================================================================
# MAIN
# =============================================================================

def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Work Queue CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive session
  work-queue shell
  work-queue shell --engine echo --max-size 10

  # Replay a session script
  work-queue shell --script session.txt

  # Queue new task-*.md files from a directory automatically
  work-queue shell --watch tasks/pending

  # Configuration
  work-queue config show
  work-queue config set --max-size 20 --model claude-sonnet-4-5
        """
    )

    parser.add_argument("--config", type=Path, default=None, help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Shell command
    shell_parser = subparsers.add_parser("shell", help="Start an interactive queue session")
    shell_parser.add_argument("--engine", choices=ENGINES, default="claude", help="Execution engine")
    shell_parser.add_argument("--max-size", type=int, default=None, help="Queue capacity (0 for unlimited)")
    shell_parser.add_argument("--script", type=Path, help="Read session lines from a file")
    shell_parser.add_argument("--watch", type=Path, help="Queue prompt files created in this directory")
    shell_parser.set_defaults(func=cmd_shell)

    # Config subcommands
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")

    config_show_parser = config_subparsers.add_parser("show", help="Show configuration")
    config_show_parser.set_defaults(func=cmd_config_show)

    config_set_parser = config_subparsers.add_parser("set", help="Update configuration")
    config_set_parser.add_argument("--max-size", type=int, help="Queue capacity (0 for unlimited)")
    config_set_parser.add_argument("--model", help="Model for queued prompts")
    config_set_parser.add_argument("--system-prompt", help="System prompt (empty to clear)")
    config_set_parser.add_argument("--checkpoint-file", help="Checkpoint log file (empty to keep in memory)")
    config_set_parser.add_argument("--project-workspace", help="Working directory for the agent")
    config_set_parser.set_defaults(func=cmd_config_set)

    args = parser.parse_args(argv)

    if not args.config:
        args.config = DEFAULT_CONFIG_FILE

    setup_logging(args.verbose)

    if hasattr(args, 'func'):
        return args.func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
