import argparse
import curses
import locale
from typing import List, Optional

from tui_thread.app import TuiThreadApp
from tui_thread.config import load_config
from tui_thread.debug_log import DebugLogger
from tui_thread.message_view import MessageOpener
from tui_thread.models import InvalidThread, NotmuchError
from tui_thread.notmuch import NotmuchClient
from tui_thread.status_bar import StatusBar
from tui_thread.thread_view import ThreadView


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tui-thread",
        description="Browse one notmuch thread as an indented reply tree.",
    )
    parser.add_argument(
        "thread_id",
        help="notmuch thread id (with or without the thread: prefix)",
    )
    parser.add_argument(
        "--bin",
        default="",
        help="Path to notmuch binary (default: from config, else notmuch)",
    )
    parser.add_argument(
        "--config",
        default="",
        help="Config file to read instead of the default locations",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for all actions.",
    )
    parser.add_argument(
        "--debug-log",
        default="logs/tui_thread.debug.log",
        help="Log file used with --debug (default: logs/tui_thread.debug.log)",
    )
    return parser.parse_args(argv)


def normalize_thread_id(raw: str) -> str:
    thread_id = raw.strip()
    if thread_id.startswith("thread:"):
        thread_id = thread_id[len("thread:"):]
    return thread_id


def main(argv: Optional[List[str]] = None) -> int:
    locale.setlocale(locale.LC_ALL, "")
    args = parse_args(argv)
    logger = DebugLogger(args.debug_log if args.debug else None)
    config = load_config(args.config or None, logger=logger)
    binary = args.bin.strip() or config.notmuch
    thread_id = normalize_thread_id(args.thread_id)
    logger.set_context(thread=thread_id)

    logger.log(
        "BOOT",
        f"startup bin={binary} config={config.source_path or '(defaults)'}",
    )

    client = NotmuchClient(binary=binary, logger=logger)
    status_bar = StatusBar(logger=logger)
    opener = MessageOpener(client, logger=logger)
    try:
        view = ThreadView(thread_id, client, opener=opener, status_bar=status_bar, logger=logger)
    except InvalidThread as err:
        cause = f" ({err.__cause__})" if err.__cause__ else ""
        logger.log("ERR", f"fatal InvalidThread id={err.thread_id}{cause}")
        print(f"Error: {err}{cause}")
        return 1

    app = TuiThreadApp(view, status_bar, config=config, logger=logger)
    opener.on_open = app.show_message

    try:
        curses.wrapper(app.run)
    except KeyboardInterrupt:
        logger.log("BOOT", "keyboard interrupt")
        return 130
    except NotmuchError as err:
        logger.log("ERR", f"fatal NotmuchError err={err}")
        print(f"Error: {err}")
        return 1
    logger.log("BOOT", "shutdown ok")
    return 0
