import logging
import os
import sys
from typing import Callable, List, Optional

from colorama import Fore, Style, init

from . import __version__
from .actions import CLEAN_STEPS, NETWORK_STEPS, RUN_ALL_STEPS, build_registry
from .config import Settings, get_app_data_dir, load_settings
from .core.context import HostContext
from .engine import Dispatcher, Scanner
from .errors import FatalConfigurationError
from .menu import InteractiveShell
from .reporting import ConsoleReporter
from .runner import CommandRunner
from .safety_lock import SafetyLock
from .session import SessionLog

BATCHES = {
    "all": RUN_ALL_STEPS,
    "network": NETWORK_STEPS,
    "clean": CLEAN_STEPS,
}

HELP_TEXT = """IT QuickFix CLI (macOS) v{version}
Usage: {prog} <command>

Commands:
  all       Run all safe fixes
  network   Flush DNS & renew DHCP lease
  clean     Clear caches & restart UI
  help      Show this help message

Without a command the interactive menu starts.

Environment:
  VERBOSE=1          Echo informational log lines
  QUICKFIX_LOGFILE   Transcript file (JSON lines)
  QUICKFIX_CONFIG    YAML settings file
"""

def setup_logging(verbose: bool):
    logger = logging.getLogger("quickfix")
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger

def default_log_file(settings: Settings) -> Optional[str]:
    if settings.log_file:
        return os.path.expanduser(settings.log_file)
    try:
        return os.path.join(get_app_data_dir(), "quickfix.log")
    except OSError:
        return None

def build_engine(settings: Settings, input_fn: Optional[Callable[[str], str]] = None,
                 runner: Optional[CommandRunner] = None, log: Optional[SessionLog] = None):
    """Wires runner, session log, registry, scanner and dispatcher together."""
    log = log or SessionLog(log_file=default_log_file(settings), verbose=settings.verbose)
    ctx = HostContext(
        runner=runner or CommandRunner(timeout=settings.command_timeout),
        log=log,
        settings=settings,
        lock=SafetyLock(input_fn=input_fn),
    )
    registry = build_registry()
    return Scanner(ctx, registry), Dispatcher(ctx, registry)

def run_batch(command: str, dispatcher: Dispatcher, reporter: Optional[ConsoleReporter] = None) -> int:
    """Runs a batch to the end and maps any hard failure to exit code 1."""
    reporter = reporter or ConsoleReporter()
    log = dispatcher.ctx.log
    log.info(f"Running '{command}' batch: {', '.join(BATCHES[command])}")

    results = dispatcher.run_batch(BATCHES[command])
    reporter.print_batch(results)
    reporter.print_summary(log.reset())

    failed = [r.action for r in results if r.is_failure]
    if failed:
        print(f"\n{Fore.RED}[!] Batch '{command}' finished with errors in: {', '.join(failed)}{Style.RESET_ALL}")
        return 1
    return 0

def run(argv: Optional[List[str]] = None, input_fn: Optional[Callable[[str], str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else None

    if command == "help":
        print(HELP_TEXT.format(version=__version__, prog="quickfix"))
        return 0

    try:
        settings = load_settings()
    except FatalConfigurationError as e:
        if command in BATCHES:
            print(f"\n{Fore.RED}[!!!] FATAL: {e}{Style.RESET_ALL}")
            return 1
        print(f"{Fore.YELLOW}[!] {e}. Falling back to default settings.{Style.RESET_ALL}")
        settings = Settings(verbose=os.environ.get("VERBOSE") == "1",
                            log_file=os.environ.get("QUICKFIX_LOGFILE"))

    setup_logging(settings.verbose)
    scanner, dispatcher = build_engine(settings, input_fn=input_fn)

    if command in BATCHES:
        return run_batch(command, dispatcher)

    reports_dir = os.path.join(os.path.dirname(dispatcher.ctx.log.log_file), "reports") \
        if dispatcher.ctx.log.log_file else None
    shell = InteractiveShell(scanner, dispatcher, dispatcher.ctx.log,
                             input_fn=input_fn or input, reports_dir=reports_dir)
    return shell.run()

def main():
    init(autoreset=True)
    try:
        code = run()
    except KeyboardInterrupt:
        print("\n[!] Interrupted (Ctrl+C detected). Exiting...")
        sys.stdout.flush()
        code = 130
    sys.exit(code)

if __name__ == "__main__":
    main()
