import datetime
import json
import os
import time
import uuid
from typing import Optional, TextIO

from colorama import Fore, Style

from .models import Level, RunReport

LEVEL_STYLE = {
    Level.DEBUG: (Fore.CYAN, "🐞"),
    Level.INFO: (Fore.BLUE, "ℹ️ "),
    Level.SUCCESS: (Fore.GREEN, "✅"),
    Level.WARNING: (Fore.YELLOW, "⚠️ "),
    Level.ERROR: (Fore.RED, "❌"),
}

class SessionLog:
    """
    Console and transcript logging for one interactive or batch session.

    Warnings and errors are always echoed; informational lines only when verbose.
    Every line is appended to the JSON-lines transcript, whose lifecycle
    belongs to the caller. The current RunReport collects the counters and is
    replaced by reset() after each summary.
    """
    def __init__(self, log_file: Optional[str] = None, verbose: bool = False,
                 run_id: Optional[str] = None, stream: Optional[TextIO] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.verbose = verbose
        self.log_file = log_file
        self.stream = stream
        self.report = RunReport()
        self._transcript_ok = log_file is not None

    def log(self, level: Level, message: str, record: bool = True, quiet: bool = False):
        if record:
            self.report.record(level, message)

        if not quiet and (level in (Level.WARNING, Level.ERROR) or self.verbose):
            color, symbol = LEVEL_STYLE.get(level, ("", ""))
            ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self._echo(f"{color}[{ts}] {symbol} {message}{Style.RESET_ALL}")

        self._write_entry({"level": level.value, "message": message})

    def info(self, message: str):
        self.log(Level.INFO, message)

    def success(self, message: str):
        self.log(Level.SUCCESS, message)

    def warning(self, message: str):
        self.log(Level.WARNING, message)

    def error(self, message: str):
        self.log(Level.ERROR, message)

    def tee(self, title: str, text: str):
        """Shows command output and copies it into the transcript."""
        if text:
            self._echo(text.rstrip())
        self._write_entry({"level": "OUTPUT", "message": title, "output": text})

    def reset(self) -> RunReport:
        """Hands back the finished accumulator and starts a fresh one."""
        finished = self.report
        self.report = RunReport()
        return finished

    def _echo(self, line: str):
        print(line, file=self.stream)

    def _write_entry(self, data: dict):
        if not self._transcript_ok:
            return
        entry = {"timestamp": time.time(), "run_id": self.run_id, **data}
        try:
            parent = os.path.dirname(os.path.abspath(self.log_file))
            os.makedirs(parent, exist_ok=True)
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            self._transcript_ok = False
            self._echo(f"{Fore.YELLOW}[!] Transcript disabled, cannot write {self.log_file}: {e}{Style.RESET_ALL}")
