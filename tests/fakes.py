import io
import os
import sys
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from quickfix.config import Settings
from quickfix.core.context import HostContext
from quickfix.errors import CommandNotFound
from quickfix.models import CommandResult
from quickfix.safety_lock import SafetyLock
from quickfix.session import SessionLog


def result(stdout="", rc=0, stderr=""):
    return CommandResult([], rc, stdout, stderr)


class FakeRunner:
    """
    Stands in for CommandRunner. Responses are keyed by the command line;
    the longest matching prefix wins, anything unknown succeeds silently.
    """
    def __init__(self, responses=None, missing=()):
        self.responses = responses or {}
        self.missing = set(missing)
        self.calls = []

    def available(self, binary):
        return binary not in self.missing

    def run(self, argv, privileged=False, timeout=None):
        self.calls.append((list(argv), privileged))
        if argv[0] in self.missing:
            raise CommandNotFound(argv[0])

        line = " ".join(argv)
        matches = [k for k in self.responses if line == k or line.startswith(k + " ")]
        if not matches:
            return CommandResult(list(argv), 0, "", "")
        resp = self.responses[max(matches, key=len)]
        if callable(resp):
            resp = resp(argv)
        if isinstance(resp, Exception):
            raise resp
        return CommandResult(list(argv), resp.returncode, resp.stdout, resp.stderr)

    def commands(self):
        return [" ".join(argv) for argv, _ in self.calls]


def make_ctx(runner=None, settings=None, answers=None, http=None):
    """HostContext wired to fakes. answers feeds the confirmation prompts."""
    answers = list(answers or [])

    def input_fn(prompt):
        if not answers:
            raise EOFError
        return answers.pop(0)

    return HostContext(
        runner=runner or FakeRunner(),
        log=SessionLog(stream=io.StringIO()),
        settings=settings or Settings(),
        lock=SafetyLock(input_fn=input_fn),
        http=http or MagicMock(),
        sleep=lambda seconds: None,
    )
