import os
import shutil
import subprocess
import time
import logging
from typing import List, Optional

from .errors import CommandNotFound
from .models import CommandResult

logger = logging.getLogger("quickfix.runner")

def _ensure_path_prefix(env: dict) -> dict:
    # networksetup, ipconfig and friends live in the sbin directories
    path = env.get("PATH", "")
    prefix = "/usr/sbin:/sbin"
    if prefix not in path:
        env["PATH"] = f"{prefix}:{path}" if path else prefix
    return env

class CommandRunner:
    """
    Blocking wrapper around the macOS command-line tools.
    Every probe and action goes through here, so tests can swap it for a mock.
    """
    def __init__(self, timeout: Optional[float] = None, use_sudo: Optional[bool] = None):
        self.timeout = timeout
        if use_sudo is None:
            use_sudo = hasattr(os, "geteuid") and os.geteuid() != 0
        self.use_sudo = use_sudo
        self.env = _ensure_path_prefix(dict(os.environ))

    def available(self, binary: str) -> bool:
        return shutil.which(binary, path=self.env.get("PATH")) is not None

    def run(self, argv: List[str], privileged: bool = False, timeout: Optional[float] = None) -> CommandResult:
        """
        Runs argv to completion and captures its text output.
        Raises CommandNotFound if the binary is not installed.
        """
        if not self.available(argv[0]):
            raise CommandNotFound(argv[0])

        full_argv = list(argv)
        if privileged and self.use_sudo:
            full_argv = ["sudo"] + full_argv

        logger.debug("exec %s", " ".join(full_argv))
        start = time.monotonic()
        try:
            proc = subprocess.run(
                full_argv,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                timeout=timeout if timeout is not None else self.timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired as e:
            duration = time.monotonic() - start
            logger.debug("timeout after %.1fs: %s", duration, argv[0])
            stdout = e.stdout or ""
            if isinstance(stdout, bytes):
                stdout = stdout.decode("utf-8", "replace")
            return CommandResult(full_argv, None, stdout, "[command timed out]", duration)
        except FileNotFoundError:
            raise CommandNotFound(full_argv[0])

        duration = time.monotonic() - start
        logger.debug("exit %s after %.2fs: %s", proc.returncode, duration, argv[0])
        return CommandResult(full_argv, proc.returncode, proc.stdout or "", proc.stderr or "", duration)
