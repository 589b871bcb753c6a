import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from ..config import Settings
from ..runner import CommandRunner
from ..safety_lock import SafetyLock
from ..session import SessionLog

@dataclass
class HostContext:
    """
    Everything a probe or action needs to touch the machine.
    Passed to every probe and action so tests can inject fakes.
    """
    runner: CommandRunner
    log: SessionLog
    settings: Settings = field(default_factory=Settings)
    lock: SafetyLock = field(default_factory=SafetyLock)
    http: Any = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep

    # Per-invocation parameters (e.g. the host for a ping)
    params: Dict[str, Any] = field(default_factory=dict)

    def with_params(self, **params) -> "HostContext":
        return HostContext(
            runner=self.runner,
            log=self.log,
            settings=self.settings,
            lock=self.lock,
            http=self.http,
            sleep=self.sleep,
            params=params,
        )

    def param(self, name: str, default: Optional[Any] = None) -> Any:
        return self.params.get(name, default)
