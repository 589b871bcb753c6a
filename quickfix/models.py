from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Callable, Tuple
from enum import Enum

class Status(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"

class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED" # neutral no-op, never counted

class Level(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"

@dataclass(frozen=True)
class CommandResult:
    """Captured output of one external command."""
    argv: List[str]
    returncode: Optional[int] # None when the command timed out
    stdout: str = ""
    stderr: str = ""
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout + self.stderr).strip()

@dataclass(frozen=True)
class HealthCheck:
    name: str
    status: Status
    detail: str
    remedy: Optional[str] = None # registry name of a RemedialAction

def classify_exit_status(result: CommandResult) -> Outcome:
    """Default outcome classifier: exit status 0 is success."""
    return Outcome.SUCCESS if result.ok else Outcome.ERROR

@dataclass(frozen=True)
class RemedialAction:
    name: str
    title: str
    run: Optional[Callable[..., "ActionResult"]] = None
    classifier: Callable[[CommandResult], Outcome] = classify_exit_status
    confirm_prompt: Optional[str] = None
    steps: Tuple[str, ...] = () # composite actions run these registry names in order

    @property
    def requires_confirmation(self) -> bool:
        return self.confirm_prompt is not None

    @property
    def is_composite(self) -> bool:
        return bool(self.steps)

@dataclass
class ActionResult:
    action: str
    outcome: Outcome
    detail: str = ""
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def is_failure(self) -> bool:
        return self.outcome == Outcome.ERROR

@dataclass
class RunReport:
    """
    Accumulator for one scan or one menu iteration.
    Discarded after it is printed; start over with a fresh instance.
    """
    checks: List[HealthCheck] = field(default_factory=list)
    recommendations: List[RemedialAction] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    warnings: int = 0
    errors: int = 0

    def add_check(self, check: HealthCheck, remedy: Optional[RemedialAction] = None):
        self.checks.append(check)
        if check.status == Status.WARNING:
            self.warnings += 1
        elif check.status == Status.ERROR:
            self.errors += 1
        if remedy is not None and check.status != Status.OK:
            self.recommend(remedy)

    def recommend(self, action: RemedialAction) -> bool:
        if any(r.name == action.name for r in self.recommendations):
            return False
        self.recommendations.append(action)
        return True

    def merge(self, other: "RunReport"):
        """Folds a scan's findings into this accumulator."""
        self.checks.extend(other.checks)
        self.warnings += other.warnings
        self.errors += other.errors
        for action in other.recommendations:
            self.recommend(action)

    def record(self, level: Level, message: str):
        if level == Level.WARNING:
            self.warnings += 1
        elif level == Level.ERROR:
            self.errors += 1
        elif level in (Level.INFO, Level.SUCCESS):
            self.actions.append(message)

    @property
    def counts(self) -> Dict[str, int]:
        return {"warnings": self.warnings, "errors": self.errors}

    @property
    def has_issues(self) -> bool:
        return self.warnings > 0 or self.errors > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.counts,
            "checks": [
                {"name": c.name, "status": c.status.value, "detail": c.detail, "remedy": c.remedy}
                for c in self.checks
            ],
            "recommendations": [r.title for r in self.recommendations],
        }
