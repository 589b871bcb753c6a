import logging
from typing import Callable, Iterable, List, Tuple, Union

from .core.context import HostContext
from .core.registry import ActionRegistry
from .errors import (
    ActionPartialFailure, ActionTotalFailure, CommandNotFound, ProbeUnavailable,
)
from .models import (
    ActionResult, HealthCheck, Level, Outcome, RemedialAction, RunReport, Status,
)

logger = logging.getLogger("quickfix.engine")

Probe = Callable[[HostContext], HealthCheck]

STATUS_LEVEL = {
    Status.OK: Level.SUCCESS,
    Status.WARNING: Level.WARNING,
    Status.ERROR: Level.ERROR,
}

OUTCOME_LEVEL = {
    Outcome.SUCCESS: Level.SUCCESS,
    Outcome.WARNING: Level.WARNING,
    Outcome.ERROR: Level.ERROR,
    Outcome.CANCELLED: Level.INFO,
}

class Scanner:
    """
    Diagnostic aggregator.
    Runs a probe battery in order and folds the results into a RunReport.
    """
    def __init__(self, ctx: HostContext, registry: ActionRegistry):
        self.ctx = ctx
        self.registry = registry

    def run_scan(self, probes: Iterable[Tuple[str, Probe]]) -> RunReport:
        report = RunReport()
        for name, probe in probes:
            check = self._run_probe(name, probe)
            remedy = self.registry.get(check.remedy) if check.remedy else None
            report.add_check(check, remedy)
            # The scan owns its counters; the transcript still gets every line
            self.ctx.log.log(STATUS_LEVEL[check.status], check.detail, record=False, quiet=True)
        return report

    def _run_probe(self, name: str, probe: Probe) -> HealthCheck:
        try:
            return probe(self.ctx)
        except (ProbeUnavailable, CommandNotFound) as e:
            return HealthCheck(name, Status.WARNING, f"{name}: unavailable, skipped ({e})")
        except Exception as e:
            logger.debug("probe %s crashed", name, exc_info=True)
            return HealthCheck(name, Status.ERROR, f"{name}: probe unavailable ({e})")

class Dispatcher:
    """
    Executes remedial actions and classifies their outcome.
    Never raises on an action failure; the outcome carries it.
    """
    def __init__(self, ctx: HostContext, registry: ActionRegistry):
        self.ctx = ctx
        self.registry = registry

    def execute(self, action: Union[str, RemedialAction], **params) -> ActionResult:
        if isinstance(action, str):
            action = self.registry.get(action)

        if action.is_composite:
            return self._execute_composite(action)

        if action.requires_confirmation and not self.ctx.lock.require_consent(action.confirm_prompt):
            result = ActionResult(action.name, Outcome.CANCELLED, f"{action.title} cancelled by user.")
            self._log_outcome(result)
            return result

        ctx = self.ctx.with_params(**params)
        try:
            result = action.run(ctx, action)
        except ActionPartialFailure as e:
            result = ActionResult(action.name, Outcome.WARNING, str(e), e.succeeded, e.failed)
        except ProbeUnavailable as e:
            result = ActionResult(action.name, Outcome.WARNING, f"{action.title}: unavailable, skipped ({e}).")
        except (ActionTotalFailure, CommandNotFound) as e:
            result = ActionResult(action.name, Outcome.ERROR, f"{action.title}: {e}")
        except Exception as e:
            logger.debug("action %s crashed", action.name, exc_info=True)
            result = ActionResult(action.name, Outcome.ERROR, f"{action.title}: unexpected failure ({e}).")

        self._log_outcome(result)
        return result

    def run_batch(self, names: Iterable[str]) -> List[ActionResult]:
        """Runs every step even when earlier ones fail."""
        return [self.execute(name) for name in names]

    def _execute_composite(self, action: RemedialAction) -> ActionResult:
        results = self.run_batch(action.steps)
        failed = [r.action for r in results if r.outcome == Outcome.ERROR]
        warned = [r.action for r in results if r.outcome == Outcome.WARNING]
        succeeded = [r.action for r in results if r.outcome in (Outcome.SUCCESS, Outcome.CANCELLED)]

        if not failed and not warned:
            outcome, detail = Outcome.SUCCESS, f"{action.title}: all steps completed."
        elif failed and not succeeded and not warned:
            outcome, detail = Outcome.ERROR, f"{action.title}: every step failed."
        else:
            problems = ", ".join(failed + warned)
            outcome, detail = Outcome.WARNING, f"{action.title}: completed with problems in {problems}."

        result = ActionResult(action.name, outcome, detail, succeeded=succeeded, failed=failed + warned)
        # Steps already counted their own warnings and errors
        self.ctx.log.log(OUTCOME_LEVEL[outcome], detail, record=False)
        return result

    def _log_outcome(self, result: ActionResult):
        self.ctx.log.log(OUTCOME_LEVEL[result.outcome], result.detail)
