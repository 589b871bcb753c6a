import glob
import os
from typing import Callable, Iterable, List

from ..errors import ActionPartialFailure, ActionTotalFailure
from ..models import ActionResult, CommandResult, Level, Outcome, RemedialAction

# Expected noise from SIP-protected entries under the cache folders
PERMISSION_NOISE = ("Operation not permitted", "Permission denied")

def reason(result: CommandResult) -> str:
    if result.returncode is None:
        return "timed out"
    text = (result.stderr or result.stdout).strip().splitlines()
    return text[-1] if text else f"exit {result.returncode}"

def filter_permission_noise(stderr: str) -> str:
    kept = [l for l in stderr.splitlines() if l.strip() and not any(n in l for n in PERMISSION_NOISE)]
    return "\n".join(kept)

def expand(pattern: str) -> List[str]:
    """Shell-style expansion (no dotfiles) of a user or absolute path pattern."""
    return sorted(glob.glob(os.path.expanduser(pattern)))

def summarize(action: RemedialAction, what: str, succeeded: List[str], failed: List[str]) -> ActionResult:
    """
    SUCCESS only if nothing failed. Some failures raise ActionPartialFailure,
    all failures raise ActionTotalFailure.
    """
    if not failed:
        return ActionResult(action.name, Outcome.SUCCESS, f"{what} succeeded: {', '.join(succeeded)}.",
                            succeeded=list(succeeded))
    if not succeeded:
        raise ActionTotalFailure(f"{what} failed: {', '.join(failed)}.")
    raise ActionPartialFailure(
        f"{what} partially failed. Succeeded: {', '.join(succeeded)}. Failed: {', '.join(failed)}.",
        succeeded=list(succeeded), failed=list(failed),
    )

def run_each(ctx, action: RemedialAction, what: str, resources: Iterable[str],
             invoke: Callable[[str], CommandResult]) -> ActionResult:
    """Runs invoke for every resource, never stopping at the first failure."""
    succeeded, failed = [], []
    for resource in resources:
        result = invoke(resource)
        if action.classifier(result) == Outcome.SUCCESS:
            ctx.log.success(f"{what}: {resource} OK.")
            succeeded.append(resource)
        else:
            ctx.log.log(Level.DEBUG, f"{what}: {resource} failed ({reason(result)}).")
            failed.append(resource)
    return summarize(action, what, succeeded, failed)
