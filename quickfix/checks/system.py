import re

from ..errors import CommandNotFound, ProbeUnavailable
from ..models import HealthCheck, Status

SOCKETFILTERFW = "/usr/libexec/ApplicationFirewall/socketfilterfw"

PAGES_FREE_RE = re.compile(r"Pages free:\s+(\d+)")

def human_bytes(num: float) -> str:
    """Decimal units, like df -H."""
    for unit in ("B", "K", "M", "G", "T"):
        if abs(num) < 1000:
            return f"{num:.0f}{unit}" if unit == "B" else f"{num:.1f}{unit}"
        num /= 1000.0
    return f"{num:.1f}P"

def firewall_state(ctx) -> str:
    result = ctx.runner.run([SOCKETFILTERFW, "--getglobalstate"], privileged=True)
    return result.stdout.strip()

def check_firewall(ctx) -> HealthCheck:
    state = firewall_state(ctx)
    # Any state text mentioning "enabled" passes
    if "enabled" in state:
        return HealthCheck("firewall", Status.OK, "Firewall: Enabled")
    detail = "Firewall: Disabled" if state else "Firewall: Disabled (state could not be read)"
    return HealthCheck("firewall", Status.WARNING, detail, remedy="enable_firewall")

def root_volume_usage(ctx):
    """Returns (used_percent, available_bytes) for / from POSIX df output."""
    result = ctx.runner.run(["df", "-Pk", "/"])
    lines = [l for l in result.stdout.splitlines() if l.strip()]
    if not result.ok or len(lines) < 2:
        raise ProbeUnavailable(f"df returned no data: {result.stderr.strip()}")
    fields = lines[-1].split()
    try:
        used_percent = int(fields[-2].rstrip("%"))
        available = int(fields[-3]) * 1024
    except (IndexError, ValueError):
        raise ProbeUnavailable(f"Unexpected df output: {lines[-1]}")
    return used_percent, available

def check_disk(ctx) -> HealthCheck:
    used, available = root_volume_usage(ctx)
    summary = f"{human_bytes(available)} free ({used}% used)"
    if used < ctx.settings.disk_used_percent:
        return HealthCheck("disk", Status.OK, f"Disk space: {summary}")
    return HealthCheck("disk", Status.ERROR, f"Low disk space: {summary}", remedy="clean_system")

def free_pages(ctx) -> int:
    result = ctx.runner.run(["vm_stat"])
    match = PAGES_FREE_RE.search(result.stdout)
    if not match:
        raise ProbeUnavailable("vm_stat reported no 'Pages free' line")
    return int(match.group(1))

def check_memory(ctx) -> HealthCheck:
    pages = free_pages(ctx)
    if pages >= ctx.settings.memory_free_pages:
        return HealthCheck("memory", Status.OK, f"Memory: OK ({pages} pages free)")
    return HealthCheck("memory", Status.WARNING, f"Low free memory detected ({pages} pages free)",
                       remedy="clean_system")

def pending_os_updates(ctx):
    # softwareupdate writes "No new software available." to stderr
    result = ctx.runner.run(["softwareupdate", "-l"])
    return [l.strip() for l in result.output.splitlines() if "*" in l]

def outdated_apps(ctx):
    """Returns the mas outdated listing, or None when mas is not installed."""
    try:
        result = ctx.runner.run(["mas", "outdated"])
    except CommandNotFound:
        return None
    return [l.strip() for l in result.stdout.splitlines() if l.strip()]

def check_updates(ctx) -> HealthCheck:
    os_updates = pending_os_updates(ctx)
    apps = outdated_apps(ctx)

    notes = []
    notes.append(f"{len(os_updates)} pending macOS update(s)" if os_updates else "no pending macOS updates")
    if apps is None:
        notes.append("App Store check skipped ('mas' not installed)")
    elif apps:
        notes.append(f"{len(apps)} outdated App Store app(s)")

    detail = "; ".join(notes)
    if os_updates or apps:
        return HealthCheck("updates", Status.WARNING, f"Pending software updates: {detail}",
                           remedy="software_update")
    return HealthCheck("updates", Status.OK, f"No pending software updates: {detail}")

def check_printers(ctx) -> HealthCheck:
    result = ctx.runner.run(["lpstat", "-p"])
    disabled = [l.split()[1] for l in result.stdout.splitlines()
                if "disabled" in l and len(l.split()) > 1]
    if "disabled" in result.stdout:
        names = ", ".join(disabled) or "unknown"
        return HealthCheck("printers", Status.WARNING, f"Printer(s) disabled: {names}",
                           remedy="reset_printing")
    return HealthCheck("printers", Status.OK, "Printer(s): OK")
