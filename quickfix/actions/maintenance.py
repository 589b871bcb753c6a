import os
import plistlib
import re
from typing import List
from xml.parsers.expat import ExpatError

from ..checks.system import SOCKETFILTERFW, outdated_apps, pending_os_updates
from ..errors import ActionTotalFailure
from ..models import ActionResult, CommandResult, Level, Outcome
from .base import expand, filter_permission_noise, reason, run_each, summarize

WHOLE_DISK_RE = re.compile(r"^(/dev/disk\d+)\b")

def classify_firewall_state(result: CommandResult) -> Outcome:
    return Outcome.SUCCESS if result.ok and "enabled" in result.stdout else Outcome.ERROR

def classify_cache_purge(result: CommandResult) -> Outcome:
    # rm exits non-zero on protected entries; only other errors count
    if result.returncode is None or filter_permission_noise(result.stderr):
        return Outcome.ERROR
    return Outcome.SUCCESS

def clear_caches(ctx, action) -> ActionResult:
    ctx.log.info("Clearing system and user caches...")
    succeeded, failed = [], []
    for cache in ctx.settings.cache_dirs:
        path = os.path.expanduser(cache.path)
        entries = expand(os.path.join(path, "*"))
        if not entries:
            ctx.log.success(f"{path}: nothing to clear.")
            succeeded.append(path)
            continue
        result = ctx.runner.run(["rm", "-rf"] + entries, privileged=cache.privileged)
        if action.classifier(result) == Outcome.SUCCESS:
            ctx.log.success(f"{path}: cache cleared ({len(entries)} entries).")
            succeeded.append(path)
        else:
            ctx.log.log(Level.DEBUG, f"{path}: {filter_permission_noise(result.stderr) or reason(result)}")
            failed.append(path)
    return summarize(action, "Cache clearing", succeeded, failed)

def restart_ui(ctx, action) -> ActionResult:
    ctx.log.info("Restarting Dock and Finder...")
    return run_each(ctx, action, "UI restart", ["Dock", "Finder"],
                    lambda proc: ctx.runner.run(["killall", proc]))

def purge_memory(ctx, action) -> ActionResult:
    ctx.log.info("Purging inactive memory...")
    result = ctx.runner.run(["purge"], privileged=True)
    if action.classifier(result) != Outcome.SUCCESS:
        raise ActionTotalFailure(f"Failed to purge memory ({reason(result)}).")
    return ActionResult(action.name, Outcome.SUCCESS, "Inactive memory purged.")

def enable_firewall(ctx, action) -> ActionResult:
    ctx.log.info("Enabling firewall...")
    result = ctx.runner.run([SOCKETFILTERFW, "--setglobalstate", "on"], privileged=True)
    if not result.ok:
        raise ActionTotalFailure(f"Could not enable firewall ({reason(result)}).")

    status = ctx.runner.run([SOCKETFILTERFW, "--getglobalstate"], privileged=True)
    state = status.stdout.strip() or reason(status)
    ctx.log.info(f"Firewall status: {state}")
    if action.classifier(status) != Outcome.SUCCESS:
        raise ActionTotalFailure(f"Firewall still not enabled: {state}")
    return ActionResult(action.name, Outcome.SUCCESS, f"Firewall status: {state}")

def reset_printing(ctx, action) -> ActionResult:
    ctx.log.info("Resetting printing system...")
    steps = {
        "stop cupsd": lambda: ctx.runner.run(["launchctl", "stop", "org.cups.cupsd"], privileged=True),
        "remove printer configuration": lambda: _remove_printer_files(ctx),
        "start cupsd": lambda: ctx.runner.run(["launchctl", "start", "org.cups.cupsd"], privileged=True),
    }
    return run_each(ctx, action, "Printing system reset", list(steps), lambda step: steps[step]())

def _remove_printer_files(ctx) -> CommandResult:
    entries: List[str] = []
    for pattern in ctx.settings.printer_paths:
        entries.extend(expand(pattern))
    if not entries:
        return CommandResult(["rm", "-rf"], 0)
    return ctx.runner.run(["rm", "-rf"] + entries, privileged=True)

def software_update(ctx, action) -> ActionResult:
    ctx.log.info("Checking for macOS updates...")
    os_updates = pending_os_updates(ctx)
    if os_updates:
        ctx.log.tee("Pending macOS updates", "\n".join(f"  {u}" for u in os_updates))

    ctx.log.info("Checking for App Store updates (mas)...")
    apps = outdated_apps(ctx)
    if apps is None:
        ctx.log.info("'mas' (Mac App Store CLI) not installed. Skipping App Store update check.")
    elif apps:
        ctx.log.tee("Pending App Store updates", "\n".join(f"  {a}" for a in apps))

    found = []
    if os_updates:
        found.append(f"{len(os_updates)} macOS")
    if apps:
        found.append(f"{len(apps)} App Store")
    if found:
        return ActionResult(action.name, Outcome.WARNING, f"Pending updates found: {', '.join(found)}.")
    return ActionResult(action.name, Outcome.SUCCESS, "No pending updates.")

def whole_disks(ctx) -> List[str]:
    result = ctx.runner.run(["diskutil", "list"])
    return [m.group(1) for m in map(WHOLE_DISK_RE.match, result.stdout.splitlines()) if m]

def smart_status(ctx, disk: str) -> CommandResult:
    """diskutil info as a plist; maps a failing or unreadable disk to a non-zero result."""
    result = ctx.runner.run(["diskutil", "info", "-plist", disk])
    if not result.ok:
        return result
    try:
        info = plistlib.loads(result.stdout.encode("utf-8"))
    except (ValueError, ExpatError) as e:
        return CommandResult(result.argv, 1, "", f"unreadable plist: {e}")

    status = info.get("SMARTStatus", "Unknown")
    ctx.log.tee(f"S.M.A.R.T. status for {disk}",
                f"  Device Identifier: {info.get('DeviceIdentifier', disk)}\n  SMART Status: {status}")
    if status == "Failing":
        return CommandResult(result.argv, 1, "", "SMART Status: Failing")
    return CommandResult(result.argv, 0, status)

def hardware_health(ctx, action) -> ActionResult:
    ctx.log.info("Checking hardware S.M.A.R.T. status for all disks...")
    disks = whole_disks(ctx)
    if not disks:
        raise ActionTotalFailure("diskutil reported no disks.")
    return run_each(ctx, action, "S.M.A.R.T. check", disks, lambda disk: smart_status(ctx, disk))
