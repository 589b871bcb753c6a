from typing import List, Optional

from ..checks.network import vpn_active
from ..errors import ActionTotalFailure
from ..models import ActionResult, CommandResult, Outcome
from .base import reason, run_each

def classify_networksetup(result: CommandResult) -> Outcome:
    # networksetup exits 0 even when it prints an error
    if not result.ok or "Error" in result.output:
        return Outcome.ERROR
    return Outcome.SUCCESS

def hardware_ports(ctx) -> List[tuple]:
    """(port name, device) pairs from networksetup -listallhardwareports."""
    result = ctx.runner.run(["networksetup", "-listallhardwareports"])
    ports, port = [], None
    for line in result.stdout.splitlines():
        line = line.strip()
        if line.startswith("Hardware Port:"):
            port = line.split(":", 1)[1].strip()
        elif line.startswith("Device:") and port is not None:
            ports.append((port, line.split(":", 1)[1].strip()))
            port = None
    return ports

def wifi_device(ctx) -> Optional[str]:
    for port, device in hardware_ports(ctx):
        if port in ("Wi-Fi", "AirPort"):
            return device
    return None

def flush_dns(ctx, action) -> ActionResult:
    ctx.log.info("Flushing DNS cache...")
    for argv in (["dscacheutil", "-flushcache"], ["killall", "-HUP", "mDNSResponder"]):
        result = ctx.runner.run(argv, privileged=True)
        if action.classifier(result) != Outcome.SUCCESS:
            raise ActionTotalFailure(f"Failed to flush DNS cache ({argv[0]}: {reason(result)}).")
    return ActionResult(action.name, Outcome.SUCCESS, "DNS cache flushed.")

def renew_dhcp(ctx, action) -> ActionResult:
    ctx.log.info("Renewing DHCP lease...")
    devices = [device for _, device in hardware_ports(ctx)]
    if not devices:
        raise ActionTotalFailure("No network hardware ports found.")
    return run_each(ctx, action, "DHCP renewal", devices,
                    lambda dev: ctx.runner.run(["ipconfig", "set", dev, "DHCP"], privileged=True))

def reset_wifi(ctx, action) -> ActionResult:
    ctx.log.info("Toggling Wi-Fi off and on...")
    device = wifi_device(ctx)
    if not device:
        raise ActionTotalFailure("No Wi-Fi hardware port found.")

    off = ctx.runner.run(["networksetup", "-setairportpower", device, "off"])
    if action.classifier(off) != Outcome.SUCCESS:
        raise ActionTotalFailure(f"Failed to toggle Wi-Fi on {device} ({reason(off)}).")
    ctx.sleep(ctx.settings.wifi_toggle_delay)
    on = ctx.runner.run(["networksetup", "-setairportpower", device, "on"])
    if action.classifier(on) != Outcome.SUCCESS:
        raise ActionTotalFailure(f"Wi-Fi on {device} was switched off but did not come back on ({reason(on)}).")
    return ActionResult(action.name, Outcome.SUCCESS, f"Wi-Fi has been reset ({device}).")

def speed_test(ctx, action) -> ActionResult:
    ctx.log.info("Running network speed test...")
    if not ctx.runner.available("speedtest"):
        if not ctx.runner.available("brew"):
            return ActionResult(action.name, Outcome.WARNING,
                                "speedtest-cli not installed and Homebrew unavailable. Speed test skipped.")
        ctx.log.info("speedtest-cli not found. Installing via Homebrew...")
        install = ctx.runner.run(["brew", "install", "speedtest-cli"])
        if not install.ok:
            return ActionResult(action.name, Outcome.WARNING,
                                f"speedtest-cli installation failed ({reason(install)}). Speed test skipped.")

    result = ctx.runner.run(["speedtest"])
    ctx.log.tee("speedtest", result.stdout)
    if action.classifier(result) != Outcome.SUCCESS:
        raise ActionTotalFailure(f"Speed test failed ({reason(result)}).")
    return ActionResult(action.name, Outcome.SUCCESS, "Speed test completed.")

def _diagnostic(ctx, action, argv_prefix: List[str], label: str) -> ActionResult:
    target = (ctx.param("host") or "").strip()
    if not target:
        raise ActionTotalFailure(f"{label}: no host given.")
    ctx.log.info(f"{label} {target}...")
    result = ctx.runner.run(argv_prefix + [target])
    ctx.log.tee(f"{label} {target}", result.output)
    if action.classifier(result) != Outcome.SUCCESS:
        return ActionResult(action.name, Outcome.WARNING, f"{label} {target} failed ({reason(result)}).")
    return ActionResult(action.name, Outcome.SUCCESS, f"{label} {target} completed.")

def ping_host(ctx, action) -> ActionResult:
    return _diagnostic(ctx, action, ["ping", "-c", "4"], "Ping")

def traceroute_host(ctx, action) -> ActionResult:
    return _diagnostic(ctx, action, ["traceroute"], "Traceroute")

def dns_lookup(ctx, action) -> ActionResult:
    return _diagnostic(ctx, action, ["dig"], "DNS lookup")

def check_vpn(ctx, action) -> ActionResult:
    ctx.log.info("Checking for active VPN connections...")
    how = vpn_active(ctx)
    if how:
        return ActionResult(action.name, Outcome.SUCCESS, f"VPN appears to be active ({how}).")
    return ActionResult(action.name, Outcome.WARNING, "No VPN interface detected. VPN likely inactive.")
