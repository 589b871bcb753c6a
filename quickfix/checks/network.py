import ipaddress
from typing import Optional

import requests

from ..errors import CommandNotFound, ProbeUnavailable
from ..models import HealthCheck, Status

def ping(ctx, host: str, count: Optional[int] = None) -> bool:
    count = count or ctx.settings.ping_count
    result = ctx.runner.run(["ping", "-c", str(count), host])
    return result.ok

def check_connectivity(ctx) -> HealthCheck:
    target = ctx.settings.ping_target
    if ping(ctx, target):
        return HealthCheck("connectivity", Status.OK, "Internet connectivity: OK")
    return HealthCheck("connectivity", Status.ERROR, f"No internet connectivity ({target} unreachable)",
                       remedy="network_fixes")

def default_gateway(ctx) -> Optional[str]:
    """First 'default' row of the routing table."""
    result = ctx.runner.run(["netstat", "-rn"])
    for line in result.stdout.splitlines():
        if "default" in line:
            fields = line.split()
            if len(fields) >= 2:
                return fields[1]
    return None

def check_gateway(ctx) -> HealthCheck:
    gw = default_gateway(ctx)
    if gw and ping(ctx, gw):
        return HealthCheck("gateway", Status.OK, f"Gateway ({gw}): Reachable")
    detail = f"Gateway ({gw}): Not reachable" if gw else "Gateway: No default route"
    return HealthCheck("gateway", Status.ERROR, detail, remedy="renew_dhcp")

def is_ip_literal(text: str) -> bool:
    try:
        ipaddress.ip_address(text.strip())
        return True
    except ValueError:
        return False

def check_dns(ctx) -> HealthCheck:
    host = ctx.settings.dns_hostname
    result = ctx.runner.run(["dig", "+short", host])
    # dig +short may list CNAME targets before the addresses
    addresses = [l.strip() for l in result.stdout.splitlines() if is_ip_literal(l)]
    if result.ok and addresses:
        return HealthCheck("dns", Status.OK, f"DNS resolution: OK ({host} -> {addresses[0]})")
    return HealthCheck("dns", Status.ERROR, f"DNS resolution failed for {host}", remedy="flush_dns")

def vpn_active(ctx) -> Optional[str]:
    """
    Returns how an active VPN was detected, or None.
    Raises ProbeUnavailable if neither ifconfig nor scutil exists.
    """
    missing = 0
    try:
        if "utun" in ctx.runner.run(["ifconfig"]).stdout:
            return "utun interface detected"
    except CommandNotFound:
        missing += 1
    try:
        if "Connected" in ctx.runner.run(["scutil", "--nc", "list"]).stdout:
            return "network service reports Connected"
    except CommandNotFound:
        missing += 1
    if missing == 2:
        raise ProbeUnavailable("neither ifconfig nor scutil is available")
    return None

def check_vpn(ctx) -> HealthCheck:
    how = vpn_active(ctx)
    if how:
        return HealthCheck("vpn", Status.OK, f"VPN: Active ({how})")
    return HealthCheck("vpn", Status.WARNING, "VPN: Inactive", remedy="check_vpn")

def check_ip_address(ctx) -> HealthCheck:
    for iface in ctx.settings.ip_interfaces:
        result = ctx.runner.run(["ipconfig", "getifaddr", iface])
        address = result.stdout.strip()
        if result.ok and address:
            return HealthCheck("ip_address", Status.OK, f"IP Address: {address} ({iface})")
    return HealthCheck("ip_address", Status.ERROR, "No IP address assigned", remedy="renew_dhcp")

def check_captive_portal(ctx) -> HealthCheck:
    url = ctx.settings.captive_portal_url
    try:
        resp = ctx.http.get(url, timeout=ctx.settings.http_timeout, allow_redirects=False)
    except requests.RequestException as e:
        return HealthCheck("captive_portal", Status.WARNING, f"Captive portal check failed: {e}",
                           remedy="reset_wifi")
    if resp.status_code == 200 and "Success" in resp.text:
        return HealthCheck("captive_portal", Status.OK, "Captive portal: None detected")
    return HealthCheck("captive_portal", Status.WARNING,
                       f"Captive portal or filtered HTTP detected (HTTP {resp.status_code})",
                       remedy="reset_wifi")
