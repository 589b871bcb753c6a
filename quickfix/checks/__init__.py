from .network import (
    check_connectivity, check_gateway, check_dns, check_vpn,
    check_ip_address, check_captive_portal,
)
from .system import check_firewall, check_disk, check_memory, check_updates, check_printers

PROBES = {
    "connectivity": check_connectivity,
    "gateway": check_gateway,
    "dns": check_dns,
    "vpn": check_vpn,
    "firewall": check_firewall,
    "disk": check_disk,
    "memory": check_memory,
    "updates": check_updates,
    "printers": check_printers,
    "ip_address": check_ip_address,
    "captive_portal": check_captive_portal,
}

# Fixed presentation order for each scan
QUICK_SCAN = [
    "connectivity", "gateway", "dns", "vpn", "firewall",
    "disk", "memory", "updates", "printers",
]

NETWORK_SCAN = [
    "connectivity", "gateway", "dns", "vpn", "ip_address", "captive_portal",
]

def probe_set(names):
    return [(name, PROBES[name]) for name in names]
