from ..core.registry import ActionRegistry
from ..models import RemedialAction
from .network import (
    flush_dns, renew_dhcp, reset_wifi, speed_test, ping_host, traceroute_host,
    dns_lookup, check_vpn, classify_networksetup,
)
from .maintenance import (
    clear_caches, restart_ui, purge_memory, enable_firewall, reset_printing,
    software_update, hardware_health, classify_firewall_state, classify_cache_purge,
)

# Steps of the non-interactive batches
RUN_ALL_STEPS = ("flush_dns", "renew_dhcp", "clear_caches", "restart_ui", "purge_memory", "enable_firewall")
NETWORK_STEPS = ("flush_dns", "renew_dhcp")
CLEAN_STEPS = ("clear_caches", "restart_ui")

REMEDIAL_ACTIONS = [
    # --- NETWORK ---
    RemedialAction("flush_dns", "Flush DNS Cache", flush_dns),
    RemedialAction("renew_dhcp", "Renew DHCP Lease", renew_dhcp),
    RemedialAction("network_fixes", "Run Network Fixes (Flush DNS & Renew DHCP)", steps=NETWORK_STEPS),
    RemedialAction("reset_wifi", "Reset Wi-Fi Connection", reset_wifi, classifier=classify_networksetup),
    RemedialAction("speed_test", "Test Network Speed", speed_test),
    RemedialAction("ping_host", "Ping", ping_host),
    RemedialAction("traceroute_host", "Traceroute", traceroute_host),
    RemedialAction("dns_lookup", "DNS Lookup", dns_lookup),
    RemedialAction("check_vpn", "Check VPN Connection", check_vpn),

    # --- MAINTENANCE ---
    RemedialAction("clear_caches", "Clear System & User Caches", clear_caches,
                   classifier=classify_cache_purge,
                   confirm_prompt="Are you sure you want to clear system and user caches?"),
    RemedialAction("restart_ui", "Restart Dock & Finder", restart_ui),
    RemedialAction("clean_system", "Clean System (Clear Cache & Restart UI)", steps=CLEAN_STEPS),
    RemedialAction("purge_memory", "Purge Inactive Memory", purge_memory),
    RemedialAction("enable_firewall", "Enable Firewall & Show Status", enable_firewall,
                   classifier=classify_firewall_state),
    RemedialAction("reset_printing", "Reset Printing System", reset_printing,
                   confirm_prompt="Are you sure you want to reset the printing system? "
                                  "This will remove all printers and queues."),
    RemedialAction("software_update", "Check for Software Updates", software_update),
    RemedialAction("hardware_health", "Check Hardware Health (S.M.A.R.T. Status)", hardware_health),

    # --- BATCH ---
    RemedialAction("run_all", "Run All Fixes", steps=RUN_ALL_STEPS),
]

def build_registry() -> ActionRegistry:
    return ActionRegistry(REMEDIAL_ACTIONS)
