import datetime
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from colorama import Fore, Style, ansi

from .checks import NETWORK_SCAN, QUICK_SCAN, probe_set
from .engine import Dispatcher, Scanner
from .models import RunReport
from .reporting import ConsoleReporter, generate_json_report
from .session import SessionLog

class MenuId(Enum):
    MAIN = "main"
    NETWORK = "network"
    MAINTENANCE = "maintenance"
    REPORTS = "reports"
    QUIT = "quit"

@dataclass(frozen=True)
class MenuItem:
    label: str
    run: Optional[Callable[[], object]] = None
    goto: Optional[MenuId] = None

DIAGNOSTICS = [
    ("Ping", "ping_host", "Enter host to ping: "),
    ("Traceroute", "traceroute_host", "Enter host for traceroute: "),
    ("DNS Lookup", "dns_lookup", "Enter domain for DNS lookup: "),
]

class InteractiveShell:
    """
    Menu loop: MAIN <-> {NETWORK, MAINTENANCE, REPORTS}, QUIT is terminal.
    Each submenu pass runs exactly one item, prints the summary and
    starts a fresh RunReport.
    """
    def __init__(self, scanner: Scanner, dispatcher: Dispatcher, log: SessionLog,
                 reporter: Optional[ConsoleReporter] = None,
                 input_fn: Callable[[str], str] = input,
                 reports_dir: Optional[str] = None):
        self.scanner = scanner
        self.dispatcher = dispatcher
        self.log = log
        self.reporter = reporter or ConsoleReporter()
        self.input_fn = input_fn
        self.reports_dir = reports_dir
        self.menus = self._build_menus()

    def _build_menus(self) -> Dict[MenuId, Tuple[str, List[MenuItem]]]:
        act = lambda name: (lambda: self.dispatcher.execute(name))
        return {
            MenuId.MAIN: ("🧰 IT QuickFix CLI (macOS)", [
                MenuItem("🚦  Quick System Scan / Pre-Check", run=self.quick_scan),
                MenuItem("🌐  Network Tools", goto=MenuId.NETWORK),
                MenuItem("🛠️   System Maintenance", goto=MenuId.MAINTENANCE),
                MenuItem("📝  Reports & Utilities", goto=MenuId.REPORTS),
                MenuItem("❌  Quit", goto=MenuId.QUIT),
            ]),
            MenuId.NETWORK: ("🌐  Network Tools", [
                MenuItem("Run Network Pre-Scan", run=self.network_scan),
                MenuItem("Run All Network Fixes (Flush DNS & Renew DHCP)", run=act("network_fixes")),
                MenuItem("Reset Wi-Fi Connection", run=act("reset_wifi")),
                MenuItem("Test Network Speed", run=act("speed_test")),
                MenuItem("Run Network Diagnostics (Ping, Traceroute, DNS)", run=self.network_diagnostics),
                MenuItem("Check VPN Connection", run=act("check_vpn")),
                MenuItem("⬅️  Back to Main Menu", goto=MenuId.MAIN),
            ]),
            MenuId.MAINTENANCE: ("🛠️  System Maintenance", [
                MenuItem("Clean System (Clear Cache & Restart UI)", run=act("clean_system")),
                MenuItem("Reset Printing System", run=act("reset_printing")),
                MenuItem("Enable Firewall & Show Status", run=act("enable_firewall")),
                MenuItem("Check for Software Updates", run=act("software_update")),
                MenuItem("Check Hardware Health (S.M.A.R.T. Status)", run=act("hardware_health")),
                MenuItem("⬅️  Back to Main Menu", goto=MenuId.MAIN),
            ]),
            MenuId.REPORTS: ("📝  Reports & Utilities", [
                MenuItem("Run All Fixes", run=act("run_all")),
                MenuItem("Check for Updates", run=act("software_update")),
                MenuItem("Save Quick Scan Report (JSON)", run=self.save_scan_report),
                MenuItem("⬅️  Back to Main Menu", goto=MenuId.MAIN),
            ]),
        }

    def run(self) -> int:
        state = MenuId.MAIN
        try:
            while state != MenuId.QUIT:
                state = self.step(state)
        except EOFError:
            pass
        print("👋 Exiting.")
        return 0

    def step(self, state: MenuId) -> MenuId:
        title, items = self.menus[state]
        self._clear()
        print(f"{Style.BRIGHT}{title}{Style.RESET_ALL}\n")
        for i, item in enumerate(items, 1):
            print(f"{i}) {item.label}")
        print()

        choice = self.input_fn(f"Enter your choice (1-{len(items)}): ").strip()
        if not choice.isdigit() or not 1 <= int(choice) <= len(items):
            self.input_fn(f"{Fore.RED}❌ Invalid choice. Press Enter to try again.{Style.RESET_ALL}")
            return state

        item = items[int(choice) - 1]
        if item.goto is not None:
            return item.goto

        outcome = item.run()
        if isinstance(outcome, RunReport):
            # Scans keep their own counters; the summary shows what they found
            self.log.report.merge(outcome)
        finished = self.log.reset()
        if state != MenuId.MAIN:
            if self.log.log_file:
                print(f"\n✅ Logs have been saved to {self.log.log_file}")
            self.reporter.print_summary(finished)
        menu_name = "main" if state == MenuId.MAIN else title.split(maxsplit=1)[-1]
        self.input_fn(f"\nPress Enter to return to the {menu_name} menu...")
        return state

    def quick_scan(self):
        self._clear()
        report = self.scanner.run_scan(probe_set(QUICK_SCAN))
        self.reporter.print_scan(report, "🚦  Quick System Scan / Pre-Check")
        self.log.info("Quick System Scan completed.")
        return report

    def network_scan(self):
        self._clear()
        report = self.scanner.run_scan(probe_set(NETWORK_SCAN))
        self.reporter.print_scan(report, "🌐  Network Pre-Scan",
                                 all_clear="No network issues detected. Your connection looks good!")
        return report

    def network_diagnostics(self):
        print("Choose a network diagnostic test:")
        for i, (label, _, _) in enumerate(DIAGNOSTICS, 1):
            print(f"{i}) {label}")
        print(f"{len(DIAGNOSTICS) + 1}) Cancel")

        choice = self.input_fn("#? ").strip()
        if choice.isdigit() and 1 <= int(choice) <= len(DIAGNOSTICS):
            _, action, prompt = DIAGNOSTICS[int(choice) - 1]
            host = self.input_fn(prompt).strip()
            self.dispatcher.execute(action, host=host)
        elif choice == str(len(DIAGNOSTICS) + 1):
            self.log.info("Network diagnostics cancelled.")
        else:
            print("Invalid choice.")

    def save_scan_report(self):
        report = self.quick_scan()
        reports_dir = self.reports_dir or os.getcwd()
        os.makedirs(reports_dir, exist_ok=True)
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(reports_dir, f"quickscan_{ts}.json")
        if generate_json_report(report, path):
            self.log.success(f"Scan report saved to {path}")
        else:
            self.log.error(f"Could not save scan report to {path}")
        return report

    def _clear(self):
        if sys.stdout.isatty():
            print(ansi.clear_screen() + ansi.Cursor.POS(1, 1), end="")
