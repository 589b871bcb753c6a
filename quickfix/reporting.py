import json
from typing import List, Optional, TextIO

from colorama import Fore, Style

from .models import ActionResult, Outcome, RunReport, Status

STATUS_STYLE = {
    Status.OK: (Fore.GREEN, "✅"),
    Status.WARNING: (Fore.YELLOW, "⚠️ "),
    Status.ERROR: (Fore.RED, "❌"),
}

class ConsoleReporter:
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def print_scan(self, report: RunReport, title: str, all_clear: str = "No issues detected. Your system looks good!"):
        self._print(f"\n{Style.BRIGHT}{title}{Style.RESET_ALL}\n")

        for check in report.checks:
            color, symbol = STATUS_STYLE[check.status]
            self._print(f"{color}{symbol} {check.detail}{Style.RESET_ALL}")

        self._print()
        if report.recommendations:
            self._print(f"{Fore.BLUE}Recommended actions:{Style.RESET_ALL}")
            for r in report.recommendations:
                self._print(f"  - {r.title}")
        else:
            self._print(f"{Fore.GREEN}{all_clear}{Style.RESET_ALL}")
        self._print(f"\nWarnings: {report.warnings}  Errors: {report.errors}")

    def print_summary(self, report: RunReport):
        """Per-iteration summary: what ran, counters, next steps."""
        self._print(f"\n{Style.BRIGHT}Summary for this action:{Style.RESET_ALL}")
        if report.actions:
            self._print(f"{Fore.BLUE}What was checked/fixed:{Style.RESET_ALL}")
            for a in report.actions:
                self._print(f"  - {a}")

        if report.has_issues:
            self._print(f"{Fore.YELLOW}Warnings: {report.warnings}{Style.RESET_ALL}  "
                        f"{Fore.RED}Errors: {report.errors}{Style.RESET_ALL}")
        else:
            self._print(f"{Fore.GREEN}No warnings or errors detected.{Style.RESET_ALL}")

        if report.recommendations:
            self._print(f"\n{Fore.BLUE}Recommended next steps:{Style.RESET_ALL}")
            for r in report.recommendations:
                self._print(f"  - {r.title}")

    def print_batch(self, results: List[ActionResult]):
        self._print(f"\n{Style.BRIGHT}=== BATCH RESULTS ==={Style.RESET_ALL}")
        for res in results:
            color = {
                Outcome.SUCCESS: Fore.GREEN,
                Outcome.WARNING: Fore.YELLOW,
                Outcome.ERROR: Fore.RED,
            }.get(res.outcome, Fore.BLUE)
            self._print(f"[{color}{res.outcome.value}{Style.RESET_ALL}] {res.action}: {res.detail}")

        failed = [r for r in results if r.is_failure]
        self._print(f"\nCompleted: {len(results) - len(failed)}/{len(results)}")

def generate_json_report(report: RunReport, output_path: str) -> bool:
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"\nJSON Report written to: {output_path}")
        return True
    except OSError as e:
        print(f"{Fore.RED}Failed to write JSON report: {e}{Style.RESET_ALL}")
        return False
