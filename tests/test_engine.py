import itertools
import unittest

from fakes import FakeRunner, make_ctx, result

from quickfix.actions import build_registry
from quickfix.checks import QUICK_SCAN, probe_set
from quickfix.engine import Scanner
from quickfix.errors import CommandNotFound, ProbeUnavailable
from quickfix.models import HealthCheck, Status

DF_95 = result("Filesystem 1024-blocks Used Available Capacity Mounted on\n"
               "/dev/disk3s1s1 482797652 458657769 24139883 95% /\n")


def fixed(name, status, remedy=None):
    def probe(ctx):
        return HealthCheck(name, status, f"{name}: {status.value}", remedy=remedy)
    return name, probe


def raising(name, exc):
    def probe(ctx):
        raise exc
    return name, probe


class TestScanner(unittest.TestCase):
    def setUp(self):
        self.ctx = make_ctx()
        self.scanner = Scanner(self.ctx, build_registry())

    def test_checks_keep_probe_order(self):
        report = self.scanner.run_scan([
            fixed("b", Status.OK), fixed("a", Status.WARNING), fixed("c", Status.ERROR),
        ])
        self.assertEqual([c.name for c in report.checks], ["b", "a", "c"])
        self.assertEqual(report.warnings, 1)
        self.assertEqual(report.errors, 1)

    def test_shared_remedy_is_recommended_once(self):
        report = self.scanner.run_scan([
            fixed("connectivity", Status.ERROR, "clean_system"),
            fixed("disk", Status.ERROR, "clean_system"),
            fixed("memory", Status.WARNING, "clean_system"),
        ])
        self.assertEqual([r.name for r in report.recommendations], ["clean_system"])
        self.assertEqual(report.errors, 2)
        self.assertEqual(report.warnings, 1)

    def test_passing_checks_recommend_nothing(self):
        report = self.scanner.run_scan([fixed("disk", Status.OK, "clean_system")])
        self.assertEqual(report.recommendations, [])
        self.assertFalse(report.has_issues)

    def test_recommendations_never_exceed_distinct_remedies(self):
        remedies = ["flush_dns", "renew_dhcp", "flush_dns", "clean_system"]
        for statuses in itertools.product(list(Status), repeat=len(remedies)):
            probes = [fixed(f"p{i}", s, r) for i, (s, r) in enumerate(zip(statuses, remedies))]
            report = Scanner(make_ctx(), build_registry()).run_scan(probes)

            names = [r.name for r in report.recommendations]
            expected = {r for s, r in zip(statuses, remedies) if s != Status.OK}
            self.assertEqual(len(names), len(set(names)))
            self.assertEqual(set(names), expected)
            self.assertEqual(report.warnings, list(statuses).count(Status.WARNING))
            self.assertEqual(report.errors, list(statuses).count(Status.ERROR))

    def test_missing_binary_is_warning_without_recommendation(self):
        report = self.scanner.run_scan([
            raising("printers", CommandNotFound("lpstat")),
            raising("vpn", ProbeUnavailable("no tools")),
        ])
        self.assertEqual([c.status for c in report.checks], [Status.WARNING, Status.WARNING])
        self.assertIn("unavailable, skipped", report.checks[0].detail)
        self.assertEqual(report.recommendations, [])

    def test_crashing_probe_is_error_and_scan_continues(self):
        report = self.scanner.run_scan([
            raising("memory", ValueError("boom")),
            fixed("disk", Status.OK),
        ])
        self.assertEqual(report.checks[0].status, Status.ERROR)
        self.assertIn("probe unavailable", report.checks[0].detail)
        self.assertEqual(report.checks[1].status, Status.OK)
        self.assertEqual(report.errors, 1)

    def test_scan_does_not_count_into_session_report(self):
        self.scanner.run_scan([fixed("a", Status.ERROR, "flush_dns")])
        self.assertEqual(self.ctx.log.report.errors, 0)

    def test_full_quick_scan_with_full_disk(self):
        runner = FakeRunner({
            "netstat -rn": result("default 192.168.1.1 UGScg en0\n"),
            "dig +short apple.com": result("17.253.144.10\n"),
            "ifconfig": result("utun0: flags=8051<UP>\n"),
            "/usr/libexec/ApplicationFirewall/socketfilterfw": result("Firewall is enabled. (State = 1)\n"),
            "df -Pk /": DF_95,
            "vm_stat": result("Pages free:    80000.\n"),
            "softwareupdate -l": result(stderr="No new software available.\n"),
        }, missing={"mas"})
        ctx = make_ctx(runner)
        report = Scanner(ctx, build_registry()).run_scan(probe_set(QUICK_SCAN))

        self.assertEqual([c.name for c in report.checks], QUICK_SCAN)
        disk = report.checks[QUICK_SCAN.index("disk")]
        self.assertEqual(disk.status, Status.ERROR)
        self.assertIn("Low disk space", disk.detail)
        self.assertIn("Clean System", [r.title for r in report.recommendations][0])
        self.assertEqual(report.errors, 1)
        self.assertEqual(report.warnings, 0)


class TestRegistry(unittest.TestCase):
    def test_every_remedy_is_registered(self):
        registry = build_registry()
        remedies = {"network_fixes", "renew_dhcp", "flush_dns", "check_vpn", "enable_firewall",
                    "clean_system", "software_update", "reset_printing", "reset_wifi"}
        self.assertTrue(remedies <= set(registry.names()))
        for name in registry.names():
            action = registry.get(name)
            for step in action.steps:
                self.assertIn(step, registry.names())

    def test_duplicate_name_rejected(self):
        registry = build_registry()
        with self.assertRaises(ValueError):
            registry.register(registry.get("flush_dns"))

    def test_unknown_name(self):
        with self.assertRaises(KeyError):
            build_registry().get("defrag")


if __name__ == '__main__':
    unittest.main()
