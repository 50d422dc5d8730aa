import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import httpx

from helpers import make_report, utc
from supply_chain_monitor import runner
from supply_chain_monitor.config.sources import CommitListSource, FeedSource
from supply_chain_monitor.runner import (
    generate_daily_report,
    group_by_source,
    main,
    run_all_fetchers,
    sort_reports,
)

FEED_A = FeedSource(name="Feed A", url="https://a.example.com/rss", keywords=("npm",))
FEED_B = FeedSource(name="Feed B", url="https://b.example.com/rss", keywords=("pypi",))
COMMITS = CommitListSource(name="Commits", url="https://api.example.com/commits")


class TestSorting(unittest.TestCase):
    def test_newest_first_with_unparseable_dates_last(self):
        undated = make_report("undated", "A", published="garbage")
        old = make_report("old", "A", utc(2024, 1, 1))
        new = make_report("new", "B", utc(2024, 3, 1))

        ordered = sort_reports([undated, old, new])

        self.assertEqual([r.title for r in ordered], ["new", "old", "undated"])

    def test_equal_dates_keep_aggregation_order(self):
        first = make_report("first", "A", utc(2024, 3, 1))
        second = make_report("second", "B", utc(2024, 3, 1))
        self.assertEqual(sort_reports([first, second]), [first, second])

    def test_grouping_follows_first_appearance(self):
        reports = [
            make_report("b1", "B", utc(2024, 3, 3)),
            make_report("a1", "A", utc(2024, 3, 2)),
            make_report("b2", "B", utc(2024, 3, 1)),
        ]

        buckets = group_by_source(reports)

        self.assertEqual(list(buckets), ["B", "A"])
        self.assertEqual([r.title for r in buckets["B"]], ["b1", "b2"])


class TestRunAllFetchers(unittest.TestCase):
    def test_visits_sources_in_order_and_delays_after_each(self):
        calls = []

        def fake_feed(source, client=None):
            calls.append(source.name)
            if source.name == "Feed A":
                return [make_report("a old", "Feed A", utc(2024, 1, 1))]
            return []

        def fake_commits(source, client=None):
            calls.append(source.name)
            return [make_report("commit", "Commits", utc(2024, 2, 1))]

        sleep = mock.Mock()
        fetchers = {"feed": fake_feed, "api-commit-list": fake_commits}
        with mock.patch.dict(runner._FETCHERS, fetchers):
            result = run_all_fetchers([FEED_A, FEED_B, COMMITS], delay=1.0, sleep=sleep)

        self.assertEqual(calls, ["Feed A", "Feed B", "Commits"])
        self.assertEqual(sleep.call_args_list, [mock.call(1.0)] * 3)
        self.assertEqual([r.title for r in result.records], ["commit", "a old"])
        self.assertEqual(result.source_names, ["Commits", "Feed A"])
        self.assertEqual(result.total, 2)

    def test_failing_source_does_not_stop_the_run(self):
        calls = []

        def fake_feed(source, client=None):
            calls.append(source.name)
            if source.name == "Feed A":
                raise ValueError("bad payload")
            return [make_report("b item", "Feed B", utc(2024, 3, 1))]

        def fake_commits(source, client=None):
            calls.append(source.name)
            return [make_report("commit", "Commits", utc(2024, 2, 1))]

        sleep = mock.Mock()
        fetchers = {"feed": fake_feed, "api-commit-list": fake_commits}
        with mock.patch.dict(runner._FETCHERS, fetchers):
            result = run_all_fetchers([FEED_A, FEED_B, COMMITS], delay=1.0, sleep=sleep)

        self.assertEqual(calls, ["Feed A", "Feed B", "Commits"])
        self.assertEqual(sleep.call_count, 3)
        self.assertEqual([r.title for r in result.records], ["b item", "commit"])
        self.assertEqual(result.source_names, ["Feed B", "Commits"])

    def test_malformed_commit_does_not_abort_the_run(self):
        commits = [
            {
                "html_url": None,
                "commit": {"message": "m", "author": {"date": "2024-03-05T00:00:00Z"}},
            }
        ]

        def handler(request):
            if request.url.host == "api.example.com":
                return httpx.Response(200, json=commits)
            return httpx.Response(404)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            result = run_all_fetchers([FEED_A, COMMITS], client=client, delay=0)

        self.assertEqual(result.total, 0)
        self.assertEqual(result.buckets, {})

    def test_end_to_end_with_mock_transport(self):
        rss = (
            '<?xml version="1.0"?><rss version="2.0"><channel><title>A</title>'
            "<item><title>Malicious npm package found</title><link>https://a.example.com/1</link>"
            "<pubDate>Mon, 04 Mar 2024 12:00:00 GMT</pubDate><description>details</description></item>"
            "<item><title>Unrelated</title><link>https://a.example.com/2</link></item>"
            "</channel></rss>"
        ).encode()
        commits = [
            {
                "html_url": "https://github.com/o/r/commit/1",
                "commit": {"message": "Add analyzer", "author": {"date": "2024-03-05T00:00:00Z"}},
            }
        ]

        def handler(request):
            if request.url.host == "a.example.com":
                return httpx.Response(200, content=rss)
            if request.url.host == "api.example.com":
                return httpx.Response(200, json=commits)
            return httpx.Response(404)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            result = run_all_fetchers([FEED_A, FEED_B, COMMITS], client=client, delay=0)

        self.assertEqual([r.title for r in result.records], ["Add analyzer", "Malicious npm package found"])
        self.assertEqual(list(result.buckets), ["Commits", "Feed A"])


class TestGenerateDailyReport(unittest.TestCase):
    def test_no_sources_writes_empty_report(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = generate_daily_report("2024-03-05", utc(2024, 3, 5), base_dir=tmp, sources=[], delay=0)

            self.assertEqual(path, Path(tmp) / "2024-03-05" / "supply-chain-report.md")
            self.assertIn("No Relevant Reports Found Today", path.read_text(encoding="utf-8"))
            summary = json.loads((Path(tmp) / "2024-03-05" / "summary.json").read_text(encoding="utf-8"))
            self.assertEqual(summary["totalReports"], 0)
            self.assertEqual(summary["sources"], [])
            self.assertEqual(summary["reportPath"], str(path))


class TestMain(unittest.TestCase):
    def test_notification_failure_does_not_change_exit_code(self):
        notifier = mock.Mock()
        notifier.send_report.side_effect = RuntimeError("telegram down")

        with tempfile.TemporaryDirectory() as tmp:
            report = Path(tmp) / "report.md"
            with mock.patch.object(runner, "generate_daily_report", return_value=report):
                code = main(["--output-dir", tmp, "--delay", "0"], notifier=notifier)

        self.assertEqual(code, 0)
        notifier.send_report.assert_called_once_with(report)

    def test_persistence_failure_exits_non_zero(self):
        notifier = mock.Mock()
        with mock.patch.object(runner, "generate_daily_report", side_effect=PermissionError("read-only")):
            code = main(["--delay", "0"], notifier=notifier)

        self.assertEqual(code, 1)
        notifier.send_report.assert_not_called()


if __name__ == "__main__":
    unittest.main()
