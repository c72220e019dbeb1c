import unittest
from datetime import datetime, time, timedelta
from types import SimpleNamespace

from seller_ops.core.scheduler import Scheduler, build_scheduler, next_daily_run, parse_run_time


class SchedulerTest(unittest.TestCase):
    def test_run_pending_executes_job(self):
        hits = {"count": 0}

        def job():
            hits["count"] += 1
            return hits["count"]

        scheduler = Scheduler()
        scheduler.add_daily_job("test", "00:00", job, run_in_thread=False)
        scheduler.get_job("test").next_run = datetime.now() - timedelta(seconds=1)
        scheduler.run_pending()

        self.assertEqual(hits["count"], 1)
        self.assertEqual(scheduler.get_job("test").last_result, 1)
        self.assertGreater(scheduler.get_job("test").next_run, datetime.now())

    def test_failed_job_records_error(self):
        def job():
            raise RuntimeError("database unavailable")

        scheduler = Scheduler()
        scheduler.add_daily_job("failing", "06:00", job, run_in_thread=False)
        self.assertIsNone(scheduler.run_now("failing"))
        self.assertEqual(scheduler.get_job("failing").last_error, "database unavailable")

    def test_duplicate_and_unknown_jobs(self):
        scheduler = Scheduler()
        scheduler.add_daily_job("once", "06:00", lambda: None)
        with self.assertRaises(ValueError):
            scheduler.add_daily_job("once", "07:00", lambda: None)
        with self.assertRaises(LookupError):
            scheduler.get_job("missing")

    def test_next_daily_run_rolls_over(self):
        now = datetime(2024, 5, 1, 7, 30)
        self.assertEqual(next_daily_run(time(6, 0), now=now), datetime(2024, 5, 2, 6, 0))
        self.assertEqual(next_daily_run(time(8, 0), now=now), datetime(2024, 5, 1, 8, 0))

    def test_parse_run_time(self):
        self.assertEqual(parse_run_time("06:15"), time(6, 15))
        with self.assertRaises(ValueError):
            parse_run_time("6")

    def test_build_scheduler_registers_auto_reorder(self):
        settings = SimpleNamespace(SCHEDULER_TZ="utc", SCHEDULER_POLL_SECONDS=5, AUTO_REORDER_RUN_TIME="05:00")
        scheduler = build_scheduler(settings, lambda: {"users": 0})
        self.assertEqual(scheduler.run_now("auto-reorder"), {"users": 0})
        self.assertFalse(scheduler.running)


if __name__ == "__main__":
    unittest.main()
