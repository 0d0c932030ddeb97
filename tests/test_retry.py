import unittest
from flickr_client.retry import RetryTracker

KEY = "photosets.getInfo:45"

class TestRetryTracker(unittest.TestCase):
    def test_abandons_immediately_without_retries(self):
        tracker = RetryTracker(max_retries=0, delay_ms=500)
        with self.assertLogs("flickr_client.retry", level="ERROR"):
            decision = tracker.record_failure(KEY)
        self.assertFalse(decision.retry)
        self.assertEqual(tracker.count(KEY), 0)

    def test_abandons_after_max_retries(self):
        tracker = RetryTracker(max_retries=2, delay_ms=300)
        with self.assertLogs("flickr_client.retry", level="WARNING"):
            first = tracker.record_failure(KEY)
            second = tracker.record_failure(KEY)
            third = tracker.record_failure(KEY)
        self.assertTrue(first.retry)
        self.assertEqual(first.delay_ms, 300)
        self.assertEqual(first.attempt, 1)
        self.assertTrue(second.retry)
        self.assertEqual(second.attempt, 2)
        self.assertFalse(third.retry)
        self.assertEqual(tracker.count(KEY), 0)

    def test_success_resets(self):
        tracker = RetryTracker(max_retries=2, delay_ms=1)
        with self.assertLogs("flickr_client.retry", level="INFO") as logs:
            tracker.record_failure(KEY)
            tracker.record_success(KEY)
        self.assertEqual(tracker.count(KEY), 0)
        self.assertIn("succeeded", logs.output[-1])
        # counting starts over
        with self.assertLogs("flickr_client.retry", level="WARNING"):
            self.assertEqual(tracker.record_failure(KEY).attempt, 1)

    def test_keys_are_independent(self):
        tracker = RetryTracker(max_retries=1, delay_ms=1)
        with self.assertLogs("flickr_client.retry", level="WARNING"):
            tracker.record_failure(KEY)
            self.assertTrue(tracker.record_failure("photosets.getInfo:46").retry)

    def test_success_without_failures_is_silent(self):
        tracker = RetryTracker(max_retries=1, delay_ms=1)
        tracker.record_success(KEY)
        self.assertIsNone(tracker.count(KEY))

if __name__ == '__main__':
    unittest.main()
