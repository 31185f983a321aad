
import unittest

from aprs_beacon import activity_log


class ActivityLogTestCase(unittest.TestCase):

    def setUp(self):
        activity_log.clear_logs()

    def tearDown(self):
        activity_log.clear_logs()

    def test_newest_first(self):
        activity_log.log_info("first")
        activity_log.log_error("second")
        logs = activity_log.get_recent_logs()
        self.assertEqual([l["message"] for l in logs], ["second", "first"])
        self.assertEqual(logs[0]["type"], "error")
        self.assertNotEqual(logs[0]["id"], logs[1]["id"])

    def test_capped(self):
        for i in range(activity_log.MAX_LOGS + 20):
            activity_log.log_success(f"msg {i}")
        logs = activity_log.get_recent_logs()
        self.assertEqual(len(logs), activity_log.MAX_LOGS)
        self.assertEqual(logs[0]["message"], f"msg {activity_log.MAX_LOGS + 19}")

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            activity_log.log_to_history("x", "fatal")


if __name__ == "__main__":
    unittest.main()
