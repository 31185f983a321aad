
import unittest
import unittest.mock

from aprs_beacon.wake_lock import WakeLock


class WakeLockTestCase(unittest.TestCase):

    def test_unsupported_platform(self):
        lock = WakeLock()
        self.assertFalse(lock.acquire())
        self.assertFalse(lock.held)
        self.assertTrue(lock.release())

    def test_acquire_release(self):
        handle = unittest.mock.Mock()
        requester = unittest.mock.Mock(return_value=handle)
        lock = WakeLock(requester)

        self.assertTrue(lock.acquire())
        self.assertTrue(lock.held)
        # second acquire reuses the handle
        self.assertTrue(lock.acquire())
        self.assertEqual(requester.call_count, 1)

        self.assertTrue(lock.release())
        handle.release.assert_called_once_with()
        self.assertFalse(lock.held)

    def test_request_failure(self):
        lock = WakeLock(unittest.mock.Mock(side_effect=OSError("denied")))
        self.assertFalse(lock.acquire())
        self.assertFalse(lock.held)

    def test_release_failure_keeps_handle(self):
        handle = unittest.mock.Mock()
        handle.release.side_effect = RuntimeError("busy")
        lock = WakeLock(lambda: handle)
        lock.acquire()
        self.assertFalse(lock.release())
        self.assertTrue(lock.held)

    def test_instances_are_independent(self):
        a = WakeLock(unittest.mock.Mock())
        b = WakeLock()
        a.acquire()
        self.assertTrue(a.held)
        self.assertFalse(b.held)


if __name__ == "__main__":
    unittest.main()
