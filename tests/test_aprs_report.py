
import unittest
import unittest.mock
from unittest.mock import patch

import requests

from aprs_beacon import aprs_report
from aprs_beacon.models import StationIdentity

IDENTITY = StationIdentity("BG5XYZ", "12345")
PACKETS = [
    "BG5XYZ>APRS,TCPIP*:!3954.00N/11624.00E[hello",
    "BG5XYZ>APRS,TCPIP*:>status",
]


class AprsIsTransmitTestCase(unittest.TestCase):

    @patch.object(aprs_report.aprs, "TCP")
    def test_send_all_packets(self, mock_tcp):
        conn = mock_tcp.return_value
        conn.send.side_effect = lambda frame: len(frame) + 2

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="aprs-is", server="example.net:14580")

        self.assertTrue(result.success)
        self.assertEqual(result.message, "APRS packet transmitted successfully for BG5XYZ")
        self.assertEqual(result.callsign, "BG5XYZ")
        mock_tcp.assert_called_once_with(b"BG5XYZ", b"12345", servers=[b"example.net:14580"])
        conn.start.assert_called_once_with()
        sent = [call.args[0] for call in conn.send.call_args_list]
        self.assertEqual(sent, [p.encode() for p in PACKETS])
        conn.stop.assert_called_once_with()

    @patch.object(aprs_report.aprs, "TCP")
    def test_short_write_is_failure(self, mock_tcp):
        conn = mock_tcp.return_value
        conn.send.return_value = 0

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="aprs-is", server="example.net:14580")

        self.assertFalse(result.success)
        self.assertTrue(result.message.startswith("Failed to transmit APRS packet:"))
        self.assertEqual(conn.send.call_count, 1)
        conn.stop.assert_called_once_with()

    @patch.object(aprs_report.aprs, "TCP")
    def test_connection_error_is_failure(self, mock_tcp):
        mock_tcp.return_value.start.side_effect = ConnectionRefusedError("refused")

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="aprs-is", server="example.net:14580")

        self.assertFalse(result.success)
        self.assertIn("refused", result.message)
        self.assertIsNotNone(result.timestamp)

    def test_no_packets(self):
        result = aprs_report.transmit_packets(IDENTITY, [], mode="aprs-is")
        self.assertFalse(result.success)


class HttpRelayTransmitTestCase(unittest.TestCase):

    @patch.object(aprs_report.requests, "post")
    def test_post_each_packet(self, mock_post):
        mock_post.return_value.status_code = 200

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="http", relay_url="https://relay.example/")

        self.assertTrue(result.success)
        self.assertEqual(mock_post.call_count, 2)
        name, args, kwargs = mock_post.mock_calls[0]
        self.assertEqual(args[0], "https://relay.example/")
        self.assertEqual(kwargs["json"], {"callsign": "BG5XYZ", "passcode": "12345", "packet": PACKETS[0]})

    @patch.object(aprs_report.requests, "post")
    def test_http_error(self, mock_post):
        response = unittest.mock.Mock(status_code=502)
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError(response=response)

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="http", relay_url="https://relay.example/")

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Failed to transmit APRS packet: HTTP error! status: 502")

    @patch.object(aprs_report.requests, "post")
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("unreachable")

        result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="http", relay_url="https://relay.example/")

        self.assertFalse(result.success)
        self.assertIn("unreachable", result.message)

    def test_missing_relay_url(self):
        with patch.dict(aprs_report.GLOBAL_CONFIG, {"http_relay_url": ""}):
            result = aprs_report.transmit_packets(IDENTITY, PACKETS, mode="http")
        self.assertFalse(result.success)
        self.assertIn("http_relay_url", result.message)


if __name__ == "__main__":
    unittest.main()
