import unittest
from unittest.mock import patch, MagicMock
from requests.exceptions import RequestException, HTTPError, Timeout, ConnectionError
from room_scraper.models import ROOM_TIMETABLE_URL
from room_scraper.timetable_fetcher import FORM_HEADERS, RoomTimetableFetcher


class RoomTimetableFetcherTest(unittest.TestCase):
    def setUp(self):
        """Sets up the text fixture. Runs once at the beginning of each test."""
        self.fetcher = RoomTimetableFetcher(timeout=30)
        self.form = {"CboWeeks": "34", "CboLocation": "IT101"}

        tidy_patcher = patch(
            "room_scraper.timetable_fetcher.tidy_document",
            side_effect=lambda html, options: (html, ""),
        )
        self.mock_tidy = tidy_patcher.start()
        self.addCleanup(tidy_patcher.stop)

        request_patcher = patch.object(self.fetcher.session, "request")
        self.mock_request = request_patcher.start()
        self.addCleanup(request_patcher.stop)

    def tearDown(self):
        self.fetcher.close_session()
        return super().tearDown()

    def mock_response(self, html: str) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.text = html
        mock_response.apparent_encoding = "utf-8"
        return mock_response

    def test_fetch_landing_page_success(self):
        """Tests that fetch_landing_page() GETs the endpoint and returns tidied HTML."""
        # ===== Arrange =====
        expected_html = "<html>Landing</html>"
        self.mock_request.return_value = self.mock_response(expected_html)

        # ===== Act ======
        actual_html = self.fetcher.fetch_landing_page()

        # ===== Assert =====
        self.assertEqual(actual_html, expected_html)
        self.mock_request.assert_called_once_with("GET", ROOM_TIMETABLE_URL, timeout=30)
        self.mock_tidy.assert_called_once_with(expected_html, options={"numeric-entities": 1})

    def test_fetch_room_html_success(self):
        """Tests that fetch_room_html() POSTs the urlencoded form on the same session."""
        # ===== Arrange =====
        expected_html = "<html>IT101</html>"
        self.mock_request.return_value = self.mock_response(expected_html)

        # ===== Act ======
        actual_html = self.fetcher.fetch_room_html("IT101", self.form)

        # ===== Assert =====
        self.assertEqual(actual_html, expected_html)
        self.mock_request.assert_called_once_with(
            "POST",
            ROOM_TIMETABLE_URL,
            timeout=30,
            data=self.form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        self.assertEqual(FORM_HEADERS["Content-Type"], "application/x-www-form-urlencoded")

    def test_fetch_room_html_timeout(self):
        """Tests that fetch_room_html() returns None on timeout."""
        self.mock_request.side_effect = Timeout()

        with self.assertLogs(level="ERROR") as logs:
            self.assertIsNone(self.fetcher.fetch_room_html("IT101", self.form))

        self.assertIn("timed out", logs.output[0].lower())

    def test_fetch_room_html_http_error(self):
        """Tests that fetch_room_html() returns None on HTTP error."""
        mock_response = self.mock_response("")
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = HTTPError("500 Server Error")
        self.mock_request.return_value = mock_response

        with self.assertLogs(level="ERROR") as logs:
            self.assertIsNone(self.fetcher.fetch_room_html("IT101", self.form))

        self.assertIn("http error", logs.output[0].lower())
        self.assertIn("500", logs.output[0])
        self.mock_tidy.assert_not_called()

    def test_fetch_landing_page_connection_error(self):
        """Tests that fetch_landing_page() returns None on connection error."""
        self.mock_request.side_effect = ConnectionError()

        with self.assertLogs(level="ERROR") as logs:
            self.assertIsNone(self.fetcher.fetch_landing_page())

        self.assertIn("connection error", logs.output[0].lower())

    def test_fetch_room_html_generic_request_exception(self):
        """Tests that fetch_room_html() returns None on general request exception."""
        self.mock_request.side_effect = RequestException("Unexpected error")

        with self.assertLogs(level="ERROR") as logs:
            self.assertIsNone(self.fetcher.fetch_room_html("IT101", self.form))

        self.assertIn("error occurred", logs.output[0].lower())

    def test_custom_timeout(self):
        fetcher = RoomTimetableFetcher(timeout=5)
        with patch.object(fetcher.session, "request") as mock_request:
            mock_request.return_value = self.mock_response("<html></html>")

            fetcher.fetch_landing_page()

        mock_request.assert_called_once_with("GET", ROOM_TIMETABLE_URL, timeout=5)
        fetcher.close_session()

    def test_close_session(self):
        with patch.object(self.fetcher.session, "close") as mock_close:
            self.fetcher.close_session()

        mock_close.assert_called_once_with()
