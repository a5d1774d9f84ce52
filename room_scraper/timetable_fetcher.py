import requests
import logging
from requests.exceptions import RequestException, HTTPError, Timeout, ConnectionError
from typing import Optional
from tidylib import tidy_document

from room_scraper.models import ROOM_TIMETABLE_URL

DEFAULT_TIMEOUT = 30

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class RoomTimetableFetcher:
    """Fetches the landing page and per-room timetables from the room timetable site."""

    def __init__(self, base_url: str = ROOM_TIMETABLE_URL, timeout: float = DEFAULT_TIMEOUT):
        """Constructs a fetcher bound to one persistent session.

        The site ties its validation tokens to the session's previous request, so a
        fetcher must only ever have one request in flight.

        Args:
            base_url (str): The RoomTT.aspx endpoint, used for both GET and POST
            timeout (float): Per-request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

        # initialize a persistent session object
        self.session = requests.Session()

        logging.info("RoomTimetableFetcher initialized with persistent session")

    def fetch_landing_page(self) -> Optional[str]:
        """Sends a GET request for the landing page that carries the form tokens.

        Returns:
            Optional[str]: The cleaned HTML content, or None if an error occurs.
        """
        logging.info(f"Getting required metadata from {self.base_url}")
        return self._send("GET", "landing page")

    def fetch_room_html(self, room: str, form: dict[str, str]) -> Optional[str]:
        """Submits the timetable form for one room and returns the rendered HTML.

        Args:
            room (str): The room identifier, used for logging
            form (dict[str, str]): Complete form payload, CboLocation included

        Returns:
            Optional[str]: The cleaned HTML content, or None if an error occurs.
                           Returning None instead of raising lets the run continue
                           with the remaining rooms.
        """
        logging.info(f"Requesting room '{room}'...")
        return self._send("POST", f"room '{room}'", data=form, headers=FORM_HEADERS)

    def _send(self, method: str, label: str, **kwargs) -> Optional[str]:
        response = None
        try:
            response = self.session.request(
                method, self.base_url, timeout=self.timeout, **kwargs
            )

            # check for HTTP errors (4xx or 5xx)
            response.raise_for_status()
            logging.info(f"Fetch successful for {label}.")

            # decode using detected encoding, fall back to utf-8
            response.encoding = response.apparent_encoding or "utf-8"

            return self.fix_html(response.text)

        except Timeout:
            logging.error(f"The request timed out while fetching {label}.")
            return None

        except HTTPError as http_err:
            status_code = response.status_code if response is not None else "N/A"
            logging.error(
                f"HTTP error occurred fetching {label}: {http_err} - Status Code: {status_code}"
            )
            return None

        except ConnectionError as conn_err:
            logging.error(f"A connection error occurred fetching {label}: {conn_err}")
            return None

        except RequestException as req_error:
            logging.error(f"An error occurred fetching {label}: {req_error}")
            return None

    def fix_html(self, html: str) -> str:
        cleaned, errors = tidy_document(html, options={"numeric-entities": 1})
        if errors:
            logging.debug(f"Tidy reported: {errors.strip()}")
        return cleaned

    def close_session(self):
        """Closes the persistent session."""
        logging.info("Closing RoomTimetableFetcher session.")
        self.session.close()
