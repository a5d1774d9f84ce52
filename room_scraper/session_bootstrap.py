import logging
import re
from typing import Optional, Pattern, Union

from bs4 import BeautifulSoup, Tag

from room_scraper.models import HIDDEN_TOKEN_FIELDS, SessionState
from room_scraper.timetable_fetcher import RoomTimetableFetcher

DEFAULT_ROOM_PATTERN = r"^IT101$"


def compile_room_pattern(
    pattern: Optional[str] = None, prefix: Optional[str] = None
) -> Pattern[str]:
    """Build the room selection regex.

    Args:
        pattern (Optional[str]): A full regular expression, e.g. r"^IT1[0-9]{2}$"
        prefix (Optional[str]): A building code such as "IT"; rooms starting with it match.
                                Ignored when `pattern` is given.

    Returns:
        Pattern[str]: Compiled pattern, DEFAULT_ROOM_PATTERN when neither is given
    """
    if pattern:
        return re.compile(pattern)
    if prefix:
        return re.compile(rf"^{re.escape(prefix)}")
    return re.compile(DEFAULT_ROOM_PATTERN)


def extract_hidden_fields(soup: BeautifulSoup) -> dict[str, str]:
    """Collect the view-state tokens the page rendered, by exact input name.

    Tokens the page is missing are left out rather than treated as fatal; the site
    may still accept the request without them.
    """
    hidden_fields = {}
    for hidden_input in soup.find_all("input", type="hidden"):
        name = hidden_input.get("name")
        if name in HIDDEN_TOKEN_FIELDS:
            hidden_fields[name] = hidden_input.get("value", "")

    for name in HIDDEN_TOKEN_FIELDS:
        if name not in hidden_fields:
            logging.warning(f"Hidden field {name} not found on landing page")

    return hidden_fields


def extract_week(soup: BeautifulSoup, week_offset: int = 0) -> str:
    """Read the selected week code and shift it by `week_offset`.

    A week that is not an integer is returned unmodified and the offset is skipped.

    Args:
        soup (BeautifulSoup): The parsed landing page
        week_offset (int): Signed number of weeks to move from the current one

    Returns:
        str: Week code to submit in CboWeeks
    """
    selected = soup.select_one("select[name='CboWeeks'] > option[selected]")
    week = selected.get("value", "") if isinstance(selected, Tag) else ""

    try:
        week_int = int(week)
    except ValueError as e:
        logging.error(f"Failed to convert week string to int: '{week}' ({e})")
        return week

    return str(week_int + week_offset)


def extract_rooms(soup: BeautifulSoup, room_pattern: Pattern[str]) -> list[str]:
    """List the CboLocation option values matching `room_pattern`, in page order.

    Raises:
        RuntimeError: If the page has no room selector at all
    """
    room_select = soup.find("select", attrs={"name": "CboLocation"})
    if not isinstance(room_select, Tag):
        raise RuntimeError("Room selector CboLocation not found on landing page")

    rooms = []
    for option in room_select.find_all("option"):
        room_name = option.get("value", "")
        if room_pattern.search(room_name):
            logging.debug(f"Room found: {room_name}")
            rooms.append(room_name)

    return list(dict.fromkeys(rooms))  # remove duplicates


def parse_landing_page(
    html: str,
    room_pattern: Union[str, Pattern[str], None] = None,
    week_offset: int = 0,
) -> tuple[SessionState, list[str]]:
    """Turn the landing page into the session state and the rooms to request.

    Args:
        html (str): Landing page HTML
        room_pattern (Union[str, Pattern[str], None]): Room selection regex
        week_offset (int): Signed week offset applied to the selected week

    Returns:
        tuple[SessionState, list[str]]: Replayable form state and matching rooms
    """
    if not html or not html.strip():
        raise RuntimeError("Landing page is empty")

    if room_pattern is None or isinstance(room_pattern, str):
        room_pattern = compile_room_pattern(room_pattern)

    soup = BeautifulSoup(html, "html.parser")

    session_state = SessionState(
        hidden_fields=extract_hidden_fields(soup),
        week=extract_week(soup, week_offset),
    )
    rooms = extract_rooms(soup, room_pattern)

    logging.info(
        f"Found {len(rooms)} rooms matching '{room_pattern.pattern}' for week '{session_state.week}'"
    )
    return session_state, rooms


def bootstrap_session(
    fetcher: RoomTimetableFetcher,
    room_pattern: Union[str, Pattern[str], None] = None,
    week_offset: int = 0,
) -> tuple[SessionState, list[str]]:
    """Fetch the landing page once and capture everything room requests need.

    Raises:
        RuntimeError: If the landing page could not be fetched or is unusable.
                      Without tokens no room request can succeed, so this ends the run.
    """
    html = fetcher.fetch_landing_page()
    if html is None:
        raise RuntimeError("Getting required metadata failed")

    return parse_landing_page(html, room_pattern, week_offset)
