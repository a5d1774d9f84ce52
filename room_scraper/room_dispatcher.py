import logging
from typing import Optional

from room_scraper.models import SessionState, Timetable
from room_scraper.timetable_fetcher import RoomTimetableFetcher
from room_scraper.timetable_parser import parse_timetable


def dispatch_room(
    fetcher: RoomTimetableFetcher, session_state: SessionState, room: str
) -> Optional[Timetable]:
    """Request and parse a single room's timetable.

    Args:
        fetcher (RoomTimetableFetcher): Fetcher holding the bootstrapped session
        session_state (SessionState): Captured form state to replay
        room (str): Room identifier

    Returns:
        Optional[Timetable]: The parsed timetable, None when the request failed
    """
    html = fetcher.fetch_room_html(room, session_state.form_for_room(room))
    if html is None:
        logging.error(f"Requesting room '{room}' failed, dropping it from the results")
        return None

    timetable = parse_timetable(html, room)
    if timetable.room != room:
        logging.warning(
            f"Requested room '{room}' but the timetable header names '{timetable.room}'"
        )
    return timetable


def dispatch_rooms(
    fetcher: RoomTimetableFetcher, session_state: SessionState, rooms: list[str]
) -> list[Timetable]:
    """Request every room one after another and collect the parsed timetables.

    Rooms whose request fails are left out; the order of the returned list is the
    order of `rooms`.

    Args:
        fetcher (RoomTimetableFetcher): Fetcher holding the bootstrapped session
        session_state (SessionState): Captured form state to replay
        rooms (list[str]): Rooms in landing page order

    Returns:
        list[Timetable]: One timetable per successfully fetched room
    """
    timetables = []

    for i, room in enumerate(rooms, start=1):
        logging.info(f"Starting request {i}/{len(rooms)} for room: {room}")
        timetable = dispatch_room(fetcher, session_state, room)
        if timetable is not None:
            timetables.append(timetable)

    logging.info(f"Fetched {len(timetables)} of {len(rooms)} room timetables")
    return timetables
