import argparse
import logging
import os
import sys
from typing import Optional

from room_scraper.models import ScrapeResult
from room_scraper.output import write_outputs
from room_scraper.result_aggregator import aggregate_timetables
from room_scraper.room_dispatcher import dispatch_rooms
from room_scraper.session_bootstrap import DEFAULT_ROOM_PATTERN, bootstrap_session, compile_room_pattern
from room_scraper.timetable_fetcher import DEFAULT_TIMEOUT, RoomTimetableFetcher
from room_scraper.webhook import send_ascii_table_to_webhook

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(log_path: str = "./room_scrape.log", debug: bool = False) -> None:
    """Send log records to both the log file (appending) and stdout."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path, mode="a"),
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find when rooms are free using the room timetable site."
    )
    parser.add_argument("--log-path", default="./room_scrape.log", help="Path to log file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    room_group = parser.add_mutually_exclusive_group()
    room_group.add_argument(
        "--rooms",
        default=None,
        help=f"Regular expression selecting rooms (default: {DEFAULT_ROOM_PATTERN})",
    )
    room_group.add_argument(
        "--room-prefix",
        default=None,
        help="Select every room whose code starts with this building code, e.g. IT",
    )

    parser.add_argument(
        "--week-offset",
        type=int,
        default=0,
        help="Weeks to move from the site's current week, e.g. -1 for last week",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument("--output-dir", default=".", help="Directory for the output files")
    parser.add_argument(
        "--webhook-url",
        default=os.getenv("DISCORD_WEBHOOK_URL"),
        help="Webhook to post the ASCII table to (default: $DISCORD_WEBHOOK_URL)",
    )
    return parser.parse_args(argv)


def scrape_free_rooms(
    fetcher: RoomTimetableFetcher,
    room_pattern: Optional[str] = None,
    room_prefix: Optional[str] = None,
    week_offset: int = 0,
) -> ScrapeResult:
    """Bootstrap the session, request every matching room and fold the results.

    Raises:
        RuntimeError: If the landing page could not be used
    """
    pattern = compile_room_pattern(room_pattern, room_prefix)
    session_state, rooms = bootstrap_session(fetcher, pattern, week_offset)

    if not rooms:
        logging.warning(f"No rooms matched '{pattern.pattern}'")

    timetables = dispatch_rooms(fetcher, session_state, rooms)
    free_room_table, summary = aggregate_timetables(timetables)

    logging.info(
        f"Finished all requests: timetableCount={summary.timetable_count}, "
        f"errors={summary.error_count}, emptyTimetables={summary.empty_count}, "
        f"freeTimesCount={summary.free_slot_count}"
    )

    return ScrapeResult(
        free_room_table=free_room_table,
        summary=summary,
        timetables=timetables,
        week=session_state.week,
    )


def main(args: argparse.Namespace) -> bool:
    """Run one scrape and emit its outputs.

    Returns:
        bool: True if successful, False otherwise
    """
    fetcher = None
    try:
        logging.info(
            f"Starting room-scrape: rooms={args.rooms or args.room_prefix or DEFAULT_ROOM_PATTERN}, "
            f"weekOffset={args.week_offset}"
        )

        fetcher = RoomTimetableFetcher(timeout=args.timeout)
        result = scrape_free_rooms(
            fetcher,
            room_pattern=args.rooms,
            room_prefix=args.room_prefix,
            week_offset=args.week_offset,
        )

        ascii_table = write_outputs(result.free_room_table, args.output_dir)

        if args.webhook_url:
            send_ascii_table_to_webhook(ascii_table, args.webhook_url)

        return True

    except Exception as e:
        logging.error(f"room-scrape failed: {e}")
        return False
    finally:
        if fetcher:
            fetcher.close_session()


def run() -> None:
    args = parse_args()
    setup_logging(args.log_path, args.debug)

    if not main(args):
        print(f"Room scraping failed. Check {args.log_path} for details", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
