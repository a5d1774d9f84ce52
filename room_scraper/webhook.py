import logging

import requests

WEBHOOK_USERNAME = "Peter's Room Checker Bot"
WEBHOOK_AVATAR_URL = "https://i.imgur.com/oBPXx0D.png"


def send_ascii_table_to_webhook(ascii_table: str, webhook_url: str, timeout: float = 30) -> None:
    """Post the ASCII table, wrapped in a code block, to a Discord-style webhook.

    The fields go out as multipart form data.

    Raises:
        RuntimeError: If the webhook answers with anything but 200 or 204
    """
    fields = {
        "username": (None, WEBHOOK_USERNAME),
        "avatar_url": (None, WEBHOOK_AVATAR_URL),
        "content": (None, f"```{ascii_table}```"),
    }

    logging.info("Sending ASCII table to webhook")
    response = requests.post(webhook_url, files=fields, timeout=timeout)

    if response.status_code not in (200, 204):
        raise RuntimeError(f"Webhook returned bad status: {response.status_code}")

    logging.info("ASCII table sent to webhook")
