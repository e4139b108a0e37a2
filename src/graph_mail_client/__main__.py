#!/usr/bin/env python3
"""
Prints one message of a mailbox.

Configuration comes from the environment: CLIENT_ID, CLIENT_SECRET and
TENANT_ID for the application, USER_ID and MESSAGE_ID for the message, and
LOG_LEVEL (default WARNING).
"""

import logging
import os
import sys

from .exceptions import GraphClientError
from .user_client import UserClient
from .utils.datetime import convert_datetime_to_readable


def main() -> int:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        client = UserClient.from_env()
    except GraphClientError as e:
        print(f"Error creating service: {e}")
        return 1

    try:
        message = client.mail.get_message(os.getenv("USER_ID", ""), os.getenv("MESSAGE_ID", ""))
    except GraphClientError as e:
        print(f"Error getting message: {e}")
        return 1

    received = convert_datetime_to_readable(message.received_date_time) if message.received_date_time else ""
    print(f"Subject: {message.subject or ''}")
    print(f"Body: {message.body_content or ''}")
    print(f"Received: {received}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
