import asyncio
import logging
import os

from pulsekit import Client, ClientConfig, Event, Level, setup_logging


def main() -> None:
  # Minimal configuration via environment variables
  os.environ.setdefault("PULSEKIT_ENDPOINT", "http://localhost:4000")
  os.environ.setdefault("PULSEKIT_API_KEY", "pk_example")

  logging.basicConfig(level=logging.INFO)
  logger = logging.getLogger("example_app")

  with Client(ClientConfig.from_env()) as client:
    setup_logging(client, logger)

    client.capture_message("Example app started", Level.INFO)
    client.capture(
      Event(event_type="payment.success", metadata={"amount": 1999, "currency": "EUR"})
      .with_tags({"provider": "stripe"})
    )

    try:
      1 / 0
    except ZeroDivisionError as exc:
      client.capture_exception(exc)
      logger.exception("Example ERROR log with exception")

    client.capture_error("Example error with call-site stack trace")

    # Awaited flush for asyncio shutdown sequences; leaving the block also flushes.
    asyncio.run(client.flush())


if __name__ == "__main__":
  main()
