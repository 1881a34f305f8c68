"""Bot entry point.

Runs with long polling by default, or behind a webhook with ``--webhook``.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

import uvicorn

from videonote.core.config import Settings, settings as default_settings
from videonote.core.logging import log_info, setup_logging
from videonote.modules.conversion.fetcher import RemoteFetcher
from videonote.modules.conversion.ffmpeg import FFmpegTranscoder
from videonote.modules.conversion.models import Limits
from videonote.modules.conversion.service import ConversionService
from videonote.modules.telegram.client import TelegramBotClient
from videonote.modules.telegram.dispatcher import UpdateDispatcher
from videonote.modules.telegram.notifier import TelegramNotifier
from videonote.modules.telegram.polling import LongPoller
from videonote.modules.telegram.router import create_webhook_app

logger = logging.getLogger(__name__)


def build_dispatcher(settings: Settings, client: TelegramBotClient) -> UpdateDispatcher:
    """Wire the conversion service and notifier around a Bot API client."""
    notifier = TelegramNotifier(client)
    conversions = ConversionService(
        fetcher=RemoteFetcher(client, timeout=settings.FETCH_TIMEOUT_SECONDS),
        transcoder=FFmpegTranscoder.from_settings(settings),
        notifier=notifier,
        limits=Limits.from_settings(settings),
        work_dir=settings.WORK_DIR,
    )
    return UpdateDispatcher(notifier, conversions)


async def run_polling(settings: Settings) -> None:
    async with TelegramBotClient.from_settings(settings) as client:
        poller = LongPoller(client, build_dispatcher(settings, client), settings.POLL_TIMEOUT_SECONDS)
        task = asyncio.create_task(poller.run())

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, task.cancel)

        try:
            await task
        except asyncio.CancelledError:
            log_info(logger, "Shutdown requested")


async def run_webhook(settings: Settings) -> None:
    if not settings.WEBHOOK_URL:
        raise SystemExit("WEBHOOK_URL must be set to run with --webhook")

    async with TelegramBotClient.from_settings(settings) as client:
        dispatcher = build_dispatcher(settings, client)
        app = create_webhook_app(dispatcher, settings.WEBHOOK_SECRET)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=settings.WEBHOOK_HOST,
                port=settings.WEBHOOK_PORT,
                log_config=None,
            )
        )

        await client.set_webhook(settings.WEBHOOK_URL, settings.WEBHOOK_SECRET)
        log_info(logger, "Webhook registered", port=settings.WEBHOOK_PORT)
        try:
            await server.serve()
        finally:
            await dispatcher.shutdown()
            await client.delete_webhook(drop_pending_updates=True)
            log_info(logger, "Webhook removed")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="videonote",
        description="Telegram bot converting videos into round video notes",
    )
    parser.add_argument(
        "token",
        nargs="?",
        help="Bot token (defaults to TELEGRAM_BOT_TOKEN)",
    )
    parser.add_argument(
        "-w", "--webhook",
        action="store_true",
        help="Receive updates through a webhook instead of long polling",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    settings = default_settings
    if args.token:
        settings = settings.model_copy(update={"TELEGRAM_BOT_TOKEN": args.token})
    if not settings.TELEGRAM_BOT_TOKEN:
        print("telegram bot token must be passed as argument or TELEGRAM_BOT_TOKEN", file=sys.stderr)
        return 2

    setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    log_info(logger, "Starting bot", version=settings.VERSION, webhook=args.webhook)

    runner = run_webhook if args.webhook else run_polling
    asyncio.run(runner(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
