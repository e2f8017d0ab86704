# canvasbridge/renderer/main.py
import asyncio
import logging

from canvasbridge.settings import settings
from canvasbridge.renderer.canvas import HeadlessCanvas
from canvasbridge.renderer.client import RendererClient
from canvasbridge.renderer.executor import CommandExecutor


async def main():
    """
    Runs a headless renderer against the bridge, for development without a browser.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] (%(name)s) %(message)s"
    )
    client = RendererClient(settings.RENDERER_URL, CommandExecutor(HeadlessCanvas()), settings.RECONNECT_DELAY)
    await client.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nHeadless renderer is shutting down.")
