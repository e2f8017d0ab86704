# canvasbridge/main.py
import asyncio
import logging

import uvicorn

from canvasbridge.settings import settings
from canvasbridge.api import create_app
from canvasbridge.engine import PipelineEngine
from canvasbridge.gateway import RendererGateway
from canvasbridge.electrons.logger import LoggerElectron
from canvasbridge.nucleus.bridge import CanvasBridge
from canvasbridge.tools import build_mcp_server


async def main():
    """
    The main entry point for the canvas bridge.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] (%(name)s) %(message)s"
    )
    logger = logging.getLogger("canvasbridge.main")

    # 1. The bridge core owns the renderer slot and every pending request.
    bridge = CanvasBridge(
        timeout=settings.REQUEST_TIMEOUT,
        fail_pending_on_disconnect=settings.FAIL_PENDING_ON_DISCONNECT,
    )

    # 2. Replies from the renderer run through the electron pipeline and end at the bridge.
    pipeline_engine = PipelineEngine(
        electrons=[LoggerElectron()],
        nucleus_handler=bridge.handle_reply,
    )
    renderer_gateway = RendererGateway(bridge, pipeline_engine, settings.RENDERER_HOST, settings.RENDERER_PORT)

    # 3. The HTTP API. log_config=None keeps uvicorn on our logging setup (stderr).
    api_server = uvicorn.Server(uvicorn.Config(
        create_app(bridge),
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=None,
    ))

    tasks = [
        asyncio.create_task(renderer_gateway.start()),
        asyncio.create_task(api_server.serve()),
    ]
    if settings.MCP_STDIO:
        tasks.append(asyncio.create_task(build_mcp_server(bridge).run_stdio_async()))

    logger.info(f"Canvas bridge starting. Command API on http://{settings.API_HOST}:{settings.API_PORT}/command")
    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        bridge.shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nServer is shutting down.")
