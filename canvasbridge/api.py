# canvasbridge/api.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from canvasbridge.nucleus.bridge import CanvasBridge
from canvasbridge.nucleus.errors import BridgeError
from canvasbridge.nucleus.protocol import CommandRequest

logger = logging.getLogger(__name__)


def create_app(bridge: CanvasBridge) -> FastAPI:
    """
    Builds the HTTP command API.

    One POST per command; the handler waits for the renderer's reply before
    answering. Any origin may call it, pre-flight requests are answered by
    the CORS middleware and never reach the bridge.
    """
    app = FastAPI(title="canvasbridge", docs_url=None, redoc_url=None)
    app.state.bridge = bridge

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid command request: {location or 'body'}: {first.get('msg', 'malformed')}"
        return JSONResponse(status_code=400, content={"success": False, "error": message})

    @app.post("/command")
    async def run_command(body: CommandRequest):
        try:
            result = await bridge.submit(body.command, body.params)
        except BridgeError as e:
            logger.warning(f"Command '{body.command}' failed: {e}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        return {"success": True, "result": result}

    @app.get("/status")
    async def status():
        return {"connected": bridge.connected, "pending": bridge.pending_count}

    return app
