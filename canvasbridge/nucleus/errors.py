# canvasbridge/nucleus/errors.py


class BridgeError(Exception):
    """Base class for failures that reject a caller's command outright."""


class RendererUnavailableError(BridgeError):
    def __init__(self, message: str = "Canvas not connected. Please open the canvas app in your browser."):
        super().__init__(message)


class RequestTimeoutError(BridgeError):
    def __init__(self, request_id: int, timeout: float):
        self.request_id = request_id
        self.timeout = timeout
        super().__init__("Request timed out")


class RendererDisconnectedError(BridgeError):
    """Raised for pending requests when the renderer drops and the strict disconnect policy is on."""

    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__("Canvas disconnected before replying")
