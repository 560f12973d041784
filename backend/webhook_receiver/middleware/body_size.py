import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 65536


class IngressError(Exception):
    """The request body could not be accepted; answered with 503."""


class PayloadTooLarge(IngressError):
    pass


class BodyReadError(IngressError):
    pass


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length is over the limit."""

    def __init__(self, app, max_body_bytes: int = MAX_BODY_BYTES):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = -1
            if declared < 0:
                logger.error(f"Invalid Content-Length header: {content_length!r}")
                return Response(status_code=503)
            if declared > self.max_body_bytes:
                logger.error(
                    f"Request body too large: {declared} > {self.max_body_bytes}"
                )
                return Response(status_code=503)
        return await call_next(request)


async def read_limited_body(request: Request, max_bytes: int = MAX_BODY_BYTES) -> bytes:
    """
    Read the raw request body, byte for byte.

    Chunked uploads carry no Content-Length, so the limit is enforced while
    streaming as well. Raises PayloadTooLarge past ``max_bytes`` and
    BodyReadError when the client goes away mid-body.
    """
    chunks: list[bytes] = []
    received = 0
    try:
        async for chunk in request.stream():
            received += len(chunk)
            if received > max_bytes:
                raise PayloadTooLarge(f"Request body exceeds {max_bytes} bytes")
            chunks.append(chunk)
    except ClientDisconnect as e:
        raise BodyReadError("Client disconnected while sending body") from e
    return b"".join(chunks)
