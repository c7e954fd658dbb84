import logging

from starlette.responses import JSONResponse

from models.errors import PayloadTooLarge

logger = logging.getLogger(__name__)

TOO_LARGE_MESSAGE = "File too large. Maximum file size is 1MB."


class PayloadLimitMiddleware:
    """
    Rejects any request to one of `paths` whose body exceeds max_bytes with 413.
    Checks Content-Length first, otherwise buffers the body (at most
    max_bytes) and replays it to the app. Other paths pass through untouched.
    """

    def __init__(self, app, max_bytes: int, paths=("/predict",)):
        self.app = app
        self.max_bytes = max_bytes
        self.paths = set(paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope.get("path") not in self.paths:
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        content_length = headers.get(b"content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > self.max_bytes:
            await self._reject(scope, receive, send, int(content_length))
            return

        chunks = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away mid-upload; nothing left to answer
                logger.info(f"Client disconnected during upload to {scope.get('path')}")
                return
            chunk = message.get("body", b"")
            chunks.append(chunk)
            size += len(chunk)
            more_body = message.get("more_body", False)
            if size > self.max_bytes:
                await self._reject(scope, receive, send, size)
                return

        body = b"".join(chunks)
        replayed = False

        async def replay():
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope, receive, send, size: int):
        logger.warning(f"Rejected {scope.get('method')} {scope.get('path')}: payload of {size} bytes")
        error = PayloadTooLarge(TOO_LARGE_MESSAGE)
        response = JSONResponse(status_code=error.status_code, content=error.to_dict())
        await response(scope, receive, send)
