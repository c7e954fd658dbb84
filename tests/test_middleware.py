import json

import pytest

from middleware import PayloadLimitMiddleware


class RecordingApp:
    def __init__(self):
        self.calls = 0
        self.received = []

    async def __call__(self, scope, receive, send):
        self.calls += 1
        self.received.append(await receive())
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"ok"})


def make_scope(path="/predict", method="POST", headers=None):
    return {"type": "http", "method": method, "path": path, "headers": headers or []}


def make_receive(messages):
    queue = list(messages)

    async def receive():
        return queue.pop(0) if queue else {"type": "http.disconnect"}

    return receive


async def run(middleware, scope, messages):
    sent = []

    async def send(message):
        sent.append(message)

    await middleware(scope, make_receive(messages), send)
    return sent


@pytest.mark.anyio
async def test_disconnect_mid_upload_never_reaches_app():
    app = RecordingApp()
    middleware = PayloadLimitMiddleware(app, max_bytes=1_000_000)

    sent = await run(middleware, make_scope(), [
        {"type": "http.request", "body": b"partial", "more_body": True},
        {"type": "http.disconnect"},
    ])

    assert app.calls == 0
    assert sent == []


@pytest.mark.anyio
async def test_chunked_body_is_joined_and_replayed():
    app = RecordingApp()
    middleware = PayloadLimitMiddleware(app, max_bytes=100)

    await run(middleware, make_scope(), [
        {"type": "http.request", "body": b"abc", "more_body": True},
        {"type": "http.request", "body": b"def", "more_body": True},
        {"type": "http.request", "body": b"", "more_body": False},
    ])

    assert app.received == [{"type": "http.request", "body": b"abcdef", "more_body": False}]


@pytest.mark.anyio
async def test_streamed_body_over_limit_is_rejected():
    app = RecordingApp()
    middleware = PayloadLimitMiddleware(app, max_bytes=10)

    sent = await run(middleware, make_scope(), [
        {"type": "http.request", "body": b"x" * 6, "more_body": True},
        {"type": "http.request", "body": b"x" * 6, "more_body": True},
    ])

    assert app.calls == 0
    assert sent[0]["status"] == 413
    assert json.loads(sent[1]["body"]) == {"status": "fail", "message": "File too large. Maximum file size is 1MB."}


@pytest.mark.anyio
async def test_content_length_over_limit_is_rejected_before_reading():
    app = RecordingApp()
    middleware = PayloadLimitMiddleware(app, max_bytes=10)

    sent = await run(middleware, make_scope(headers=[(b"content-length", b"11")]), [])

    assert app.calls == 0
    assert sent[0]["status"] == 413


@pytest.mark.anyio
async def test_other_paths_are_not_buffered_or_capped():
    app = RecordingApp()
    middleware = PayloadLimitMiddleware(app, max_bytes=10, paths=["/predict"])
    first_chunk = {"type": "http.request", "body": b"x" * 50, "more_body": True}

    sent = await run(middleware, make_scope(path="/predict/histories", method="GET"), [first_chunk])

    assert app.received == [first_chunk]
    assert sent[0]["status"] == 200
