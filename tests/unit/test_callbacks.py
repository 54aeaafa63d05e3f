"""Tests for request log sinks."""

import json

import pytest

from promptgate.callbacks import Callback, CallbackManager, LoggingCallback, RequestLog, RequestStatus
from promptgate.exceptions import RateLimitError
from promptgate.types import CanonicalResponse, ResolvedRequest, build_usage


@pytest.fixture
def request_log():
    return RequestLog.start(
        ResolvedRequest(provider="openai", model="gpt-4.1-mini", prompt="Hello " * 10, preset="ask")
    )


class RecordingCallback(Callback):
    def __init__(self):
        self.ended = []
        self.errors = []

    async def on_request_end(self, log, response=None):
        self.ended.append((log, response))

    async def on_request_error(self, log, error):
        self.errors.append((log, error))


class ExplodingCallback(Callback):
    async def on_request_end(self, log, response=None):
        raise RuntimeError("sink broken")

    async def on_request_error(self, log, error):
        raise RuntimeError("sink broken")


class TestRequestLog:
    """Test request log entries."""

    def test_start(self, request_log):
        assert request_log.status == RequestStatus.STARTED
        assert request_log.provider == "openai"
        assert request_log.preset == "ask"
        assert len(request_log.request_id) == 32

    def test_complete(self, request_log):
        response = CanonicalResponse(content="Hi", usage=build_usage(10, 5, cached_tokens=2), cost=0.001, response_time_ms=40)
        request_log.complete(response)
        assert request_log.status == RequestStatus.SUCCESS
        assert request_log.total_tokens == 15
        assert request_log.cached_tokens == 2
        assert request_log.latency_ms == 40

    def test_complete_cached(self, request_log):
        request_log.complete(CanonicalResponse(content="Hi", cached=True))
        assert request_log.status == RequestStatus.CACHED
        assert request_log.cache_hit

    def test_complete_with_error_response(self, request_log):
        request_log.complete(CanonicalResponse.error_response("no candidates"))
        assert request_log.status == RequestStatus.ERROR
        assert request_log.error_message == "no candidates"

    def test_fail(self, request_log):
        request_log.fail(RateLimitError("slow down"), 12)
        assert request_log.status == RequestStatus.ERROR
        assert request_log.error_type == "rate_limit_error"
        assert request_log.latency_ms == 12


class TestCallbackManager:
    """Test callback fan-out."""

    async def test_fans_out(self, request_log):
        first, second = RecordingCallback(), RecordingCallback()
        manager = CallbackManager([first, second])
        response = CanonicalResponse(content="x")
        await manager.on_request_end(request_log, response)
        assert first.ended == [(request_log, response)]
        assert second.ended == [(request_log, response)]

    async def test_failing_callback_is_isolated(self, request_log):
        recorder = RecordingCallback()
        manager = CallbackManager([ExplodingCallback(), recorder])
        error = ValueError("bad")
        await manager.on_request_error(request_log, error)
        assert recorder.errors == [(request_log, error)]

    async def test_start_fans_out(self, request_log):
        class StartRecorder(RecordingCallback):
            def __init__(self):
                super().__init__()
                self.started = []

            async def on_request_start(self, log):
                self.started.append(log)

        recorder = StartRecorder()
        await CallbackManager([RecordingCallback(), recorder]).on_request_start(request_log)
        assert recorder.started == [request_log]

    def test_close_reaches_every_sink(self, tmp_path):
        class BrokenClose(RecordingCallback):
            def close(self):
                raise OSError("disk gone")

        sink = LoggingCallback(file_path=tmp_path / "requests.jsonl", console=False)
        CallbackManager([BrokenClose(), sink]).close()
        assert sink._stream is None

    def test_register_unregister(self):
        manager = CallbackManager()
        callback = RecordingCallback()
        manager.register(callback)
        assert len(manager) == 1
        manager.unregister(callback)
        assert len(manager) == 0


class TestLoggingCallback:
    """Test the structured logging sink."""

    async def test_writes_json_lines(self, tmp_path, request_log):
        path = tmp_path / "logs" / "requests.jsonl"
        callback = LoggingCallback(file_path=path, console=False, max_prompt_length=10)
        request_log.complete(CanonicalResponse(content="Hi", usage=build_usage(3, 2), cost=0.5))
        await callback.on_request_end(request_log)
        callback.close()

        record = json.loads(path.read_text().strip())
        assert record["event"] == "request_end"
        assert record["status"] == "success"
        assert record["total_tokens"] == 5
        assert record["preset"] == "ask"
        assert record["prompt"].endswith("... [truncated]")

    async def test_error_record(self, tmp_path, request_log):
        path = tmp_path / "requests.jsonl"
        callback = LoggingCallback(file_path=path, console=False)
        error = RateLimitError("slow down")
        request_log.fail(error, 5)
        await callback.on_request_error(request_log, error)
        callback.close()

        record = json.loads(path.read_text().strip())
        assert record["event"] == "request_error"
        assert record["error_type"] == "rate_limit_error"

    async def test_console_only(self, request_log):
        callback = LoggingCallback()
        request_log.complete(CanonicalResponse(content="Hi"))
        await callback.on_request_end(request_log)
        assert callback.file_path is None
