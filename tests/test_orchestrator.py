#!/usr/bin/env python3
"""
Test suite for RequestOrchestrator

Tests cover:
- Cache hits short-circuit the pipeline
- Connectivity pre-flight and reachability probe
- Status classification (2xx, 401, 429, 5xx, other)
- Shared retry budget for status and transport failures
- Surfaced configuration faults vs. offline fallback
- Progress indicator lifecycle
- Statistics and lifecycle management
"""

import asyncio
import json
import math
import os
import sys
from unittest.mock import Mock

import httpx
import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from coachgen.config import GenerationConfig
from coachgen.connectivity import ConnectivityMonitor, ConnectivityState, PathStatus
from coachgen.errors import AuthenticationError, InvalidURLError, SerializationError
from coachgen.formatter import OutputFormatter, SegmentRole, StyledDocument
from coachgen.offline_generator import OFFLINE_MARKER, OfflineFallbackGenerator
from coachgen.orchestrator import (
    GenerationRequest, ProgressTracker, RequestOrchestrator, create_request_orchestrator
)
from coachgen.response_cache import ResponseCache

LIVE_PROGRAM = """WEEKLY PROGRAM

MONDAY
Focus: Acceleration
Warm-Up (15 minutes)
• A-skips"""

E2E_PROMPT = "Generate a 800m program for U14 athletes, General period, Short Term"


def make_config(**overrides) -> GenerationConfig:
    values = dict(
        api_key="sk-test",
        base_url="https://api.test/v1",
        retry_delay=0,
        progress_interval=0.001,
        request_timeout=5.0,
    )
    values.update(overrides)
    return GenerationConfig(**values)


def make_monitor(status=PathStatus.SATISFIED, reachable=True) -> Mock:
    monitor = Mock(spec=ConnectivityMonitor)
    monitor.current_state.return_value = ConnectivityState(overall_status=status)
    monitor.probe_reachability.return_value = reachable
    monitor.get_status.return_value = {'overall_status': status.value}
    return monitor


def completion(content) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class ScriptedAPI:
    """MockTransport handler replaying a script of outcomes.

    Each item is a status code, a content string (200 completion), an
    httpx.Response or an exception. The last item repeats.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, int):
            return httpx.Response(item, json={"error": {"message": "scripted"}})
        if isinstance(item, str):
            return completion(item)
        return item

    @property
    def calls(self) -> int:
        return len(self.requests)


def make_orchestrator(api, config=None, monitor=None, cache=None) -> RequestOrchestrator:
    config = config or make_config()
    return RequestOrchestrator(
        config=config,
        monitor=monitor or make_monitor(),
        cache=cache or ResponseCache(),
        offline_generator=OfflineFallbackGenerator(),
        formatter=OutputFormatter(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(api))
    )


class TestGenerationRequest:
    """Test GenerationRequest value semantics"""

    def test_next_attempt(self):
        request = GenerationRequest("prompt")
        retry = request.next_attempt()

        assert request.retry_count == 0
        assert retry == GenerationRequest("prompt", 1)


class TestProgressTracker:
    """Test the heuristic busy indicator"""

    @pytest.mark.asyncio
    async def test_ramp_and_finish(self):
        tracker = ProgressTracker(interval=0.001, step=0.1, ceiling=0.5)
        values = []
        tracker.add_listener(values.append)

        tracker.start()
        await asyncio.sleep(0.05)
        assert tracker.value <= 0.5

        await tracker.finish()

        assert tracker.value == 1.0
        assert not tracker.is_running
        assert values == sorted(values)
        assert values[-1] == 1.0

    @pytest.mark.asyncio
    async def test_finish_without_start(self):
        tracker = ProgressTracker()
        await tracker.finish()
        assert tracker.value == 1.0

    @pytest.mark.asyncio
    async def test_start_resets_to_zero(self):
        tracker = ProgressTracker(interval=10)
        tracker.complete()

        tracker.start()
        assert tracker.value == 0.0
        await tracker.finish()

    @pytest.mark.asyncio
    async def test_overlapping_calls_keep_ramping(self):
        tracker = ProgressTracker(interval=0.001, step=0.01, ceiling=0.5)

        tracker.start()
        tracker.start()
        assert tracker.in_flight == 2

        await tracker.finish()
        assert tracker.in_flight == 1
        assert tracker.is_running
        assert tracker.value < 1.0

        await tracker.finish()
        assert tracker.in_flight == 0
        assert not tracker.is_running
        assert tracker.value == 1.0


class TestRequestOrchestrator:
    """Test the generation pipeline"""

    @pytest.mark.asyncio
    async def test_successful_generation(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        document = await orchestrator.generate("Generate a 100m program")

        assert isinstance(document, StyledDocument)
        assert document[0].text == "WEEKLY PROGRAM"
        assert document[1].role == SegmentRole.DAY_HEADER
        assert api.calls == 1
        assert orchestrator.stats['remote_successes'] == 1
        await orchestrator.close()

    @pytest.mark.asyncio
    async def test_request_payload(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api, config=make_config(temperature=0.3, max_tokens=800))

        await orchestrator.generate_text("Generate a 400m Hurdles program")

        request = api.requests[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert str(request.url) == "https://api.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert body["model"] == "gpt-3.5-turbo"
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 800
        assert body["presence_penalty"] == 0.0
        assert body["frequency_penalty"] == 0.0
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert "specializing in 400m Hurdles training" in body["messages"][0]["content"]
        assert body["messages"][1]["content"] == "Generate a 400m Hurdles program"

    @pytest.mark.asyncio
    async def test_second_call_is_cache_hit(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        first = await orchestrator.generate("Generate a 200m program")
        second = await orchestrator.generate("Generate a 200m program")

        assert api.calls == 1
        assert first == second
        assert orchestrator.stats['cache_hits'] == 1
        assert orchestrator.progress.value == 1.0

    @pytest.mark.asyncio
    async def test_cache_hit_skips_connectivity(self):
        monitor = make_monitor()
        cache = ResponseCache()
        cache.put("cached prompt", LIVE_PROGRAM)
        orchestrator = make_orchestrator(ScriptedAPI(LIVE_PROGRAM), monitor=monitor, cache=cache)

        text = await orchestrator.generate_text("cached prompt")

        assert text == LIVE_PROGRAM
        monitor.current_state.assert_not_called()

    @pytest.mark.asyncio
    async def test_offline_when_unsatisfied_and_probe_fails(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        monitor = make_monitor(PathStatus.UNSATISFIED, reachable=False)
        orchestrator = make_orchestrator(api, monitor=monitor)

        document = await orchestrator.generate("Generate a 100m program")

        assert api.calls == 0
        assert document[0].text == OFFLINE_MARKER
        monitor.probe_reachability.assert_called_once()
        assert orchestrator.stats['offline_fallbacks'] == 1

    @pytest.mark.asyncio
    async def test_requires_connection_also_probes(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        monitor = make_monitor(PathStatus.REQUIRES_CONNECTION, reachable=True)
        orchestrator = make_orchestrator(api, monitor=monitor)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert text == LIVE_PROGRAM
        assert api.calls == 1
        monitor.probe_reachability.assert_called_once()

    @pytest.mark.asyncio
    async def test_satisfied_skips_probe(self):
        monitor = make_monitor(PathStatus.SATISFIED)
        orchestrator = make_orchestrator(ScriptedAPI(LIVE_PROGRAM), monitor=monitor)

        await orchestrator.generate_text("Generate a 100m program")

        monitor.probe_reachability.assert_not_called()

    @pytest.mark.asyncio
    async def test_offline_result_is_cached(self):
        monitor = make_monitor(PathStatus.UNSATISFIED, reachable=False)
        orchestrator = make_orchestrator(ScriptedAPI(LIVE_PROGRAM), monitor=monitor)

        first = await orchestrator.generate_text(E2E_PROMPT)
        second = await orchestrator.generate_text(E2E_PROMPT)

        assert first == second
        assert monitor.probe_reachability.call_count == 1
        assert orchestrator.cache.get(E2E_PROMPT) == first

    @pytest.mark.asyncio
    async def test_end_to_end_offline_middle_distance(self):
        monitor = make_monitor(PathStatus.UNSATISFIED, reachable=False)
        orchestrator = make_orchestrator(ScriptedAPI(LIVE_PROGRAM), monitor=monitor)

        document = await orchestrator.generate(E2E_PROMPT)
        text = document.plain_text()

        assert text.startswith("OFFLINE GENERATED PROGRAM")
        assert "WEEKLY TRAINING PROGRAM FOR MIDDLE DISTANCE" in text
        assert "4 x 150m" in text
        assert "6 x 200m" not in text
        assert len(document.with_role(SegmentRole.DAY_HEADER)) == 7

    @pytest.mark.asyncio
    async def test_rate_limit_exhausts_retries_then_offline(self):
        api = ScriptedAPI(429, 429, 429, 429)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 800m program")

        assert api.calls == 4
        assert text.startswith(OFFLINE_MARKER)
        assert orchestrator.stats['retries'] == 3
        assert orchestrator.stats['remote_calls'] == 4
        assert orchestrator.stats['offline_fallbacks'] == 1

    @pytest.mark.asyncio
    async def test_server_error_then_success(self):
        api = ScriptedAPI(500, 503, LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert text == LIVE_PROGRAM
        assert api.calls == 3
        assert orchestrator.stats['retries'] == 2

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self):
        api = ScriptedAPI(502)
        orchestrator = make_orchestrator(api, config=make_config(max_retries=1))

        text = await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 2
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_retry_budget_shared_between_status_and_transport(self):
        api = ScriptedAPI(429, httpx.ConnectError("reset"), 500, httpx.ReadTimeout("slow"), LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 4
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_retry_waits_fixed_delay(self):
        api = ScriptedAPI(429, LIVE_PROGRAM)
        orchestrator = make_orchestrator(api, config=make_config(retry_delay=0.05))

        loop = asyncio.get_running_loop()
        started = loop.time()
        await orchestrator.generate_text("Generate a 100m program")

        assert loop.time() - started >= 0.05
        assert api.calls == 2

    @pytest.mark.asyncio
    async def test_authentication_error_surfaced(self):
        api = ScriptedAPI(401)
        orchestrator = make_orchestrator(api)

        with pytest.raises(AuthenticationError) as exc_info:
            await orchestrator.generate("Generate a 100m program")

        assert exc_info.value.surfaced
        assert api.calls == 1
        assert "Generate a 100m program" not in orchestrator.cache
        assert orchestrator.stats['surfaced_errors'] == 1
        assert orchestrator.stats['offline_fallbacks'] == 0
        assert orchestrator.progress.value == 1.0
        assert not orchestrator.progress.is_running

    @pytest.mark.asyncio
    async def test_missing_api_key_surfaced_without_request(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api, config=make_config(api_key=None))

        with pytest.raises(AuthenticationError):
            await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 0

    @pytest.mark.asyncio
    async def test_unencodable_request_surfaced(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api, config=make_config(temperature=math.nan))

        with pytest.raises(SerializationError):
            await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("base_url", ["not a url", "ftp://api.test/v1", "https://"])
    async def test_invalid_url_surfaced(self, base_url):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api, config=make_config(base_url=base_url))

        with pytest.raises(InvalidURLError):
            await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 0

    @pytest.mark.asyncio
    async def test_unclassified_status_falls_back_without_retry(self):
        api = ScriptedAPI(404)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 1
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_transport_failures_exhaust_retries(self):
        api = ScriptedAPI(httpx.ConnectError("connection refused"))
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 5000m program")

        assert api.calls == 4
        assert text.startswith(OFFLINE_MARKER)
        assert "LONG DISTANCE" in text

    @pytest.mark.asyncio
    async def test_transport_failure_then_success(self):
        api = ScriptedAPI(httpx.ConnectError("reset"), LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert text == LIVE_PROGRAM
        assert api.calls == 2

    @pytest.mark.asyncio
    async def test_overall_timeout_counts_as_transport_failure(self):
        calls = []

        async def slow_api(request):
            calls.append(request)
            await asyncio.sleep(1.0)
            return completion(LIVE_PROGRAM)

        orchestrator = RequestOrchestrator(
            config=make_config(request_timeout=0.05, max_retries=1),
            monitor=make_monitor(),
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(slow_api))
        )

        text = await orchestrator.generate_text("Generate a 100m program")

        assert len(calls) == 2
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_undecodable_body_falls_back_without_retry(self):
        api = ScriptedAPI(httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"))
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 1
        assert orchestrator.stats['retries'] == 0
        assert orchestrator.stats['offline_fallbacks'] == 1
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_redirect_loop_counts_as_transport_failure(self):
        calls = []

        def redirecting_api(request):
            calls.append(request)
            return httpx.Response(302, headers={"Location": "https://api.test/v1/chat/completions"})

        orchestrator = RequestOrchestrator(
            config=make_config(max_retries=1),
            monitor=make_monitor(),
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(redirecting_api), follow_redirects=True)
        )

        text = await orchestrator.generate_text("Generate a 100m program")

        assert orchestrator.stats['retries'] == 1
        assert orchestrator.stats['remote_calls'] == 2
        assert len(calls) > 2
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
        httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, content=b"not json"),
    ])
    async def test_malformed_envelope_falls_back(self, response):
        api = ScriptedAPI(response)
        orchestrator = make_orchestrator(api)

        text = await orchestrator.generate_text("Generate a 100m program")

        assert api.calls == 1
        assert text.startswith(OFFLINE_MARKER)

    @pytest.mark.asyncio
    async def test_progress_reset_and_completed(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)
        values = []
        orchestrator.progress.add_listener(values.append)

        await orchestrator.generate_text("first prompt")
        await orchestrator.generate_text("second prompt")

        assert values.count(1.0) == 2
        assert 0.0 in values
        assert values[values.index(1.0) + 1] == 0.0
        assert orchestrator.progress.value == 1.0

    @pytest.mark.asyncio
    async def test_progress_ramps_while_in_flight(self):
        async def slow_api(request):
            await asyncio.sleep(0.05)
            return completion(LIVE_PROGRAM)

        orchestrator = RequestOrchestrator(
            config=make_config(progress_interval=0.001, progress_step=0.05),
            monitor=make_monitor(),
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(slow_api))
        )
        values = []
        orchestrator.progress.add_listener(values.append)

        await orchestrator.generate_text("Generate a 100m program")

        ramp = values[:-1]
        assert ramp
        assert all(0.0 < value <= 0.95 for value in ramp)
        assert ramp == sorted(ramp)
        assert values[-1] == 1.0

    @pytest.mark.asyncio
    async def test_progress_tracks_overlapping_calls(self):
        release_slow = asyncio.Event()

        async def api(request):
            prompt = json.loads(request.content)["messages"][1]["content"]
            if prompt == "slow prompt":
                await release_slow.wait()
            return completion(LIVE_PROGRAM)

        orchestrator = RequestOrchestrator(
            config=make_config(progress_interval=0.01, progress_step=0.01),
            monitor=make_monitor(),
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(api))
        )

        slow = asyncio.create_task(orchestrator.generate_text("slow prompt"))
        await asyncio.sleep(0.01)
        await orchestrator.generate_text("fast prompt")

        assert not slow.done()
        assert orchestrator.progress.in_flight == 1
        assert orchestrator.progress.is_running
        assert orchestrator.progress.value < 1.0

        release_slow.set()
        assert await slow == LIVE_PROGRAM
        assert orchestrator.progress.in_flight == 0
        assert not orchestrator.progress.is_running
        assert orchestrator.progress.value == 1.0
        await orchestrator.close()

    @pytest.mark.asyncio
    async def test_stats_and_reset(self):
        api = ScriptedAPI(LIVE_PROGRAM)
        orchestrator = make_orchestrator(api)

        await orchestrator.generate_text("prompt")
        await orchestrator.generate_text("prompt")

        stats = orchestrator.get_stats()
        assert stats['performance']['total_requests'] == 2
        assert stats['performance']['cache_hits'] == 1
        assert stats['cache']['size'] == 1
        assert stats['progress'] == 1.0

        orchestrator.reset_stats()
        assert orchestrator.stats['total_requests'] == 0

    @pytest.mark.asyncio
    async def test_close_keeps_injected_client_open(self):
        monitor = make_monitor()
        client = httpx.AsyncClient(transport=httpx.MockTransport(ScriptedAPI(LIVE_PROGRAM)))
        orchestrator = RequestOrchestrator(
            config=make_config(),
            monitor=monitor,
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator(),
            http_client=client
        )

        async with orchestrator:
            monitor.start.assert_called_once()

        monitor.stop.assert_called_once()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_close_closes_owned_client(self):
        orchestrator = RequestOrchestrator(
            config=make_config(),
            monitor=make_monitor(),
            cache=ResponseCache(),
            offline_generator=OfflineFallbackGenerator()
        )
        client = orchestrator._ensure_client()

        await orchestrator.close()

        assert client.is_closed
        assert orchestrator.client is None


def test_create_request_orchestrator():
    config = make_config(cache_max_entries=5, cache_max_age=60, probe_timeout=1.0)
    orchestrator = create_request_orchestrator(config)

    assert orchestrator.cache.max_entries == 5
    assert orchestrator.cache.max_age == 60
    assert orchestrator.monitor.probe_timeout == 1.0
    assert orchestrator.client is None
    assert orchestrator.progress.ceiling == config.progress_ceiling
