"""
Request orchestration for coaching content generation.

One call to generate() walks the pipeline:
cache -> connectivity check -> remote completion (with retries) -> offline fallback
and hands the raw text to the OutputFormatter. Configuration-class faults
(authentication, invalid URL, unencodable request) are raised to the caller;
every other failure is answered with offline content.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

import httpx

from .config import GenerationConfig
from .connectivity import ConnectivityMonitor, PathStatus, create_connectivity_monitor
from .errors import (
    AuthenticationError,
    GenerationError,
    HttpError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    NoInternetConnectionError,
    RateLimitError,
    SerializationError,
    ServerError,
)
from .formatter import OutputFormatter, StyledDocument
from .offline_generator import OfflineFallbackGenerator
from .prompts import extract_event, build_system_prompt
from .response_cache import ResponseCache
from .structured_logging import log_generation_event, new_request_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    """A single generation attempt. The prompt is also the cache key."""
    prompt: str
    retry_count: int = 0

    def next_attempt(self) -> "GenerationRequest":
        return replace(self, retry_count=self.retry_count + 1)


class ProgressTracker:
    """
    Heuristic busy indicator in [0, 1].

    The value ramps up in fixed steps while any call is in flight and is
    forced to 1 once the last in-flight call ends. It says nothing about
    real completion.
    """

    def __init__(self, interval: float = 0.1, step: float = 0.05, ceiling: float = 0.95):
        self.interval = interval
        self.step = step
        self.ceiling = ceiling
        self.value = 0.0
        self._listeners: List[Callable[[float], None]] = []
        self._task: Optional[asyncio.Task] = None
        self._active = 0

    def add_listener(self, callback: Callable[[float], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[float], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _set(self, value: float) -> None:
        if value == self.value:
            return
        self.value = value
        for callback in list(self._listeners):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Progress listener failed: {e}")

    def reset(self) -> None:
        self._set(0.0)

    def complete(self) -> None:
        self._set(1.0)

    @property
    def in_flight(self) -> int:
        return self._active

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Register an in-flight call. The first one resets to 0 and starts the ramp."""
        self._active += 1
        if self._active > 1:
            return
        self.reset()
        self._task = asyncio.create_task(self._ramp())

    async def _ramp(self) -> None:
        while self.value < self.ceiling:
            await asyncio.sleep(self.interval)
            self._set(min(self.ceiling, self.value + self.step))

    async def finish(self) -> None:
        """Release an in-flight call; the last one stops the ramp and forces 1"""
        if self._active > 0:
            self._active -= 1
        if self._active > 0:
            return

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.complete()


class RequestOrchestrator:
    """
    Executes one generation per caller invocation.

    All collaborators are injected; create_request_orchestrator() wires the
    defaults from a GenerationConfig.
    """

    def __init__(self,
                 config: GenerationConfig,
                 monitor: ConnectivityMonitor,
                 cache: ResponseCache,
                 offline_generator: OfflineFallbackGenerator,
                 formatter: Optional[OutputFormatter] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.monitor = monitor
        self.cache = cache
        self.offline_generator = offline_generator
        self.formatter = formatter or OutputFormatter()

        self.client = http_client
        self._owns_client = http_client is None

        self.progress = ProgressTracker(
            interval=config.progress_interval,
            step=config.progress_step,
            ceiling=config.progress_ceiling
        )

        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'total_requests': 0,
            'cache_hits': 0,
            'remote_calls': 0,
            'remote_successes': 0,
            'retries': 0,
            'offline_fallbacks': 0,
            'surfaced_errors': 0,
        }

    # Lifecycle

    def start(self) -> None:
        self.monitor.start()

    async def close(self) -> None:
        """Close the owned HTTP client and stop connectivity monitoring"""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None
        self.monitor.stop()
        logger.info("Request orchestrator closed")

    async def __aenter__(self) -> "RequestOrchestrator":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.request_timeout))
            self._owns_client = True
        return self.client

    # Public operations

    async def generate(self, prompt: str) -> StyledDocument:
        """Generate a program and return it as a StyledDocument"""
        text = await self.generate_text(prompt)
        return self.formatter.format(text)

    async def generate_text(self, prompt: str) -> str:
        """Generate a program and return the raw text (live or offline)"""
        new_request_id()
        start_time = time.time()
        self.stats['total_requests'] += 1
        log_generation_event(logger, 'request_start', "Generation requested", prompt_length=len(prompt))

        cached = self.cache.get(prompt)
        if cached is not None:
            self.stats['cache_hits'] += 1
            if not self.progress.in_flight:
                self.progress.complete()
            log_generation_event(logger, 'cache_hit', "Returning cached response")
            return cached

        self.progress.start()
        try:
            try:
                text = await self._generate_online(GenerationRequest(prompt))
            except GenerationError as e:
                if e.surfaced:
                    self.stats['surfaced_errors'] += 1
                    log_generation_event(
                        logger, 'request_failed', f"Generation failed: {e}",
                        level=logging.ERROR,
                        category=e.category.value,
                        duration_ms=(time.time() - start_time) * 1000
                    )
                    raise

                self.stats['offline_fallbacks'] += 1
                log_generation_event(
                    logger, 'offline_fallback', f"Using offline program: {e}",
                    level=logging.WARNING,
                    category=e.category.value
                )
                text = self.offline_generator.generate_offline(prompt)

            self.cache.put(prompt, text)
            log_generation_event(
                logger, 'request_success', "Generation completed",
                duration_ms=(time.time() - start_time) * 1000,
                response_length=len(text)
            )
            return text
        finally:
            await self.progress.finish()

    # Remote path

    async def _generate_online(self, request: GenerationRequest) -> str:
        await self._check_connectivity()

        if not self.config.api_key:
            raise AuthenticationError("No API key configured")

        url = self._validated_url()
        body = self._encode_payload(self.build_payload(request.prompt))
        return await self._send(request, url, body)

    async def _check_connectivity(self) -> None:
        """Raise NoInternetConnectionError when the network is unusable"""
        state = self.monitor.current_state()
        if state.overall_status == PathStatus.SATISFIED:
            return

        loop = asyncio.get_running_loop()
        reachable = await loop.run_in_executor(None, self.monitor.probe_reachability)
        log_generation_event(
            logger, 'connectivity_probe',
            f"Monitor reports {state.overall_status.value}, probe reachable={reachable}",
            level=logging.INFO if reachable else logging.WARNING,
            status=state.overall_status.value,
            reachable=reachable
        )
        if not reachable:
            raise NoInternetConnectionError()

    def _validated_url(self) -> str:
        raw = self.config.completions_url
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as e:
            raise InvalidURLError(raw) from e

        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(raw)
        return str(url)

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        event = extract_event(prompt)
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(event)},
                {"role": "user", "content": prompt}
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "presence_penalty": self.config.presence_penalty,
            "frequency_penalty": self.config.frequency_penalty,
        }

    @staticmethod
    def _encode_payload(payload: Dict[str, Any]) -> bytes:
        try:
            return json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(e) from e

    async def _send(self, request: GenerationRequest, url: str, body: bytes) -> str:
        """POST the request, retrying 429, 5xx and transport failures"""
        client = self._ensure_client()
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        while True:
            self.stats['remote_calls'] += 1
            if self.config.log_requests:
                logger.debug(f"POST {url} (attempt {request.retry_count + 1}, {len(body)} bytes)")

            try:
                response = await asyncio.wait_for(
                    client.post(url, content=body, headers=headers),
                    timeout=self.config.request_timeout
                )
            except httpx.DecodingError as e:
                raise InvalidResponseError("Undecodable response body", original_exception=e) from e
            except (httpx.RequestError, asyncio.TimeoutError) as e:
                if request.retry_count < self.config.max_retries:
                    request = await self._schedule_retry(request, f"transport failure ({type(e).__name__})")
                    continue
                raise NetworkError(str(e) or type(e).__name__, original_exception=e) from e

            status = response.status_code
            if 200 <= status < 300:
                return self._extract_content(response)

            if status == 401:
                raise AuthenticationError()

            if status == 429 or 500 <= status < 600:
                if request.retry_count < self.config.max_retries:
                    request = await self._schedule_retry(request, f"HTTP {status}")
                    continue
                attempts = request.retry_count + 1
                if status == 429:
                    raise RateLimitError(attempts)
                raise ServerError(status, attempts)

            raise HttpError(status)

    async def _schedule_retry(self, request: GenerationRequest, reason: str) -> GenerationRequest:
        next_request = request.next_attempt()
        self.stats['retries'] += 1
        log_generation_event(
            logger, 'retry_scheduled',
            f"Retrying after {reason} ({next_request.retry_count}/{self.config.max_retries})",
            level=logging.WARNING,
            attempt=next_request.retry_count,
            delay=self.config.retry_delay
        )
        await asyncio.sleep(self.config.retry_delay)
        return next_request

    def _extract_content(self, response: httpx.Response) -> str:
        try:
            envelope = response.json()
            content = envelope["choices"][0]["message"]["content"]
        except (httpx.DecodingError, ValueError, KeyError, IndexError, TypeError) as e:
            raise InvalidResponseError("Malformed response envelope", original_exception=e) from e

        if not isinstance(content, str) or not content.strip():
            raise InvalidResponseError("Response contained no content")

        self.stats['remote_successes'] += 1
        if self.config.log_responses:
            logger.debug(f"Response content ({len(content)} chars): {content[:200]}")
        return content

    # Stats

    def get_stats(self) -> Dict[str, Any]:
        return {
            'performance': self.stats.copy(),
            'cache': self.cache.get_stats(),
            'connectivity': self.monitor.get_status(),
            'progress': self.progress.value,
        }

    def reset_stats(self) -> None:
        self.stats = self._empty_stats()


def create_request_orchestrator(config: GenerationConfig,
                                http_client: Optional[httpx.AsyncClient] = None) -> RequestOrchestrator:
    """Create a RequestOrchestrator with default collaborators"""
    return RequestOrchestrator(
        config=config,
        monitor=create_connectivity_monitor(config),
        cache=ResponseCache(max_entries=config.cache_max_entries, max_age=config.cache_max_age),
        offline_generator=OfflineFallbackGenerator(),
        formatter=OutputFormatter(),
        http_client=http_client
    )
