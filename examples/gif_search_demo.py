"""
GIF search resilience demo - retry, circuit breaker and batch processing.

Shows how a GIF client would combine the pieces:

1. A search call wrapped with retry and guarded by the shared breaker
2. A dependency that stays down until the breaker opens
3. A batch of per-GIF processing jobs with bounded concurrency
4. User-facing messages for the resulting errors

Run with: python examples/gif_search_demo.py
"""

import asyncio
import random
import uuid

from gifguard.domain.exceptions import ClassifiedError, ErrorKind, classify_error
from gifguard.infrastructure.config.config_models import GifGuardConfig
from gifguard.infrastructure.di.container import DIContainer
from gifguard.infrastructure.logging import logging_context
from gifguard.infrastructure.presentation.error_presenter import ErrorPresenter
from gifguard.infrastructure.resilience import (
    CircuitBreakerError,
    any_of,
    create_retry_wrapper,
    network_errors,
    processing_errors,
    retry_batch,
    retryable_errors,
)


class FakeGifClient:
    """Stand-in for a GIF provider whose search endpoint drops requests."""

    def __init__(self, failure_rate: float, seed: int = 7):
        self.failure_rate = failure_rate
        self.calls = 0
        self._random = random.Random(seed)

    async def search(self, query: str, limit: int = 5):
        self.calls += 1
        await asyncio.sleep(0.01)
        if self._random.random() < self.failure_rate:
            raise ConnectionError(f"Network error while searching '{query}'")
        return [f"{query}-{i}.gif" for i in range(limit)]


async def process_gif(name: str, attempts: dict):
    attempts[name] = attempts.get(name, 0) + 1
    await asyncio.sleep(0.01)
    if name.endswith("-1.gif") and attempts[name] < 2:
        raise ClassifiedError(f"ffmpeg crashed on {name}", ErrorKind.PROCESSING)
    if name.endswith("-3.gif"):
        raise ClassifiedError(f"{name} is not a GIF", ErrorKind.FORMAT)
    return f"{name} (optimized)"


async def main():
    container = DIContainer.from_config(GifGuardConfig(
        retry={"max_attempts": 3, "base_delay": 0.05, "max_delay": 0.2},
        logging={"level": "INFO", "file": "./demo_logs/gifguard_demo.log"},
    ))
    request_id = f"req-{uuid.uuid4().hex[:8]}"

    with logging_context(request_id=request_id):
        # 1. Flaky search: retries absorb most failures
        client = FakeGifClient(failure_rate=0.4)
        search = create_retry_wrapper(
            client.search,
            container.retry_options_for(any_of(network_errors, retryable_errors)),
        )
        breaker = container.breaker("gif_search")

        gifs = await breaker.execute(lambda: search("cats", limit=5))
        print(f"Found {len(gifs)} GIFs after {client.calls} request(s)")

        # 2. Provider down: the breaker opens and sheds load
        down = FakeGifClient(failure_rate=1.0)
        search_down = create_retry_wrapper(
            down.search, container.retry_options_for(network_errors, max_attempts=2)
        )
        for _ in range(5):
            try:
                await breaker.execute(lambda: search_down("dogs"))
            except CircuitBreakerError as e:
                print(ErrorPresenter.present(e))
                break
            except ConnectionError as e:
                print(f"Search failed: {e} (breaker {breaker.state.value})")
        print(f"Provider was called {down.calls} time(s)")

        # 3. Process every GIF, two at a time
        attempts = {}
        results = await retry_batch(
            [lambda name=name: process_gif(name, attempts) for name in gifs],
            container.retry_options_for(processing_errors),
            concurrency=2,
        )
        for name, result in zip(gifs, results):
            if result.success:
                print(f"{name}: {result.result} in {result.attempts} attempt(s)")
            else:
                print(f"{name}: failed after {result.attempts} attempt(s)")
                # 4. What the user sees
                print(ErrorPresenter.present(classify_error(result.error)))

    container.breakers.reset_all()


if __name__ == "__main__":
    asyncio.run(main())
