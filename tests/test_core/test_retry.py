"""
Tests for retry utilities.
"""

import pytest

from panelsmith.core.exceptions import CapabilityUnavailableError, SchemaViolationError
from panelsmith.core.retry import RetryConfig, async_retry, calculate_delay, retry_async_call


class TestCalculateDelay:

    def test_fixed_schedule(self):
        config = RetryConfig.from_delays([10, 15, 20])

        assert config.max_retries == 3
        assert [calculate_delay(i, config) for i in range(3)] == [10.0, 15.0, 20.0]

    def test_exponential_without_jitter(self):
        config = RetryConfig(base_delay=1.0, jitter=False, max_delay=5.0)

        assert calculate_delay(0, config) == 1.0
        assert calculate_delay(2, config) == 4.0
        assert calculate_delay(5, config) == 5.0


class TestRetryAsyncCall:

    @pytest.mark.asyncio
    async def test_retries_unavailable_then_succeeds(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise CapabilityUnavailableError("image_synthesis", "busy")
            return "ok"

        retried = []
        result = await retry_async_call(
            flaky,
            config=RetryConfig.from_delays([0, 0]),
            on_retry=lambda e, attempt: retried.append(attempt),
        )

        assert result == "ok"
        assert len(calls) == 3
        assert retried == [0, 1]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        async def down():
            raise CapabilityUnavailableError("image_synthesis", "down")

        with pytest.raises(CapabilityUnavailableError):
            await retry_async_call(down, config=RetryConfig.from_delays([0]))

    @pytest.mark.asyncio
    async def test_schema_violation_not_retried(self):
        calls = []

        @async_retry(RetryConfig.from_delays([0, 0]))
        async def invalid():
            calls.append(1)
            raise SchemaViolationError("structured_generation", "bad")

        with pytest.raises(SchemaViolationError):
            await invalid()
        assert len(calls) == 1


class TestCapabilityPolicies:

    def test_structured_generation_policy(self):
        from panelsmith.core.config import StructuredGenerationConfig

        config = RetryConfig.for_structured_generation(
            StructuredGenerationConfig(max_retries=4, retry_base_delay=0.5)
        )

        assert config.max_retries == 4
        assert config.base_delay == 0.5
        assert config.fixed_delays is None

    def test_image_synthesis_policy(self):
        from panelsmith.core.config import ImageSynthesisConfig

        config = RetryConfig.for_image_synthesis(ImageSynthesisConfig())

        assert config.max_retries == 3
        assert config.fixed_delays == (10.0, 15.0, 20.0)

    def test_empty_schedule_means_single_attempt(self):
        from panelsmith.core.config import ImageSynthesisConfig

        config = RetryConfig.for_image_synthesis(ImageSynthesisConfig(retry_delays=[]))

        assert config.max_retries == 0
