"""Itinerary generation orchestrator.

Sequences one request through:
- Cache lookup (local tier, then distributed tier)
- Primary provider attempt, plus one repair retry
- Fallback provider attempt, plus one repair retry
- Cache write and background telemetry

Attempts are strictly sequential; the primary always runs before the fallback
and the original prompt always precedes the repaired one.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Literal, cast

from pydantic import ValidationError

from itinerary_ai.adapters.base import ProviderAdapter
from itinerary_ai.cache.base import CacheTier
from itinerary_ai.cache.fingerprint import hash_prompt, make_cache_key
from itinerary_ai.config import Settings, get_settings
from itinerary_ai.db.telemetry import TelemetrySink
from itinerary_ai.generation.extract import extract_json
from itinerary_ai.generation.normalize import (
    count_poi_payloads,
    normalize_iso_currency,
    normalize_itinerary_payload,
)
from itinerary_ai.generation.schemas import summarize_schema_errors, validate_for_task_type
from itinerary_ai.generation.transforms import (
    apply_currency_fallback,
    count_itinerary_stats,
    strip_poi,
)
from itinerary_ai.models.itinerary import GeneratedItinerary
from itinerary_ai.models.task_types import AiTaskType, normalize_task_type
from itinerary_ai.models.telemetry import OrchestrationRun
from itinerary_ai.orchestration.errors import (
    EmptyContentError,
    ExhaustedProvidersError,
    JsonParseError,
    ProviderAttemptError,
    SchemaValidationError,
    TransportError,
)
from itinerary_ai.orchestration.prompts import (
    OPENROUTER_SYSTEM_PROMPT,
    build_conversation,
    build_repair_prompt,
)

logger = logging.getLogger(__name__)

RAW_LOG_LIMIT = 500

SlotLabel = Literal["primary", "secondary"]


# Metrics interface (implemented by utils.metrics)
class OrchestrationMetrics:
    """Interface for orchestration metrics."""

    def record_attempt(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record one provider attempt."""
        pass

    def inc_cache_hit(self, tier: str) -> None:
        """Increment cache hit counter."""
        pass

    def inc_failure(self) -> None:
        """Increment exhausted-providers counter."""
        pass


# Logging interface (implemented by utils.logging)
class RunLogger:
    """Interface for structured orchestration logging."""

    def log_event(
        self,
        request_id: str | None,
        provider: str,
        stage: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one attempt or cache event."""
        pass


@dataclass(frozen=True)
class ProviderSlot:
    """A provider adapter in its orchestration position."""

    label: SlotLabel
    adapter: ProviderAdapter
    system_prompt: str | None = None


@dataclass(frozen=True)
class AttemptResult:
    """A validated provider reply with its timings."""

    itinerary: GeneratedItinerary
    json_repaired: bool
    provider_ms: int
    parse_ms: int
    response_length: int
    poi_dropped_count: int


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class ItineraryOrchestrator:
    """Turns a prompt into a schema-valid itinerary using two providers."""

    def __init__(
        self,
        primary: ProviderAdapter,
        secondary: ProviderAdapter,
        *,
        memory_cache: CacheTier | None = None,
        redis_cache: CacheTier | None = None,
        telemetry: TelemetrySink | None = None,
        settings: Settings | None = None,
        metrics: OrchestrationMetrics | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            primary: Adapter tried first (user turn only)
            secondary: Fallback adapter (system turn + user turn)
            memory_cache: Local cache tier (optional)
            redis_cache: Distributed cache tier (optional)
            telemetry: Telemetry sink (optional, runs are dropped when absent)
            settings: Settings (default: get_settings())
            metrics: Metrics recorder (optional, defaults to no-op)
            run_logger: Structured logger (optional, defaults to no-op)
        """
        self._primary = ProviderSlot(label="primary", adapter=primary)
        self._secondary = ProviderSlot(
            label="secondary", adapter=secondary, system_prompt=OPENROUTER_SYSTEM_PROMPT
        )
        self._memory_cache = memory_cache
        self._redis_cache = redis_cache
        self._telemetry = telemetry
        self._settings = settings or get_settings()
        self._metrics = metrics or OrchestrationMetrics()
        self._run_logger = run_logger or RunLogger()
        self._pending: set[asyncio.Task[None]] = set()

    async def generate_itinerary(
        self,
        prompt: str,
        *,
        currency_hint: str | None = None,
        task_type: str | AiTaskType | None = "preview_itinerary",
        request_id: str | None = None,
        user_id: str | None = None,
        trip_id: str | None = None,
        cache_ttl_seconds: int | None = None,
    ) -> GeneratedItinerary:
        """Generate (or fetch from cache) a validated itinerary.

        Args:
            prompt: Fully built generation prompt
            currency_hint: Caller currency, used when the reply has none
            task_type: Raw task type; unknown values use the default schema
            request_id: Correlation id for logs and telemetry
            user_id: Requesting user (telemetry only)
            trip_id: Related trip (telemetry only)
            cache_ttl_seconds: Overrides both cache tier TTLs

        Returns:
            GeneratedItinerary with resolved currency and every poi set to None

        Raises:
            ExhaustedProvidersError: Both providers failed, including retries
            asyncio.CancelledError: Caller cancelled the request
        """
        started = time.monotonic()
        resolved_task = normalize_task_type(task_type)
        hint = normalize_iso_currency(currency_hint)
        cache_key = make_cache_key(prompt, hint, resolved_task)
        raw_task_type = task_type.value if isinstance(task_type, AiTaskType) else task_type
        run_fields = {
            "request_id": request_id,
            "user_id": user_id,
            "trip_id": trip_id,
            "task_type": raw_task_type,
            "prompt_hash": hash_prompt(prompt, hint, resolved_task),
            "prompt_length": len(prompt),
            "currency_hint": hint,
        }

        memory_ttl = cache_ttl_seconds or self._settings.ai_preview_memory_ttl_seconds
        redis_ttl = cache_ttl_seconds or self._settings.ai_preview_cache_ttl_seconds

        cached, tier = await self._lookup_cache(cache_key, request_id, memory_ttl)
        if cached is not None:
            itinerary, stripped = strip_poi(apply_currency_fallback(cached, hint))
            stats = count_itinerary_stats(itinerary)
            self._record(
                OrchestrationRun(
                    **run_fields,
                    provider="cache",
                    cache_memory_hit=tier == "memory",
                    cache_redis_hit=tier == "redis",
                    json_valid=True,
                    total_ms=_elapsed_ms(started),
                    days_count=stats.days_count,
                    activities_count=stats.activities_count,
                    poi_count=stats.poi_count,
                    poi_dropped_count=stripped,
                )
            )
            return itinerary

        last_error: ProviderAttemptError | None = None
        schema_errors_count = 0
        for slot in (self._primary, self._secondary):
            try:
                result = await self._run_provider(slot, prompt, resolved_task, request_id)
            except ProviderAttemptError as e:
                last_error = e
                if isinstance(e, SchemaValidationError):
                    schema_errors_count = len(e.issues)
                logger.warning(
                    f"Provider {slot.label} ({slot.adapter.name}) exhausted: {e.summary}"
                )
                continue

            itinerary = apply_currency_fallback(result.itinerary, hint)
            itinerary, _ = strip_poi(itinerary)
            await self._write_cache(cache_key, itinerary, memory_ttl, redis_ttl)

            stats = count_itinerary_stats(itinerary)
            self._record(
                OrchestrationRun(
                    **run_fields,
                    provider=slot.label,
                    provider_name=slot.adapter.name,
                    fallback_used=slot.label == "secondary",
                    total_ms=_elapsed_ms(started),
                    provider_ms=result.provider_ms,
                    parse_ms=result.parse_ms,
                    json_valid=True,
                    json_repaired=result.json_repaired,
                    days_count=stats.days_count,
                    activities_count=stats.activities_count,
                    poi_count=stats.poi_count,
                    poi_dropped_count=result.poi_dropped_count,
                    response_length=result.response_length,
                )
            )
            return itinerary

        self._metrics.inc_failure()
        logger.error(
            f"All AI providers failed for request {request_id}: "
            f"{last_error.summary if last_error else 'unknown'}"
        )
        self._record(
            OrchestrationRun(
                **run_fields,
                provider="secondary",
                provider_name=self._secondary.adapter.name,
                fallback_used=True,
                total_ms=_elapsed_ms(started),
                json_valid=False,
                schema_errors_count=schema_errors_count,
                error_message=str(last_error) if last_error else None,
            )
        )
        raise ExhaustedProvidersError()

    async def _lookup_cache(
        self, key: str, request_id: str | None, memory_ttl: int
    ) -> tuple[GeneratedItinerary | None, str | None]:
        """Check local then distributed tier.

        Returns:
            (itinerary, "memory" | "redis") on a hit, (None, None) otherwise
        """
        tiers = (("memory", self._memory_cache), ("redis", self._redis_cache))
        for label, tier in tiers:
            if tier is None:
                continue
            start = time.monotonic()
            try:
                cached = await tier.get(key)
            except Exception as e:
                logger.warning(f"Cache get failed on {label}: {type(e).__name__}: {e}")
                self._run_logger.log_event(
                    request_id,
                    label,
                    "cache_lookup",
                    "error",
                    _elapsed_ms(start),
                    error_reason=type(e).__name__,
                )
                continue

            if cached is None:
                self._run_logger.log_event(
                    request_id, label, "cache_lookup", "miss", _elapsed_ms(start)
                )
                continue

            try:
                itinerary = GeneratedItinerary.model_validate(cached)
            except ValidationError as e:
                logger.warning(
                    f"Discarding invalid cached itinerary on {label}: {e.error_count()} errors"
                )
                continue

            if label == "redis" and self._memory_cache is not None:
                try:
                    await self._memory_cache.set(key, cached, memory_ttl)
                except Exception as e:
                    logger.warning(f"Cache back-fill failed: {type(e).__name__}: {e}")

            self._metrics.inc_cache_hit(label)
            self._run_logger.log_event(request_id, label, "cache_lookup", "hit", _elapsed_ms(start))
            return itinerary, label

        return None, None

    async def _run_provider(
        self,
        slot: ProviderSlot,
        prompt: str,
        task_type: AiTaskType,
        request_id: str | None,
    ) -> AttemptResult:
        """One provider: original prompt, then at most one retry.

        Parse and schema failures retry with a repair prompt. Transport and
        empty-content failures retry only when ai_retry_transport_errors is set.
        """
        try:
            return await self._attempt(slot, prompt, task_type, request_id, stage="attempt")
        except (JsonParseError, SchemaValidationError) as e:
            retry_prompt = build_repair_prompt(prompt, e.summary)
        except (TransportError, EmptyContentError) as e:
            if not self._settings.ai_retry_transport_errors:
                raise
            if isinstance(e, EmptyContentError):
                retry_prompt = build_repair_prompt(prompt, e.summary)
            else:
                retry_prompt = prompt

        return await self._attempt(slot, retry_prompt, task_type, request_id, stage="retry")

    async def _attempt(
        self,
        slot: ProviderSlot,
        prompt: str,
        task_type: AiTaskType,
        request_id: str | None,
        *,
        stage: str,
    ) -> AttemptResult:
        """Single call: submit, extract, normalize, validate."""
        name = slot.adapter.name
        start = time.monotonic()
        try:
            result = await self._submit_and_parse(slot, prompt, task_type, stage)
        except ProviderAttemptError as e:
            elapsed = _elapsed_ms(start)
            self._metrics.record_attempt(name, e.outcome, elapsed)
            self._run_logger.log_event(
                request_id, name, stage, e.outcome, elapsed, error_reason=e.summary
            )
            raise

        elapsed = _elapsed_ms(start)
        self._metrics.record_attempt(name, "success", elapsed)
        self._run_logger.log_event(request_id, name, stage, "success", elapsed)
        return result

    async def _submit_and_parse(
        self,
        slot: ProviderSlot,
        prompt: str,
        task_type: AiTaskType,
        stage: str,
    ) -> AttemptResult:
        name = slot.adapter.name
        conversation = build_conversation(prompt, slot.system_prompt)
        timeout = self._settings.provider_timeout_seconds

        submit_start = time.monotonic()
        try:
            envelope = await asyncio.wait_for(slot.adapter.submit(conversation), timeout=timeout)
        except TimeoutError as e:
            raise TransportError(name, f"timed out after {timeout}s") from e
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(name, f"{type(e).__name__}: {e}") from e
        provider_ms = _elapsed_ms(submit_start)

        content = envelope.first_content()
        if content is None:
            raise EmptyContentError(name, "empty response from provider")

        parse_start = time.monotonic()
        extraction = extract_json(content)
        if not extraction.ok:
            logger.warning(
                f"{name} {stage}: no JSON found; raw={content[:RAW_LOG_LIMIT]!r}"
            )
            raise JsonParseError(name, "response was not valid JSON")

        poi_dropped = count_poi_payloads(extraction.value)
        normalized = normalize_itinerary_payload(extraction.value)
        validation = validate_for_task_type(normalized, task_type)
        parse_ms = _elapsed_ms(parse_start)

        if not validation.valid:
            summary = summarize_schema_errors(validation.errors)
            logger.warning(
                f"{name} {stage}: schema validation failed: {summary}; "
                f"raw={content[:RAW_LOG_LIMIT]!r}"
            )
            raise SchemaValidationError(name, summary, validation.errors)

        return AttemptResult(
            itinerary=cast(GeneratedItinerary, validation.value),
            json_repaired=extraction.was_repaired,
            provider_ms=provider_ms,
            parse_ms=parse_ms,
            response_length=len(content),
            poi_dropped_count=poi_dropped,
        )

    async def _write_cache(
        self, key: str, itinerary: GeneratedItinerary, memory_ttl: int, redis_ttl: int
    ) -> None:
        """Write both tiers; failures are logged and ignored."""
        writes = (
            ("memory", self._memory_cache, memory_ttl),
            ("redis", self._redis_cache, redis_ttl),
        )
        for label, tier, ttl in writes:
            if tier is None:
                continue
            try:
                await tier.set(key, itinerary.to_wire(), ttl)
            except Exception as e:
                logger.warning(f"Cache set failed on {label}: {type(e).__name__}: {e}")

    def _record(self, run: OrchestrationRun) -> None:
        """Schedule a telemetry write without awaiting it."""
        if self._telemetry is None:
            return
        task = asyncio.create_task(self._persist_run(run))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist_run(self, run: OrchestrationRun) -> None:
        assert self._telemetry is not None
        try:
            await self._telemetry.record_run(run)
        except Exception as e:
            logger.warning(f"Telemetry write failed for run {run.id}: {type(e).__name__}: {e}")

    async def drain_telemetry(self) -> None:
        """Wait for outstanding telemetry writes (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
