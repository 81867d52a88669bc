"""Exception taxonomy for provider attempts and orchestration outcomes."""

from itinerary_ai.generation.schemas import SchemaIssue

EXHAUSTED_MESSAGE = "Both AI providers failed. Unable to generate itinerary."


class ProviderAttemptError(Exception):
    """A single provider attempt failed.

    Attributes:
        provider: Backend name of the adapter that failed
        summary: Short human-readable reason, safe to log
        outcome: Metrics/log label for this failure kind
    """

    outcome = "error"

    def __init__(self, provider: str, summary: str) -> None:
        super().__init__(f"{provider}: {summary}")
        self.provider = provider
        self.summary = summary


class TransportError(ProviderAttemptError):
    """Network, auth, timeout or SDK failure talking to a provider."""

    outcome = "transport_error"


class EmptyContentError(ProviderAttemptError):
    """Provider replied without any usable text."""

    outcome = "empty_content"


class JsonParseError(ProviderAttemptError):
    """No JSON value could be extracted from the reply, even after repair."""

    outcome = "parse_error"


class SchemaValidationError(ProviderAttemptError):
    """Extracted JSON did not satisfy the task schema."""

    outcome = "schema_error"

    def __init__(self, provider: str, summary: str, issues: list[SchemaIssue]) -> None:
        super().__init__(provider, summary)
        self.issues = issues


class ExhaustedProvidersError(Exception):
    """Every provider (and its repair retry) failed.

    The message is stable and carries no internal diagnostics.
    """

    def __init__(self, message: str = EXHAUSTED_MESSAGE) -> None:
        super().__init__(message)


class ProviderConfigurationError(Exception):
    """Provider credentials or settings are missing."""

    pass
