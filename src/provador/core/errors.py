"""Error taxonomy and user-facing failure classification.

Every failure inside a try-on call ends up as one of a small, fixed set of
Portuguese messages.  Raw provider text is only ever logged; it never reaches
the caller or the result record.

Classification order
--------------------
1. Rate limit anywhere in the chain.  This is the only kind that changes the
   HTTP status (429).
2. Quota.
3. Exhaustion (every provider failed or returned no image).
4. Validation (the message is already user-safe and is passed through).
5. Anything else maps to the generic message.

Failures that carry a provider HTTP status are judged by that status alone
(429 rate limit, 402 quota).  Only failures without one, such as transport
errors or plain exceptions, are matched on text (``429``, ``Too Many
Requests``, ``rate limit``, ``402``, ``credits``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Imagem do avatar e imagem da peça são obrigatórias."
RATE_LIMIT_MESSAGE = "Limite de requisições atingido. Aguarde alguns segundos e tente novamente."
QUOTA_MESSAGE = "Créditos insuficientes no serviço de IA. Tente novamente em alguns minutos."
EXHAUSTION_MESSAGE = (
    "Não foi possível processar a imagem. "
    "Use uma foto de corpo inteiro com boa iluminação e fundo simples."
)
GENERIC_MESSAGE = "Falha ao processar prova virtual."

_RATE_LIMIT_MARKERS = ("429", "too many requests", "rate limit")
_QUOTA_MARKERS = ("402", "credits")

FailureKind = Literal["input", "validation", "rate_limit", "quota", "exhaustion", "generic"]


class TryOnError(Exception):
    """Base class for try-on failures."""


class InputError(TryOnError):
    """A required input URL is missing."""

    def __init__(self, message: str = MISSING_INPUT_MESSAGE) -> None:
        super().__init__(message)


class ImageValidationError(TryOnError):
    """An input image is unreachable or is not image content.

    The message names the offending image and is shown to the user as-is.
    """


class ProviderError(TryOnError):
    """A single image-generation provider call failed.

    Attributes:
        provider: Identifier of the provider that failed.
        status_code: HTTP status returned by the provider, when there was one.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


@dataclass(frozen=True)
class AttemptFailure:
    """One failed candidate in an escalation chain."""

    provider: str
    message: str
    status_code: int | None = None


class ExhaustionError(TryOnError):
    """Every escalation candidate failed or produced no image."""

    def __init__(self, failures: list[AttemptFailure] | None = None) -> None:
        super().__init__(
            "Nenhum modelo conseguiu gerar a imagem. "
            "Verifique se a foto do avatar mostra uma pessoa de corpo inteiro."
        )
        self.failures: list[AttemptFailure] = list(failures or [])


@dataclass(frozen=True)
class FailureClassification:
    """Sanitized view of a failure, safe to persist and return."""

    user_message: str
    kind: FailureKind
    is_rate_limited: bool = False
    raw_messages: list[str] = field(default_factory=list, compare=False, repr=False)

    @property
    def status_code(self) -> int:
        return 429 if self.is_rate_limited else 400


def _signals(error: BaseException) -> list[tuple[str, int | None]]:
    signals = [(str(error), getattr(error, "status_code", None))]
    if isinstance(error, ExhaustionError):
        signals.extend((failure.message, failure.status_code) for failure in error.failures)
    return signals


def _matches(messages: list[str], markers: tuple[str, ...]) -> bool:
    return any(marker in message.lower() for message in messages for marker in markers)


def _detect(
    signals: list[tuple[str, int | None]], status_code: int, markers: tuple[str, ...]
) -> bool:
    # A known HTTP status is authoritative; text is only searched when there is none.
    return any(
        status == status_code if status is not None else _matches([message], markers)
        for message, status in signals
    )


def is_rate_limit_message(message: str) -> bool:
    """Return True if *message* looks like a provider rate-limit response."""
    return _matches([message], _RATE_LIMIT_MARKERS)


def classify_failure(error: BaseException) -> FailureClassification:
    """Map a raw failure to one of the fixed user-facing messages.

    Args:
        error: The exception that ended the try-on call.  For an
            :class:`ExhaustionError`, every provider failure it carries is
            inspected as well.

    Returns:
        The sanitized classification.  Only the rate-limit kind sets
        ``is_rate_limited``.
    """
    signals = _signals(error)
    messages = [message for message, _ in signals]

    if isinstance(error, InputError):
        return FailureClassification(str(error), "input", raw_messages=messages)

    if _detect(signals, 429, _RATE_LIMIT_MARKERS):
        return FailureClassification(
            RATE_LIMIT_MESSAGE, "rate_limit", is_rate_limited=True, raw_messages=messages
        )

    if _detect(signals, 402, _QUOTA_MARKERS):
        return FailureClassification(QUOTA_MESSAGE, "quota", raw_messages=messages)

    if isinstance(error, ExhaustionError):
        return FailureClassification(EXHAUSTION_MESSAGE, "exhaustion", raw_messages=messages)

    if isinstance(error, ImageValidationError):
        return FailureClassification(str(error), "validation", raw_messages=messages)

    logger.debug("Unclassified try-on failure: %s", messages[0])
    return FailureClassification(GENERIC_MESSAGE, "generic", raw_messages=messages)
