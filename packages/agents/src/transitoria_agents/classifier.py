"""AI classification of transitoria with Claude.

The agent sends a compact digest of every transaction to the model and asks,
in Dutch, for the allocated period, transitoria category, cutoff risk and a
short rationale per transaction, plus a completeness check for recurring
costs that seem to be missing. The reply is parsed into a
``ClassificationResponse``; the store merges it.

The agent never raises from ``process``. Missing credentials, transport
errors, timeouts and unusable replies come back as an error ``AgentResult``
so the dashboard keeps working without AI output.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import structlog

from transitoria_core.exceptions import ClassificationUnavailable, ConfigurationError
from transitoria_core.merger import parse_classification_text
from transitoria_core.models import ClassificationResponse

from .config import LLMConfig
from .interfaces import AgentResult, AgentStatus, ClassificationBatch

logger = structlog.get_logger()

CompleteFn = Callable[[str], Awaitable[str]]

CLASSIFICATION_PROMPT = """Je bent een expert in audit en transitoria (overlopende activa/passiva).
Analyseer de volgende boekhoudkundige transacties.

Transacties (ID|Datum|Omschrijving|Bedrag|Relatie):
{transactions}

TAAK 1: Analyseer per transactie:
- Wat is de juiste toerekeningsperiode (period)? (Format: YYYY-MM, YYYY-Qx, of YYYY-YEAR)
- Categorie (category): 'Vooruitbetaalde kosten', 'Nog te ontvangen/betalen', 'Regulier', of 'Correctie'.
- Risico (risk): LOW, MEDIUM of HIGH. HIGH als datum en periode niet matchen zonder logische reden (bijv. vooruitbetaling is logisch, maar oude factuur in nieuw jaar niet altijd).
- Korte analyse (analysis): max 10 woorden.

TAAK 2: Completeness Check (Volledigheid):
- Identificeer terugkerende kosten (bijv. huur, schoonmaak, lease) die lijken te ontbreken in de reeks.
- Geef suggesties voor wat er mist.

Geef antwoord als JSON object met twee keys: "transactions" (lijst) en "completeness" (lijst).
Antwoord uitsluitend met JSON, zonder toelichting.

Voorbeeld JSON Structuur:
{{
  "transactions": [
    {{ "id": "1", "analysis": "Huur Q1 correct vooruitbetaald", "risk": "LOW", "period": "2024-Q1", "category": "Vooruitbetaalde kosten" }}
  ],
  "completeness": [
    {{ "description": "Schoonmaakkosten maart ontbreken", "expectedPeriod": "2024-03", "confidence": 0.9 }}
  ]
}}"""


def build_prompt(batch: ClassificationBatch) -> str:
    """Render the classification prompt for ``batch``."""
    lines = "\n".join(d.as_prompt_line() for d in batch.transactions)
    return CLASSIFICATION_PROMPT.format(transactions=lines)


def anthropic_complete_fn(config: LLMConfig) -> CompleteFn:
    """Build a completion function backed by the Anthropic Messages API.

    Raises:
        ConfigurationError: If the anthropic package is missing or no API
            key is configured.
    """
    try:
        import anthropic
    except ImportError:
        raise ConfigurationError(
            "The 'anthropic' package is required for AI classification. "
            "Install it with: pip install anthropic",
            config_key="llm",
        )

    if not config.api_key:
        raise ConfigurationError(
            "No Anthropic API key provided. Set TRANSITORIA_LLM_API_KEY or "
            "ANTHROPIC_API_KEY.",
            config_key="TRANSITORIA_LLM_API_KEY",
            expected="an Anthropic API key",
        )

    client = anthropic.AsyncAnthropic(api_key=config.api_key, timeout=config.timeout)

    async def complete(prompt: str) -> str:
        response = await client.messages.create(
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        logger.debug(
            "llm_response_received",
            model=config.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    return complete


class TransitoriaClassifierAgent:
    """Classifies a batch of transactions for period, category and risk.

    Args:
        config: LLM settings. Loaded from the environment if omitted.
        complete_fn: Async ``prompt -> text`` function. Defaults to the
            Anthropic Messages API.

    Raises:
        ConfigurationError: If no ``complete_fn`` is given and the Anthropic
            client cannot be set up.
    """

    AGENT_NAME = "transitoria_classifier"
    AGENT_VERSION = "0.1.0"

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        complete_fn: Optional[CompleteFn] = None,
    ) -> None:
        self.config = config or LLMConfig()
        self._complete = complete_fn or anthropic_complete_fn(self.config)

    def validate_input(self, input_data: ClassificationBatch) -> bool:
        return isinstance(input_data, ClassificationBatch) and len(input_data) > 0

    async def process(self, input_data: ClassificationBatch) -> AgentResult[ClassificationResponse]:
        """Classify the batch.

        Returns:
            SUCCESS with a ``ClassificationResponse``, or ERROR/TIMEOUT with
            the failure in ``error`` and ``error_details``.
        """
        started_at = datetime.now(timezone.utc)

        if not self.validate_input(input_data):
            return self._failure(
                ClassificationUnavailable("No transactions to classify", operation="validate_input"),
            ).timed(started_at)

        prompt = build_prompt(input_data)
        log = logger.bind(batch_size=len(input_data), model=self.config.model)
        log.info("classification_started")

        try:
            text = await asyncio.wait_for(self._complete(prompt), timeout=self.config.timeout)
            response = parse_classification_text(text)
        except asyncio.TimeoutError:
            log.warning("classification_timeout", timeout=self.config.timeout)
            error = ClassificationUnavailable(
                f"Classification timed out after {self.config.timeout:g}s",
                operation="complete",
                details={"timeout": self.config.timeout},
            )
            return self._failure(error, status=AgentStatus.TIMEOUT).timed(started_at)
        except ClassificationUnavailable as e:
            log.warning("classification_unusable_response", error=e.message)
            return self._failure(e).timed(started_at)
        except Exception as e:
            log.error("classification_request_failed", error=str(e), error_type=type(e).__name__)
            error = ClassificationUnavailable(
                "Classification request failed",
                operation="complete",
                api_error=str(e),
            )
            return self._failure(error).timed(started_at)

        warnings = []
        unknown = sorted(c.transaction_id for c in response.classifications
                         if c.transaction_id not in input_data.batch_ids)
        if unknown:
            warnings.append(f"Response classified unknown transaction ids: {', '.join(unknown)}")

        log.info(
            "classification_completed",
            classified=len(response.classifications),
            completeness_issues=len(response.completeness),
        )
        return AgentResult.success(
            response,
            agent_name=self.AGENT_NAME,
            agent_version=self.AGENT_VERSION,
            metadata={
                "model": self.config.model,
                "batch_size": len(input_data),
                "classified": len(response.classifications),
            },
            warnings=warnings,
        ).timed(started_at)

    def _failure(
        self,
        error: ClassificationUnavailable,
        status: AgentStatus = AgentStatus.ERROR,
    ) -> AgentResult[ClassificationResponse]:
        return AgentResult.failure(
            error.message,
            details=error.details,
            agent_name=self.AGENT_NAME,
            agent_version=self.AGENT_VERSION,
            status=status,
        )
