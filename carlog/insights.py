"""
Natural-language maintenance insights from a text-generation service.

The provider is a capability with a single `generate(prompt)` method that
returns text or raises InsightUnavailable. `request_insight` never raises:
any provider failure is replaced by a fixed apology message.
"""

import logging
from typing import Iterable, Optional, Protocol

from openai import OpenAI, OpenAIError

from .car import Car
from .csv_io import format_number
from .errors import InsightUnavailable
from .maintenance_record import MaintenanceRecord

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = InsightUnavailable.message

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.8


class InsightProvider(Protocol):
    """Text generation backend. Failures should raise InsightUnavailable."""

    def generate(self, prompt: str) -> str:
        ...


class OpenAIInsightProvider:
    """InsightProvider backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        top_p: float = DEFAULT_TOP_P,
        client: Optional[OpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise InsightUnavailable()
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                top_p=self.top_p,
            )
        except OpenAIError as e:
            raise InsightUnavailable() from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise InsightUnavailable() from e
        if not text or not text.strip():
            raise InsightUnavailable()
        return text


def format_history_line(record: MaintenanceRecord) -> str:
    return (
        f"- {record.date}: {record.part_name} ({record.type.label}) "
        f"aos {format_number(record.mileage)} km"
    )


def build_prompt(car: Car, records: Iterable[MaintenanceRecord]) -> str:
    """Prompt describing the car and its history in chronological order."""
    history = "\n".join(
        format_history_line(r) for r in sorted(records, key=lambda r: r.date_key)
    )
    return (
        "Analise o histórico de manutenção do seguinte veículo:\n"
        f"Veículo: {car.make} {car.model} ({car.year})\n"
        f"Quilometragem atual: {format_number(car.current_mileage)} km\n"
        "\n"
        "Histórico de Manutenções:\n"
        f"{history}\n"
        "\n"
        "Com base nesse histórico e na quilometragem, forneça:\n"
        "1. Uma avaliação geral da saúde do veículo.\n"
        "2. Sugestão das próximas 3 manutenções preventivas mais urgentes.\n"
        "3. Uma dica de economia ou cuidado específico para este modelo.\n"
        "\n"
        "Responda em português de forma concisa e amigável "
        "para um proprietário de carro."
    )


def request_insight(
    provider: InsightProvider, car: Car, records: Iterable[MaintenanceRecord]
) -> str:
    """Ask the provider for an insight; fall back to an apology on failure."""
    prompt = build_prompt(car, records)
    try:
        text = provider.generate(prompt)
    except InsightUnavailable as e:
        logger.warning("Insight unavailable for car %s: %r", car.id, e.__cause__ or e)
        return FALLBACK_MESSAGE
    except Exception:
        logger.warning("Insight provider failed for car %s", car.id, exc_info=True)
        return FALLBACK_MESSAGE
    if not text or not text.strip():
        logger.warning("Insight provider returned no text for car %s", car.id)
        return FALLBACK_MESSAGE
    return text
