#!/usr/bin/env python3
"""Tests for the insight requester and the OpenAI-backed provider."""

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from carlog import (
    FALLBACK_MESSAGE,
    Car,
    InsightUnavailable,
    MaintenanceRecord,
    OpenAIInsightProvider,
    ServiceType,
    build_prompt,
    request_insight,
)


@pytest.fixture
def car():
    return Car("c1", "Toyota", "Corolla", 2020, "ABC1D23", 62000)


@pytest.fixture
def records():
    return [
        MaintenanceRecord("r2", "c1", "Revisão 60 mil", ServiceType.REVISION, "2024-03-01", 60000),
        MaintenanceRecord("r1", "c1", "Filtro de óleo", ServiceType.REPLACEMENT, "2024-01-05", 51000),
    ]


class FakeProvider:
    def __init__(self, reply="Tudo certo com o seu carro."):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.reply


class FailingProvider:
    def generate(self, prompt):
        raise InsightUnavailable()


def fake_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestBuildPrompt:
    """Tests for build_prompt."""

    def test_includes_vehicle(self, car, records):
        prompt = build_prompt(car, records)
        assert "Veículo: Toyota Corolla (2020)" in prompt
        assert "Quilometragem atual: 62000 km" in prompt

    def test_history_is_chronological(self, car, records):
        prompt = build_prompt(car, records)
        first = prompt.index("- 2024-01-05: Filtro de óleo (Troca) aos 51000 km")
        second = prompt.index("- 2024-03-01: Revisão 60 mil (Revisão) aos 60000 km")
        assert first < second

    def test_asks_for_three_items(self, car, records):
        prompt = build_prompt(car, records)
        assert "1. Uma avaliação geral da saúde do veículo." in prompt
        assert "próximas 3 manutenções preventivas" in prompt
        assert "3. Uma dica de economia" in prompt

    def test_empty_history(self, car):
        assert "Histórico de Manutenções:" in build_prompt(car, [])


class TestRequestInsight:
    """Tests for request_insight."""

    def test_returns_provider_text(self, car, records):
        provider = FakeProvider()
        assert request_insight(provider, car, records) == "Tudo certo com o seu carro."
        assert provider.prompts == [build_prompt(car, records)]

    def test_failure_returns_fallback(self, car, records):
        assert request_insight(FailingProvider(), car, records) == FALLBACK_MESSAGE

    def test_blank_reply_returns_fallback(self, car, records):
        assert request_insight(FakeProvider("   "), car, records) == FALLBACK_MESSAGE
        assert request_insight(FakeProvider(None), car, records) == FALLBACK_MESSAGE

    def test_does_not_mutate_inputs(self, car, records):
        request_insight(FailingProvider(), car, records)
        assert car.current_mileage == 62000
        assert [r.id for r in records] == ["r2", "r1"]


class TestOpenAIInsightProvider:
    """Tests for OpenAIInsightProvider with a stand-in client."""

    def test_sends_prompt_with_sampling_options(self):
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            return completion("Resposta")

        provider = OpenAIInsightProvider(model="test-model", client=fake_client(create))
        assert provider.generate("olá") == "Resposta"
        assert calls[0]["model"] == "test-model"
        assert calls[0]["messages"] == [{"role": "user", "content": "olá"}]
        assert calls[0]["temperature"] == 0.7
        assert calls[0]["top_p"] == 0.8

    def test_api_error_is_unavailable(self):
        def create(**kwargs):
            raise OpenAIError("boom")

        provider = OpenAIInsightProvider(client=fake_client(create))
        with pytest.raises(InsightUnavailable):
            provider.generate("olá")

    def test_malformed_response_is_unavailable(self):
        provider = OpenAIInsightProvider(
            client=fake_client(lambda **kwargs: SimpleNamespace(choices=[]))
        )
        with pytest.raises(InsightUnavailable):
            provider.generate("olá")

    def test_empty_content_is_unavailable(self):
        provider = OpenAIInsightProvider(client=fake_client(lambda **kwargs: completion("")))
        with pytest.raises(InsightUnavailable):
            provider.generate("olá")

    def test_missing_api_key_is_unavailable(self):
        with pytest.raises(InsightUnavailable):
            OpenAIInsightProvider(api_key=None).generate("olá")

    def test_request_insight_falls_back_on_api_error(self, car, records):
        def create(**kwargs):
            raise OpenAIError("timeout")

        provider = OpenAIInsightProvider(client=fake_client(create))
        assert request_insight(provider, car, records) == FALLBACK_MESSAGE


class CrashingProvider:
    def generate(self, prompt):
        raise RuntimeError("connection reset")


class TestRequestInsightUnexpectedErrors:
    def test_untyped_failure_returns_fallback(self, car, records):
        assert request_insight(CrashingProvider(), car, records) == FALLBACK_MESSAGE

    def test_record_without_date_is_listed_first(self, car, records):
        records.append(
            MaintenanceRecord("r3", "c1", "Pneu", ServiceType.REPLACEMENT, None, 40000)
        )
        prompt = build_prompt(car, records)
        assert prompt.index("Pneu") < prompt.index("Filtro de óleo")
