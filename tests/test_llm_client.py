import pytest

from voyage.services.llm_client import LLMClient


async def test_unconfigured_client_is_unavailable():
    client = LLMClient(openai_api_key="", anthropic_api_key="")

    assert client.available is False
    with pytest.raises(RuntimeError, match="No LLM provider configured"):
        await client.complete("system", "hello")


async def test_falls_through_to_anthropic_when_openai_fails(monkeypatch):
    client = LLMClient(openai_api_key="sk-test", anthropic_api_key="sk-ant-test")
    seen = []

    async def broken(system, turns, max_tokens, temperature):
        raise ConnectionError("timed out")

    async def working(system, turns, max_tokens, temperature):
        seen.append(turns)
        return "Try Lisbon in May."

    monkeypatch.setattr(client, "_ask_openai", broken)
    monkeypatch.setattr(client, "_ask_anthropic", working)

    reply = await client.complete("system", "where next?")

    assert client.providers == ["openai", "anthropic"]
    assert reply == "Try Lisbon in May."
    assert seen == [[{"role": "user", "content": "where next?"}]]


async def test_every_provider_failing_raises(monkeypatch):
    client = LLMClient(openai_api_key="sk-test", anthropic_api_key="")

    async def broken(system, turns, max_tokens, temperature):
        raise ConnectionError("timed out")

    monkeypatch.setattr(client, "_ask_openai", broken)

    with pytest.raises(RuntimeError, match="openai: timed out"):
        await client.complete("system", "hi", messages=[{"role": "user", "content": "hi"}])
