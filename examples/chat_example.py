"""Example usage of the OpenRouter client.

Shows a plain chat completion, a streamed reply, structured output and the
cost lookup for a finished generation. Requires OPENROUTER_API_KEY.
"""

import asyncio
import json
from contextlib import aclosing
from dataclasses import dataclass

from openrouter_client import OpenRouterClient, OpenRouterError
from openrouter_client.utils.logging import configure_logging

MODEL = "openai/gpt-4o-mini"


@dataclass
class CityFacts:
    name: str
    country: str
    population: int
    landmarks: list[str]


async def example_basic_chat(client: OpenRouterClient) -> str:
    """Example 1: One question, one answer."""
    print("Example 1: Basic chat completion")
    print("=" * 60)

    response = await (
        client.chat.create_request()
        .with_model(MODEL)
        .with_system_message("Answer in one sentence.")
        .with_user_message("What is OpenRouter?")
        .with_temperature(0.3)
        .execute()
    )
    print(response.first_choice_content)
    if response.usage:
        print(f"Tokens: {response.usage.total_tokens}")
    print()
    return response.id


async def example_streaming(client: OpenRouterClient) -> None:
    """Example 2: Print tokens as they arrive, stopping early at "three"."""
    print("Example 2: Streaming")
    print("=" * 60)

    stream = (
        client.chat.create_request()
        .with_model(MODEL)
        .with_user_message("Count from one to five.")
        .execute_stream()
    )
    async with aclosing(stream) as chunks:
        async for chunk in chunks:
            print(chunk.content, end="", flush=True)
            if "three" in chunk.content.lower():
                break
    print("\n")


async def example_structured_output(client: OpenRouterClient) -> None:
    """Example 3: Ask for JSON matching a dataclass."""
    print("Example 3: Structured output")
    print("=" * 60)

    response = await (
        client.chat.create_request()
        .with_model(MODEL)
        .with_user_message("Give me facts about Lisbon.")
        .with_structured_output(CityFacts)
        .execute()
    )
    facts = CityFacts(**json.loads(response.first_choice_content or "{}"))
    print(facts)
    print()


async def example_generation_cost(client: OpenRouterClient, generation_id: str) -> None:
    """Example 4: Look up what a generation cost."""
    print("Example 4: Generation cost")
    print("=" * 60)

    # Accounting can lag a few seconds behind the response
    await asyncio.sleep(2)
    details = await client.generation.get_generation(generation_id)
    print(f"{details.model} via {details.provider_name}: ${details.total_cost}")
    print()


async def main() -> None:
    configure_logging("WARNING")
    try:
        async with OpenRouterClient(x_title="openrouter-client examples") as client:
            generation_id = await example_basic_chat(client)
            await example_streaming(client)
            await example_structured_output(client)
            await example_generation_cost(client, generation_id)
    except OpenRouterError as e:
        print(f"Request failed: {e}")


if __name__ == "__main__":
    asyncio.run(main())
