"""Command-line interface for exploring the OpenRouter API."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import OpenRouterClient
from .exceptions import OpenRouterError
from .models import Message, ModelsRequest, OAuthConfig
from .services import AuthService
from .utils.logging import configure_logging, get_logger

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="openrouter-client",
    help="Query models, credits and chat completions on OpenRouter.",
    no_args_is_help=True,
)


def _options(ctx: typer.Context) -> dict[str, Any]:
    return ctx.ensure_object(dict)


def _make_client(ctx: typer.Context) -> OpenRouterClient:
    options = _options(ctx)
    return OpenRouterClient(
        api_key=options.get("api_key"),
        base_url=options.get("base_url"),
        enable_retry=options.get("enable_retry"),
    )


def _run(ctx: typer.Context, action: Callable[[OpenRouterClient], Awaitable[T]]) -> T:
    """Run ``action`` with a client, turning SDK errors into exit code 1."""

    async def runner() -> T:
        async with _make_client(ctx) as client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except OpenRouterError as e:
        get_logger(__name__).debug("cli_command_failed", **e.to_dict())
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


@app.callback()
def main(
    ctx: typer.Context,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            envvar="OPENROUTER_API_KEY",
            help="OpenRouter API key",
            show_default=False,
        ),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Override the API base URL"),
    ] = None,
    no_retry: Annotated[
        bool, typer.Option("--no-retry", help="Disable retries of transient errors")
    ] = False,
    log_level: Annotated[
        str, typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)")
    ] = "WARNING",
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Emit logs as JSON")
    ] = False,
) -> None:
    """Global options shared by every command."""
    configure_logging(log_level, json_logs=json_logs)
    options = _options(ctx)
    options["api_key"] = api_key
    options["base_url"] = base_url
    options["enable_retry"] = False if no_retry else None


@app.command(name="models")
def list_models(
    ctx: typer.Context,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Substring of id or name")
    ] = None,
    supported_parameter: Annotated[
        list[str] | None,
        typer.Option(
            "--supported-parameter",
            "-p",
            help="Only models supporting this parameter (repeatable)",
        ),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", min=1)] = 50,
) -> None:
    """List available models."""
    request = ModelsRequest(supported_parameters=supported_parameter or [])
    response = _run(ctx, lambda client: client.models.get_models(request))

    models = response.data
    if search:
        needle = search.lower()
        models = [m for m in models if needle in m.id.lower() or needle in m.name.lower()]

    table = Table(title=f"Models ({len(models)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Context", justify="right")
    table.add_column("Prompt $/tok", justify="right")
    table.add_column("Completion $/tok", justify="right")
    for model in models[:limit]:
        pricing = model.pricing
        table.add_row(
            model.id,
            model.name,
            str(model.context_length or "-"),
            str(pricing.prompt) if pricing and pricing.prompt is not None else "-",
            str(pricing.completion)
            if pricing and pricing.completion is not None
            else "-",
        )
    console.print(table)


@app.command(name="model")
def show_model(
    ctx: typer.Context,
    model_id: Annotated[str, typer.Argument(help="Model id, e.g. openai/gpt-4o")],
) -> None:
    """Show details of one model."""
    model = _run(ctx, lambda client: client.models.get_model(model_id))

    table = Table(title=model.id, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", model.name)
    table.add_row("Context length", str(model.context_length or "-"))
    if model.architecture and model.architecture.modality:
        table.add_row("Modality", model.architecture.modality)
    if model.pricing:
        table.add_row("Prompt price", str(model.pricing.prompt))
        table.add_row("Completion price", str(model.pricing.completion))
    if model.supported_parameters:
        table.add_row("Parameters", ", ".join(model.supported_parameters))
    if model.description:
        table.add_row("Description", model.description)
    console.print(table)


@app.command(name="credits")
def show_credits(ctx: typer.Context) -> None:
    """Show credit balance."""
    response = _run(ctx, lambda client: client.credits.get_credits())
    credits = response.data

    table = Table(title="Credits", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    if credits.total_credits is not None:
        table.add_row("Total credits", f"{credits.total_credits:.4f}")
    if credits.total_usage is not None:
        table.add_row("Total usage", f"{credits.total_usage:.4f}")
    if credits.remaining is not None:
        table.add_row("Remaining", f"[green]{credits.remaining:.4f}[/green]")
    console.print(table)


@app.command(name="chat")
def chat(
    ctx: typer.Context,
    model: Annotated[str, typer.Argument(help="Model id")],
    prompt: Annotated[str, typer.Argument(help="User message")],
    system: Annotated[
        str | None, typer.Option("--system", help="System message")
    ] = None,
    temperature: Annotated[
        float | None, typer.Option("--temperature", "-t", min=0.0, max=2.0)
    ] = None,
    max_tokens: Annotated[int | None, typer.Option("--max-tokens", min=1)] = None,
    stream: Annotated[
        bool, typer.Option("--stream", help="Print tokens as they arrive")
    ] = False,
) -> None:
    """Send a single chat message and print the reply."""

    def build(client: OpenRouterClient) -> Any:
        builder = client.chat.create_request().with_model(model)
        if system:
            builder.with_system_message(system)
        builder.with_user_message(prompt)
        if temperature is not None:
            builder.with_temperature(temperature)
        if max_tokens is not None:
            builder.with_max_tokens(max_tokens)
        return builder

    async def run_stream(client: OpenRouterClient) -> None:
        async with aclosing(build(client).execute_stream()) as stream:
            async for chunk in stream:
                if chunk.content:
                    console.print(
                        chunk.content, end="", markup=False, highlight=False
                    )
        console.print()

    async def run_once(client: OpenRouterClient) -> None:
        response = await build(client).execute()
        console.print(response.first_choice_content or "", markup=False)
        if response.usage:
            err_console.print(
                f"[dim]{response.id} · {response.usage.prompt_tokens} prompt + "
                f"{response.usage.completion_tokens} completion tokens[/dim]"
            )

    _run(ctx, run_stream if stream else run_once)


@app.command(name="generation")
def show_generation(
    ctx: typer.Context,
    generation_id: Annotated[str, typer.Argument(help="Generation id (gen-...)")],
) -> None:
    """Show cost and token accounting for a generation."""
    details = _run(ctx, lambda client: client.generation.get_generation(generation_id))

    table = Table(title=details.id, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    for label, value in (
        ("Model", details.model),
        ("Provider", details.provider_name),
        ("Prompt tokens", details.tokens_prompt),
        ("Completion tokens", details.tokens_completion),
        ("Total cost", details.total_cost),
        ("Latency (ms)", details.latency),
    ):
        if value is not None:
            table.add_row(label, str(value))
    console.print(table)


@app.command(name="auth-url")
def auth_url(
    redirect_uri: Annotated[str, typer.Argument(help="Your OAuth callback URL")],
    state: Annotated[str | None, typer.Option("--state")] = None,
    scope: Annotated[
        list[str] | None, typer.Option("--scope", help="Requested scope (repeatable)")
    ] = None,
) -> None:
    """Print a PKCE authorization URL and the verifier to keep."""
    config = OAuthConfig(redirect_uri=redirect_uri, state=state, scopes=scope or [])
    result = AuthService().generate_authorization_url(config)
    console.print(result.url, markup=False, soft_wrap=True)
    err_console.print(f"state: {result.state}", markup=False)
    err_console.print(f"code_verifier: {result.challenge.code_verifier}", markup=False)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
