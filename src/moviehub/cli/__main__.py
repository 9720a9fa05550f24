from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import typer

from moviehub import __version__
from moviehub.clients import OmdbClient
from moviehub.config import Settings, SettingsError, SettingsLoadResult, load_settings
from moviehub.services import DetailError, WatchlistManager
from moviehub.storage import JsonFileBackend, PersistentListStore
from moviehub.ui import Line, MovieHubApp
from moviehub.ui import views

app = typer.Typer(
    add_completion=False,
    help="Search the OMDb catalog and keep a rated list of movies you watched.",
)

SHELL_HELP = """\
Commands:
  q TEXT          search for TEXT (fewer than 3 characters clears the results)
  open N|ID       open the N-th result or an IMDb id; opening it again closes it
  rate N          rate the open movie from 1 to 10
  add             add the open movie to your list
  back | esc      close the movie details
  rm ID           remove a movie from your list
  toggle NAME     collapse or expand the 'results' or 'watched' box
  help            show this message
  quit            leave the shell"""


@app.callback()
def _cli_entry(ctx: typer.Context) -> None:
    """Entrypoint for the moviehub CLI."""
    ctx.obj = {} if ctx.obj is None else ctx.obj


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


@app.command()
def search(
    query: str = typer.Argument(..., help="Title text to search for."),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Search the catalog and list matching titles."""
    if debug:
        _setup_logging(logging.INFO)
    settings = _require_catalog_settings()

    exit_code = asyncio.run(_run_search(settings, query))
    raise typer.Exit(code=exit_code)


@app.command()
def show(
    imdb_id: str = typer.Argument(..., help="IMDb id, e.g. tt1375666."),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Show full details for a single title."""
    if debug:
        _setup_logging(logging.INFO)
    settings = _require_catalog_settings()

    exit_code = asyncio.run(_run_show(settings, imdb_id))
    raise typer.Exit(code=exit_code)


@app.command()
def add(
    imdb_id: str = typer.Argument(..., help="IMDb id of the movie to add."),
    rating: int = typer.Option(..., min=1, max=10, help="Your rating from 1 to 10."),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Rate a movie and add it to your watched list."""
    if debug:
        _setup_logging(logging.INFO)
    settings = _require_catalog_settings()

    exit_code = asyncio.run(_run_add(settings, imdb_id, rating))
    raise typer.Exit(code=exit_code)


@app.command()
def watched(
    json_output: bool = typer.Option(
        False, "--json/--no-json", help="Output as JSON for programmatic use."
    ),
) -> None:
    """List your watched movies with summary statistics."""
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    watchlist = _build_watchlist(load_result.settings)
    summary = watchlist.summary_statistics()

    if json_output:
        output: dict[str, Any] = {
            "summary": summary.model_dump(),
            "movies": [item.model_dump(by_alias=True) for item in watchlist],
        }
        typer.echo(json.dumps(output, indent=2))
        return

    _echo_lines(views.watched_summary(summary))
    if len(watchlist) == 0:
        typer.secho("Your list is empty.", fg=typer.colors.YELLOW)
        return
    _echo_lines(views.watched_movies_list(watchlist))


@app.command()
def remove(imdb_id: str = typer.Argument(..., help="IMDb id to remove.")) -> None:
    """Remove a movie from your watched list."""
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    watchlist = _build_watchlist(load_result.settings)
    if not watchlist.contains(imdb_id):
        typer.secho(f"{imdb_id} is not on your list.", fg=typer.colors.YELLOW)
        return
    watchlist.remove(imdb_id)
    typer.secho(f"✓ Removed {imdb_id}", fg=typer.colors.GREEN)


@app.command()
def config(show_sources: bool = typer.Option(False, help="Display where settings came from.")) -> None:
    """Describe configuration expectations."""
    load_result = _safe_load_settings(load_even_if_missing=True)
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    values: dict[str, Any] = {
        "omdb_api_key": "<set>" if settings.omdb_api_key else "<unset>",
        "omdb_base_url": settings.omdb_base_url,
        "omdb_timeout": settings.omdb_timeout,
        "storage_path": settings.storage_path,
        "profile": settings.profile,
        "min_query_length": settings.min_query_length,
    }

    for key, value in values.items():
        typer.echo(f"{key}: {value}")

    if show_sources:
        source_hint = load_result.source_path or "<env/.env>"
        typer.echo(f"resolved_from: {source_hint}")
        typer.echo(
            "Configure ~/.config/moviehub/config.toml or set OMDB_API_KEY for persistent settings.",
        )


@app.command()
def shell(debug: bool = typer.Option(False, help="Enable debug logging.")) -> None:
    """Interactive session: search, open details, rate and manage your list."""
    if debug:
        _setup_logging(logging.INFO)
    settings = _require_catalog_settings()

    asyncio.run(_run_shell(settings))


@asynccontextmanager
async def _open_hub(settings: Settings) -> AsyncIterator[MovieHubApp]:
    assert settings.omdb_api_key is not None

    async with OmdbClient(
        settings.omdb_api_key,
        base_url=settings.omdb_base_url,
        timeout=settings.omdb_timeout,
    ) as client:
        hub = MovieHubApp(
            client,
            _build_store(settings),
            min_query_length=settings.min_query_length,
        )
        try:
            yield hub
        finally:
            await hub.aclose()


async def _run_search(settings: Settings, query: str) -> int:
    if len(query.strip()) < settings.min_query_length:
        typer.secho(
            f"Type at least {settings.min_query_length} characters to search.",
            fg=typer.colors.YELLOW,
        )
        return 1

    async with _open_hub(settings) as hub:
        hub.on_query_change(query)
        await hub.settle()

        _echo_lines(views.nav_bar(hub.search)[1:])
        _echo_lines(views.search_panel(hub.search))
        return 1 if hub.search.error else 0


async def _run_show(settings: Settings, imdb_id: str) -> int:
    async with _open_hub(settings) as hub:
        hub.on_select(imdb_id)
        await hub.settle()

        _echo_lines(views.movie_details(hub.detail))
        return 1 if hub.detail.error else 0


async def _run_add(settings: Settings, imdb_id: str, rating: int) -> int:
    """Fetch, rate and add one movie.

    Returns exit code:
    - 0: Added
    - 1: Catalog error
    - 2: Already on the list
    """
    async with _open_hub(settings) as hub:
        hub.on_select(imdb_id)
        await hub.settle()

        if hub.detail.error:
            _echo_lines(views.error_message(hub.detail.error))
            return 1

        existing = hub.detail.watched_rating
        if existing is not None:
            typer.secho(
                f"⊘ Already on your list with rating {existing}.",
                fg=typer.colors.YELLOW,
            )
            return 2

        hub.on_rate(rating)
        item = hub.on_add()
        typer.secho(f"✓ Added {item.title} ({item.year}) rated {item.user_rating}", fg=typer.colors.GREEN)
        return 0


async def _run_shell(settings: Settings) -> None:
    async with _open_hub(settings) as hub:
        typer.echo(SHELL_HELP)
        _echo_lines(hub.render())
        while True:
            try:
                raw = await asyncio.to_thread(
                    typer.prompt, hub.page_title, default="", show_default=False
                )
            except (typer.Abort, EOFError):
                typer.echo()
                break

            command, _, argument = raw.strip().partition(" ")
            if command in {"quit", "exit"}:
                break
            if command == "help":
                typer.echo(SHELL_HELP)
                continue

            try:
                handled = _dispatch_shell_command(hub, command.lower(), argument.strip())
            except (DetailError, ValueError, IndexError, KeyError) as exc:
                typer.secho(str(exc), fg=typer.colors.YELLOW)
                continue
            if not handled:
                typer.secho(f"Unknown command {command!r}. Type 'help'.", fg=typer.colors.YELLOW)
                continue

            await hub.settle()
            _echo_lines(hub.render())


def _dispatch_shell_command(hub: MovieHubApp, command: str, argument: str) -> bool:
    if command in {"q", "/q", "search"}:
        hub.on_query_change(argument)
    elif command == "open":
        if argument.isdigit():
            hub.on_select_result(int(argument))
        else:
            hub.on_select(argument)
    elif command == "rate":
        hub.on_rate(int(argument))
    elif command == "add":
        hub.on_add()
    elif command == "back":
        hub.on_close()
    elif command == "esc":
        hub.on_key("Escape")
    elif command == "rm":
        hub.on_remove(argument)
    elif command == "toggle":
        hub.toggle_box(argument)
    else:
        return False
    return True


def _build_store(settings: Settings) -> PersistentListStore:
    return PersistentListStore(JsonFileBackend(settings.storage_path, profile=settings.profile))


def _build_watchlist(settings: Settings) -> WatchlistManager:
    return WatchlistManager(_build_store(settings))


def _require_catalog_settings() -> Settings:
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    try:
        settings.require_omdb()
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    return settings


def _echo_lines(lines: list[Line]) -> None:
    for line in lines:
        typer.secho(line.text, fg=line.color, bold=line.bold)


def _safe_load_settings(load_even_if_missing: bool = False) -> SettingsLoadResult | None:
    try:
        return load_settings()
    except SettingsError as exc:
        if load_even_if_missing:
            typer.secho(
                f"Warning: configuration incomplete – {exc}",
                fg=typer.colors.YELLOW,
            )
            return SettingsLoadResult(settings=Settings(), source_path=None)
        typer.secho(str(exc), fg=typer.colors.RED)
        return None


def _setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for debug mode."""
    logging.basicConfig(
        format="%(message)s",
        level=level,
        force=True,
    )


def main() -> None:
    """Expose Typer app for the console script."""
    app()


if __name__ == "__main__":
    main()
