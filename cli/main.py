"""CLI entry point for the SagaScript offline cache and resource tools.

Usage:
  sagascript cache list          List every cached entry
  sagascript cache info KEY      Show age and TTL of one entry
  sagascript cache clear KEY     Drop one entry
  sagascript cache clear-all     Drop the whole offline cache
  sagascript usage               Plan usage (served from cache when offline)
  sagascript profile             Profile summary (served from cache when offline)
"""

import asyncio
import logging
import sys
from typing import Awaitable, Callable, TypeVar

import click

from api.api_client import SagaScriptClient
from api.resources import SagaScriptResources
from cli.theme import (
    get_console,
    app_header,
    command_panel,
    cache_info_panel,
    cache_table,
    usage_table,
)
from config.exceptions import SagaScriptError
from config.logging_config import setup_logging
from config.settings import Settings
from resilience.connectivity import ConnectivityMonitor
from resilience.notifications import RichNotifier
from resilience.offline_cache import OfflineCache, cached_keys
from storage import CacheStore, create_store

console = get_console()

T = TypeVar("T")


def _init_logging(verbose: bool):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    settings = Settings()
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


def _open_store(settings: Settings) -> CacheStore:
    return CacheStore(create_store(settings))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """SagaScript: offline-aware access to your series planning data.

    \b
    Examples:
      sagascript cache list
      sagascript usage --offline
    """
    _init_logging(verbose)


# ---------------------------------------------------------------------------
# cache commands
# ---------------------------------------------------------------------------

@cli.group()
def cache():
    """Inspect and clear the offline cache."""


@cache.command(name="list")
def cache_list():
    """List every entry in the offline cache."""
    settings = Settings()
    store = _open_store(settings)
    connectivity = ConnectivityMonitor()

    keys = cached_keys(store)
    if not keys:
        console.print("[warning]Offline cache is empty.[/]")
        return

    entries = {}
    for key in keys:
        with OfflineCache(
            key, store, connectivity,
            ttl_ms=settings.cache_default_ttl_ms,
            enable_notifications=False,
        ) as handle:
            info = handle.get_cache_info()
        if info is not None:
            entries[key] = info

    console.print(app_header())
    console.print(cache_table(entries))


@cache.command(name="info")
@click.argument("key")
def cache_info(key):
    """Show age and remaining TTL of one entry."""
    settings = Settings()
    store = _open_store(settings)
    with OfflineCache(
        key, store, ConnectivityMonitor(),
        ttl_ms=settings.cache_default_ttl_ms,
        enable_notifications=False,
    ) as handle:
        info = handle.get_cache_info()

    if info is None:
        console.print(f"[error]No cache entry for '{key}'[/]")
        sys.exit(1)
    console.print(cache_info_panel(key, info))


@cache.command(name="clear")
@click.argument("key")
def cache_clear(key):
    """Remove one entry, leaving every other key intact."""
    settings = Settings()
    store = _open_store(settings)
    with OfflineCache(key, store, ConnectivityMonitor(), enable_notifications=False) as handle:
        handle.clear_cache()
    console.print(f"[success]Cleared cache entry '{key}'[/]")


@cache.command(name="clear-all")
@click.confirmation_option(prompt="Delete the entire offline cache?")
def cache_clear_all():
    """Delete the whole offline cache blob."""
    settings = Settings()
    store = _open_store(settings)
    store.clear()
    console.print("[success]Offline cache cleared[/]")


# ---------------------------------------------------------------------------
# resource commands
# ---------------------------------------------------------------------------

async def _with_resources(
    settings: Settings,
    offline: bool,
    action: Callable[[SagaScriptResources], Awaitable[T]],
) -> T:
    """Run ``action`` against offline-aware resources bound to a live client.

    Online sessions keep probing the API every ``connectivity_check_interval``
    seconds so a connection lost mid-command switches reads to the cache.
    """
    connectivity = ConnectivityMonitor(is_online=not offline)
    notifier = RichNotifier(console) if settings.enable_notifications else None
    store = _open_store(settings)

    async with SagaScriptClient(settings) as client:
        if not offline:
            await connectivity.check(client.ping)
            connectivity.start_watching(client.ping, settings.connectivity_check_interval)
        resources = SagaScriptResources(
            client, store, connectivity, settings=settings, notifier=notifier,
        )
        try:
            return await action(resources)
        finally:
            resources.close()
            await connectivity.stop()


def _run(settings: Settings, offline: bool, action):
    try:
        return asyncio.run(_with_resources(settings, offline, action))
    except SagaScriptError as e:
        console.print(f"[error]{e}[/]")
        sys.exit(1)


@cli.command()
@click.option("--offline", is_flag=True, help="Do not touch the network; serve cached data only")
def usage(offline):
    """Show plan usage against subscription limits."""
    settings = Settings()
    result = _run(settings, offline, lambda r: r.plan_usage())

    console.print(app_header())
    console.print(usage_table(result.data))
    if result.from_cache:
        console.print("[muted]Showing cached data.[/]")

    approaching = [k for k, v in result.data.approaching_limits().items() if v]
    if approaching:
        console.print(
            f"[warning]Approaching plan limits: {', '.join(a.replace('_', ' ') for a in approaching)}[/]"
        )


@cli.command()
@click.option("--offline", is_flag=True, help="Do not touch the network; serve cached data only")
def profile(offline):
    """Show the profile summary."""
    settings = Settings()
    result = _run(settings, offline, lambda r: r.profile())

    data = result.data or {}
    fields = {
        "Name": str(data.get("displayName") or data.get("username") or "?"),
        "Email": str(data.get("email") or "-"),
    }
    if data.get("location"):
        fields["Location"] = str(data["location"])
    console.print(app_header())
    console.print(command_panel("Profile", fields))
    if result.from_cache:
        console.print("[muted]Showing cached data.[/]")


if __name__ == "__main__":
    cli()
