"""Rich theme and rendering helpers for cache and plan usage output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from models.cache_entry import CacheInfo
from models.plan_usage import PlanUsage

SAGA_THEME = Theme({
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "stat.label": "dim",
    "stat.value": "bold",
    "cache.key": "bold cyan",
    "cache.valid": "green",
    "cache.expired": "red",
    "usage.near": "yellow",
    "usage.full": "bold red",
})

_TABLE_STYLE = {"box": box.SIMPLE_HEAVY, "header_style": "bold", "show_edge": False, "padding": (0, 1)}


def get_console() -> Console:
    """Console with the SagaScript theme; writes to the current sys.stdout."""
    return Console(theme=SAGA_THEME)


def app_header(title: str = "sagascript") -> Rule:
    return Rule(title=f"[bold]{title}[/]", style="dim")


def format_duration_ms(ms: int) -> str:
    """Render milliseconds as a compact human duration (e.g. ``4m 05s``)."""
    seconds = max(0, ms) // 1000
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Panel of ``label: value`` lines, in the order given."""
    body = "\n".join(
        f"[stat.label]{label}:[/] [stat.value]{value}[/]" for label, value in fields.items()
    )
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def _cache_status(info: CacheInfo) -> str:
    return "[cache.expired]expired[/]" if info.is_expired else "[cache.valid]valid[/]"


def cache_info_panel(cache_key: str, info: CacheInfo) -> Panel:
    return command_panel(f"Cache: {cache_key}", {
        "Status": _cache_status(info),
        "Age": format_duration_ms(info.age),
        "Remaining": format_duration_ms(info.remaining),
        "Written": str(info.timestamp),
    })


def cache_table(entries: dict[str, CacheInfo]) -> Table:
    """One row per cache key with age, remaining TTL and status."""
    table = Table(**_TABLE_STYLE)
    table.add_column("Key", style="cache.key")
    table.add_column("Age", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Status")

    for key, info in entries.items():
        table.add_row(
            key,
            format_duration_ms(info.age),
            format_duration_ms(info.remaining),
            _cache_status(info),
        )
    return table


def usage_table(usage: PlanUsage) -> Table:
    """Plan usage per metric; percentages near or at the limit are highlighted."""
    table = Table(**_TABLE_STYLE)
    table.add_column("Resource", style="stat.label")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("%", justify="right")

    at_limits = usage.at_limits()
    approaching = usage.approaching_limits()
    for name, metric in usage.metrics().items():
        pct = f"{metric.percentage:.0f}%"
        if at_limits[name]:
            pct = f"[usage.full]{pct}[/]"
        elif approaching[name]:
            pct = f"[usage.near]{pct}[/]"
        table.add_row(name.replace("_", " "), str(metric.used), str(metric.limit), pct)
    return table
