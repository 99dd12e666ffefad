"""Ask the deployed site to drop its cached data after a write."""

import httpx
from rich.console import Console

from .config import Settings

console = Console()


def trigger_revalidation(settings: Settings, timeout: float = 10.0) -> bool:
    """POST the revalidation secret to the site.

    Skipped when SITE_URL or REVALIDATE_SECRET is unset. Failures are
    reported, never raised; stale caches expire on their own.

    Returns:
        True if the site accepted the request
    """
    if not settings.site_url or not settings.revalidate_secret:
        console.print("[dim]⊘ SITE_URL or REVALIDATE_SECRET not set, skipping revalidation[/dim]")
        return False

    url = f"{settings.site_url.rstrip('/')}/api/revalidate"
    try:
        response = httpx.post(url, json={"secret": settings.revalidate_secret}, timeout=timeout)
    except httpx.RequestError as e:
        console.print(f"[red]✗[/red] Revalidation request failed: {e}")
        return False

    if response.status_code != 200:
        console.print(f"[red]✗[/red] Revalidation failed: HTTP {response.status_code} - {response.text[:200]}")
        return False

    try:
        stamp = response.json().get("timestamp", "")
    except ValueError:
        stamp = ""
    console.print(f"[green]✓[/green] Cache revalidated {stamp}")
    return True
