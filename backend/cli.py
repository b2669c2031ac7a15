"""
Street Food Portal CLI.

Command-line interface for common operator tasks.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="street-food-portal",
    help="Street Food Portal operator CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command("init-db")
def init_db():
    """Create all tables."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def seed():
    """Insert the reference areas (idempotent)."""
    from shared.infrastructure.db import get_db_context, safe_commit
    from rest_api.seed import seed_areas

    with get_db_context() as db:
        inserted = seed_areas(db)
        safe_commit(db)
    console.print(f"[green]✓ {inserted} area(s) inserted[/green]")


# =============================================================================
# Profile Commands
# =============================================================================

@app.command()
def provision(
    identity_id: str = typer.Argument(..., help="External identity ID"),
    name: str = typer.Option(None, "--name", help="Full name (defaults to 'User')"),
    phone: str = typer.Option(None, "--phone", help="Phone number"),
    role: str = typer.Option(None, "--role", help="Set this role after provisioning"),
):
    """Provision the profile for an identity, optionally setting its role."""
    from shared.config.constants import Roles
    from shared.infrastructure.db import get_db_context
    from shared.security.auth import CallerIdentity
    from rest_api.services.domain import ProfileService

    if role is not None and role not in Roles.ALL:
        console.print(f"[red]✗ Unknown role '{role}'. Choose from: {', '.join(Roles.ALL)}[/red]")
        raise typer.Exit(1)

    with get_db_context() as db:
        service = ProfileService(db)
        profile, created = service.provision(CallerIdentity(id=identity_id, phone=phone, full_name=name))
        if role is not None and profile.role != role:
            # Operator action: no caller context, write directly
            profile.role = role
            service.commit()

        state = "created" if created else "already existed"
        console.print(f"[green]✓ Profile {profile.id} {state} (role: {profile.role})[/green]")


@app.command()
def token(
    identity_id: str = typer.Argument(..., help="External identity ID"),
    name: str = typer.Option(None, "--name", help="Full name claim"),
    ttl: int = typer.Option(3600, "--ttl", help="Lifetime in seconds"),
):
    """Sign a development identity token."""
    from shared.config.settings import settings
    from shared.security.auth import sign_identity_token

    if settings.environment == "production":
        console.print("[red]✗ Refusing to sign tokens in production[/red]")
        raise typer.Exit(1)

    # Plain echo: rich would fold the token at the terminal width
    typer.echo(sign_identity_token(identity_id, full_name=name, ttl_seconds=ttl))


# =============================================================================
# Rating Commands
# =============================================================================

@app.command()
def recompute():
    """Rebuild every vendor's rating aggregate from its ratings."""
    from shared.infrastructure.db import get_db_context, safe_commit
    from rest_api.services.domain import recompute_all_vendor_aggregates

    with get_db_context() as db:
        count = recompute_all_vendor_aggregates(db)
        safe_commit(db)
    console.print(f"[green]✓ Recomputed {count} vendor aggregate(s)[/green]")


@app.command()
def stats():
    """Show dashboard statistics."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import StatsService

    with get_db_context() as db:
        data = StatsService(db).dashboard_stats()

    table = Table(title="Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in data.items():
        table.add_row(key.replace("_", " "), str(value))

    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Street Food Portal Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "1.0.0")
    table.add_row("CLI", "1.0.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
