"""
nano-food CLI.

Operational commands: schema creation, bootstrapping the first ROOT
account, demo data and a store connectivity check.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table as RichTable
from sqlalchemy import select
from sqlalchemy.orm import Session

from food_api.models import AddOn, Base, Branch, Category, MenuItem, Table, User
from food_shared.config.constants import Roles
from food_shared.config.settings import settings
from food_shared.infrastructure.db import engine, get_db_context, ping, safe_commit
from food_shared.security.password import hash_password
from food_shared.utils.exceptions import ConflictError

app = typer.Typer(
    name="nano-food",
    help="nano-food restaurant backend CLI",
    add_completion=False,
)
console = Console()

DEMO_TABLES = 6
DEMO_MENU = {
    "Mains": [
        ("Chicken Curry", 1000, 100, [("Extra Rice", 200), ("Fried Egg", 150)]),
        ("Beef Rendang", 1450, 0, [("Extra Rice", 200)]),
        ("Fried Noodles", 850, 0, []),
    ],
    "Drinks": [
        ("Iced Tea", 300, 0, [("Lemon", 50)]),
        ("Fresh Lime Soda", 350, 50, []),
    ],
}


def create_root_user(db: Session, name: str, email: str, password: str) -> User:
    """Create the verified ROOT account. Every other grant starts from it."""
    if db.scalar(select(User).where(User.email == email.lower())) is not None:
        raise ConflictError("Email already registered")
    user = User(
        name=name,
        email=email.lower(),
        password=hash_password(password),
        role=Roles.ROOT,
        is_verified=True,
    )
    db.add(user)
    safe_commit(db)
    db.refresh(user)
    return user


def seed_demo(db: Session) -> Branch | None:
    """
    Insert one branch with tables, categories, menus and add-ons.

    Returns None when a branch already exists.
    """
    if db.scalar(select(Branch.id).limit(1)) is not None:
        return None

    branch = Branch(name="Demo Branch", address="1 Market St")
    db.add(branch)
    db.flush()

    for number in range(1, DEMO_TABLES + 1):
        db.add(Table(branch_id=branch.id, name=f"T-{number:02d}", capacity=4))

    for category_title, menus in DEMO_MENU.items():
        category = Category(branch_id=branch.id, title=category_title)
        db.add(category)
        db.flush()
        for title, price_cents, discount_cents, add_ons in menus:
            db.add(
                MenuItem(
                    branch_id=branch.id,
                    category_id=category.id,
                    title=title,
                    price_cents=price_cents,
                    discount_cents=discount_cents,
                    add_ons=[AddOn(title=t, price_cents=p) for t, p in add_ons],
                )
            )

    safe_commit(db)
    db.refresh(branch)
    return branch


# =============================================================================
# Database Commands
# =============================================================================


@app.command()
def db_init():
    """Create missing tables."""
    Base.metadata.create_all(bind=engine)
    console.print(f"[green]✓ Schema ready on {engine.dialect.name}[/green]")


@app.command()
def db_seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed a demo branch with tables and a small menu."""
    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    Base.metadata.create_all(bind=engine)
    with get_db_context() as db:
        branch = seed_demo(db)
        if branch is None:
            console.print("[yellow]Database already has branches. Skipping seed.[/yellow]")
            return
        console.print(f"[green]✓ Seeded branch {branch.id} ({branch.name})[/green]")


# =============================================================================
# User Commands
# =============================================================================


@app.command()
def create_root(
    email: str = typer.Option(..., prompt=True),
    name: str = typer.Option("Root", help="Display name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create the first ROOT account."""
    with get_db_context() as db:
        try:
            user = create_root_user(db, name, email, password)
        except ConflictError as exc:
            console.print(f"[red]✗ {exc.detail}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]✓ ROOT user {user.id} created[/green]")


# =============================================================================
# Health Commands
# =============================================================================


@app.command()
def check():
    """Check store connectivity."""
    table = RichTable(title="Store")
    table.add_column("Dialect", style="cyan")
    table.add_column("Status", style="green")

    with get_db_context() as db:
        try:
            ping(db)
            table.add_row(engine.dialect.name, "✓ Healthy")
        except Exception as e:
            table.add_row(engine.dialect.name, f"✗ {type(e).__name__}")
            console.print(table)
            raise typer.Exit(1)

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from food_api import __version__

    table = RichTable(title="nano-food Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("API", __version__)
    table.add_row("Python", sys.version.split()[0])
    console.print(table)


if __name__ == "__main__":
    app()
