#!/usr/bin/env python3
"""Manage minister accounts directly against the configured backend.

The login is remembered in the session file between runs, so an
administrator logs in once and then runs the other commands.

Usage:
    ministers_admin.py login <username>
    ministers_admin.py whoami
    ministers_admin.py list
    ministers_admin.py add
    ministers_admin.py deactivate <minister_id>
    ministers_admin.py logout
"""

import asyncio
import sys

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from visitation.config import get_settings
from visitation.exceptions import NotFoundError, PermissionDeniedError, VisitationError
from visitation.models.minister import MinisterInput, MinisterUpdate
from visitation.services.auth import MANAGE_MINISTERS, AuthGate, LoginResult
from visitation.services.registry import Services, build_services
from visitation.utils.logging import setup_logging

console = Console()


async def login(services: Services, gate: AuthGate, username: str) -> None:
    password = Prompt.ask("Password", password=True)
    result = await gate.login(username, password)
    if result is LoginResult.SUCCESS:
        console.print(f"[green]Logged in as {gate.minister.name} ({gate.minister.role})[/green]")
    elif result is LoginResult.INVALID_CREDENTIALS:
        console.print("[red]Invalid credentials[/red]")
    else:
        console.print("[red]Could not reach the records service, try again later[/red]")


async def whoami(services: Services, gate: AuthGate) -> None:
    if gate.minister is None:
        console.print("[yellow]Not logged in[/yellow]")
        return
    await gate.revalidate()
    console.print(f"{gate.minister.name} ({gate.minister.username}, {gate.minister.role})")


async def list_ministers(services: Services, gate: AuthGate) -> None:
    await gate.require_permission(MANAGE_MINISTERS)

    table = Table(title="Ministers")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Username")
    table.add_column("Role")
    table.add_column("Active")
    table.add_column("Last login")
    for minister in await services.ministers.list_all():
        table.add_row(
            str(minister.id),
            minister.name,
            minister.username,
            minister.role,
            "yes" if minister.is_active else "no",
            minister.last_login.strftime("%Y-%m-%d %H:%M") if minister.last_login else "",
        )
    console.print(table)


async def add_minister(services: Services, gate: AuthGate) -> None:
    await gate.require_permission(MANAGE_MINISTERS)

    data = MinisterInput(
        name=Prompt.ask("Name"),
        phone=Prompt.ask("Phone"),
        email=Prompt.ask("Email", default="") or None,
        username=Prompt.ask("Username"),
        password=Prompt.ask("Password", password=True),
        role="admin" if Confirm.ask("Administrator?", default=False) else "user",
    )
    minister = await services.ministers.create(data)
    console.print(f"[green]Created minister {minister.id} ({minister.username})[/green]")


async def deactivate(services: Services, gate: AuthGate, minister_id: str) -> None:
    await gate.require_permission(MANAGE_MINISTERS)

    minister = await services.ministers.update(int(minister_id), MinisterUpdate(is_active=False))
    console.print(f"[yellow]Deactivated {minister.username}[/yellow]")


async def logout(services: Services, gate: AuthGate) -> None:
    gate.logout()
    console.print("[yellow]Logged out[/yellow]")


COMMANDS = {
    "login": login,
    "whoami": whoami,
    "list": list_ministers,
    "add": add_minister,
    "deactivate": deactivate,
    "logout": logout,
}


async def run(command: str, args: list[str]) -> int:
    services = build_services(get_settings())
    gate = services.local_gate()
    try:
        await COMMANDS[command](services, gate, *args)
        return 0
    except PermissionDeniedError:
        if gate.is_authenticated:
            console.print("[red]You do not have permission to manage ministers[/red]")
        else:
            console.print("[yellow]Log in first with: ministers_admin.py login <username>[/yellow]")
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
    except VisitationError as e:
        console.print(f"[red]Records service error: {e}[/red]")
    except ValueError as e:
        # Bad ids and form input that fails validation
        console.print(f"[red]Invalid input: {e}[/red]")
    finally:
        await services.client.aclose()
    return 1


def main():
    """Main entry point for the admin script."""
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        console.print(__doc__)
        sys.exit(2)

    setup_logging()
    sys.exit(asyncio.run(run(sys.argv[1], sys.argv[2:])))


if __name__ == "__main__":
    main()
