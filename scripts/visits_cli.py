#!/usr/bin/env python3
"""Interactive terminal client for the visitation records API."""

import sys

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

SESSION_HEADER = "X-Session-Id"


class VisitsCLI:
    """Small menu-driven front end over the HTTP API."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize the CLI."""
        self.base_url = base_url
        self.session_id: str | None = None
        self.console = Console()
        self.client = httpx.Client(base_url=base_url, timeout=30.0)

    def start(self) -> None:
        """Start the interactive loop."""
        self.console.print(
            Panel.fit(
                "[bold blue]Pastoral Visitation Records[/bold blue]\n"
                "Commands: /login, /patients, /day, /schedule, /report, /logout, /help, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]Cannot connect to the service at {self.base_url}.[/red]")
            return

        commands = {
            "/login": self._login,
            "/logout": self._logout,
            "/patients": self._list_patients,
            "/day": self._show_day,
            "/schedule": self._schedule,
            "/report": self._report,
            "/help": self._show_help,
        }

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]>[/bold cyan]").strip()
                if user_input.lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                if not user_input:
                    continue

                command, *args = user_input.split()
                handler = commands.get(command.lower())
                if handler is None:
                    self.console.print(f"[yellow]Unknown command {command}, try /help[/yellow]")
                    continue
                handler(*args)
        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]Goodbye![/yellow]")
            self.client.close()

    def _test_connection(self) -> bool:
        try:
            return self.client.get("/health").status_code == 200
        except httpx.HTTPError:
            return False

    def _request(self, method: str, path: str, **kwargs) -> dict | list | None:
        headers = {SESSION_HEADER: self.session_id} if self.session_id else {}
        try:
            response = self.client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self.console.print(f"[red]Connection error: {e}[/red]")
            return None

        self.session_id = response.headers.get(SESSION_HEADER, self.session_id)
        if response.is_error:
            detail = response.json().get("detail") if response.content else response.reason_phrase
            self.console.print(f"[red]{response.status_code}: {detail}[/red]")
            return None
        return response.json() if response.content else {}

    def _login(self, *args: str) -> None:
        username = args[0] if args else Prompt.ask("Username")
        password = Prompt.ask("Password", password=True)
        data = self._request("POST", "/auth/login", json={"username": username, "password": password})
        if data:
            minister = data["minister"]
            self.console.print(f"[green]Welcome, {minister['name']} ({minister['role']})[/green]")

    def _logout(self, *args: str) -> None:
        if self._request("POST", "/auth/logout") is not None:
            self.console.print("[yellow]Logged out[/yellow]")

    def _patient_table(self, title: str, patients: list[dict]) -> Table:
        table = Table(title=title)
        table.add_column("ID", style="dim", overflow="fold")
        table.add_column("Name", style="bold")
        table.add_column("District")
        table.add_column("Phones")
        table.add_column("Status")
        for patient in patients:
            table.add_row(
                patient["id"], patient["name"], patient["district"], ", ".join(patient["phones"]), patient["status"]
            )
        return table

    def _list_patients(self, *args: str) -> None:
        params = {"status": args[0]} if args else None
        patients = self._request("GET", "/patients", params=params)
        if patients is not None:
            self.console.print(self._patient_table("Patients", patients))

    def _show_day(self, *args: str) -> None:
        day = args[0] if args else Prompt.ask("Date (YYYY-MM-DD)")
        appointments = self._request("GET", "/appointments", params={"date": day})
        if appointments is None:
            return
        table = Table(title=f"Visits on {day}")
        table.add_column("ID")
        table.add_column("Patient", overflow="fold")
        table.add_column("Minister")
        table.add_column("Notes")
        for apt in appointments:
            table.add_row(str(apt["id"]), apt["patient_id"], apt["minister_name"], apt.get("notes") or "")
        self.console.print(table)

    def _schedule(self, *args: str) -> None:
        me = self._request("GET", "/auth/me")
        if not me or not me.get("minister"):
            self.console.print("[yellow]Log in first with /login[/yellow]")
            return

        patients = self._request("GET", "/appointments/active-patients")
        if not patients:
            return
        self.console.print(self._patient_table("Active patients", patients))

        patient_id = Prompt.ask("Patient ID")
        day = Prompt.ask("Date (YYYY-MM-DD)")
        notes = Prompt.ask("Notes", default="")

        payload = {
            "patient_id": patient_id,
            "minister_id": me["minister"]["id"],
            "minister_name": me["minister"]["name"],
            "date": day,
            "notes": notes or None,
        }
        appointment = self._request("POST", "/appointments", json=payload)
        if appointment:
            self.console.print(f"[green]Visit {appointment['id']} scheduled for {appointment['date']}[/green]")

    def _report(self, *args: str) -> None:
        kind = args[0] if args else "all"
        report = self._request("GET", "/reports/patients", params={"kind": kind})
        if report:
            self.console.print(self._patient_table(f"{report['title']} ({report['total']})", report["patients"]))

    def _show_help(self, *args: str) -> None:
        help_text = """
[bold]Commands:[/bold]
• /login [username] - Log in
• /patients [active|recovered|deceased] - List patients
• /day YYYY-MM-DD - Visits scheduled on a date
• /schedule - Schedule a visit to an active patient
• /report [all|active|recovered|deceased|by_district] - Patient report
• /logout - Log out
• /quit or /exit - Exit
        """
        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    cli = VisitsCLI(base_url)
    cli.start()


if __name__ == "__main__":
    main()
