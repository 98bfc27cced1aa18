from __future__ import annotations

from typing import Any, Optional
from pathlib import Path
import os
import uuid

import typer
from rich.console import Console
from rich.table import Table
import httpx


app = typer.Typer()
console = Console()
err_console = Console(stderr=True)


def render_response(data: dict[str, Any]) -> None:
    console.print(data.get("reply", ""))
    graph = data.get("graph")
    if graph:
        table = Table(title="Temperature")
        table.add_column("Hour", justify="right")
        table.add_column("°C", justify="right")
        for point in graph:
            table.add_row(str(point.get("hour")), str(point.get("temp")))
        console.print(table)
    dust = data.get("dust")
    if dust:
        console.print(f"PM2.5 {dust.get('value')} ㎍/㎥ ({dust.get('level')})", style="bold")


@app.command()
def cli(
    prompt: Optional[str] = typer.Argument(None, help="Question to ask, e.g. '내일 서울 날씨 어때?'"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Device latitude."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Device longitude."),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User id whose profile personalises answers."),
    session: Optional[str] = typer.Option(None, "--session", "-s", help="Conversation id (random when omitted)."),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Append replies to this file."),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Keep asking follow-up questions after the first reply."
    ),
) -> None:
    orchestrator_url = os.getenv("ORCHESTRATOR_URL", "http://localhost:3002").rstrip("/")
    session_id = session or str(uuid.uuid4())
    if (lat is None) != (lon is None):
        err_console.print("--lat and --lon must be given together.", style="bold red")
        raise typer.Exit(code=2)

    def run_once(question: str) -> str:
        body: dict[str, Any] = {"userInput": question, "sessionId": session_id}
        if lat is not None and lon is not None:
            body["coords"] = {"lat": lat, "lon": lon}
        if user:
            body["userId"] = user
        with console.status("Checking the weather..."):
            try:
                resp = httpx.post(f"{orchestrator_url}/chat", json=body, timeout=60)
                resp.raise_for_status()
                data = resp.json()
            except httpx.HTTPStatusError as e:
                try:
                    detail = e.response.json().get("detail", e.response.text)
                except ValueError:
                    detail = e.response.text
                err_console.print(f"Request failed ({e.response.status_code}): {detail}", style="bold red")
                return ""
            except httpx.HTTPError as e:
                err_console.print(f"Request failed: {e}", style="bold red")
                return ""
        render_response(data)
        reply = data.get("reply", "")
        if output_file and reply:
            try:
                output_file.parent.mkdir(parents=True, exist_ok=True)
                with output_file.open("a", encoding="utf-8") as f:
                    if f.tell() > 0:
                        f.write("\n\n---\n\n")
                    f.write(f"> {question}\n\n{reply}")
            except OSError as e:
                err_console.print(f"Failed to write file: {e}", style="bold red")
        return reply

    def reset_session() -> None:
        try:
            resp = httpx.post(f"{orchestrator_url}/chat/reset", json={"sessionId": session_id}, timeout=10)
            resp.raise_for_status()
            console.print("Conversation reset.", style="green")
        except httpx.HTTPError as e:
            err_console.print(f"Reset failed: {e}", style="bold red")

    if prompt:
        run_once(prompt)
    elif not interactive:
        try:
            prompt = typer.prompt("Ask about the weather (e.g. '서울 날씨 어때?')")
        except (EOFError, KeyboardInterrupt):
            raise typer.Exit(code=1)
        if not prompt.strip():
            err_console.print("No input provided.", style="bold red")
            raise typer.Exit(code=1)
        run_once(prompt.strip())

    if interactive:
        while True:
            try:
                user_in = typer.prompt("Ask another question ('reset' clears history, 'exit' quits)")
            except (EOFError, KeyboardInterrupt):
                break
            lower = user_in.strip().lower()
            if not lower:
                continue
            if lower in {"exit", "quit", "q"}:
                break
            if lower == "reset":
                reset_session()
                continue
            run_once(user_in.strip())


if __name__ == "__main__":
    app()
