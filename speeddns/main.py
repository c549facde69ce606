from __future__ import annotations

import json
import sys
import threading
from typing import Any, Dict, Optional, Tuple

import typer
from pydantic import ValidationError

from speeddns import __version__
from speeddns.config import Settings, get_settings
from speeddns.infrastructure.config_store import ConfigStore
from speeddns.orchestrator import STATUS_FAILED, RunCoordinator
from speeddns.reporter import print_run_result
from speeddns.scheduler import CronScheduler
from speeddns.utils.log_sink import LogSink, get_log_sink
from speeddns.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Speed-test endpoints with cfst and publish the fastest as DNS records.")
log = get_logger(__name__)


def _bootstrap() -> Tuple[Settings, LogSink, ConfigStore]:
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    sink = get_log_sink(settings.log_file)
    configure_logging(level=settings.log_level, json_logs=settings.log_json, sink=sink)
    return settings, sink, ConfigStore(settings.config_file)


def _mask(value: str) -> str:
    if not value:
        return ""
    return value[:4] + "****" if len(value) > 8 else "****"


@app.command()
def info() -> None:
    """
    Show effective settings and the stored run configuration.
    """
    settings, _, store = _bootstrap()
    config = store.current
    typer.echo(
        f"speeddns {__version__} | data_dir={settings.data_dir} | "
        f"api={settings.dns_api_base_url}"
    )
    payload = config.model_dump(mode="json")
    payload["api_key"] = _mask(payload["api_key"])
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def configure(
    cron_spec: Optional[str] = typer.Option(None, "--cron", help="Cron expression, empty disables."),
    zone_id: Optional[str] = typer.Option(None, "--zone-id"),
    api_key: Optional[str] = typer.Option(None, "--api-key"),
    email: Optional[str] = typer.Option(None, "--email"),
    main_domain: Optional[str] = typer.Option(None, "--main-domain", help="Root domain of the zone."),
    domains: Optional[str] = typer.Option(None, "--domains", help="Comma-separated target domains."),
    download_url: Optional[str] = typer.Option(None, "--download-url"),
    test_count: Optional[int] = typer.Option(None, "--test-count"),
    max_result: Optional[int] = typer.Option(None, "--max-result"),
    min_speed: Optional[float] = typer.Option(None, "--min-speed"),
    max_delay: Optional[int] = typer.Option(None, "--max-delay"),
    min_delay: Optional[int] = typer.Option(None, "--min-delay"),
    test_port: Optional[int] = typer.Option(None, "--test-port"),
    ip_type: Optional[str] = typer.Option(None, "--ip-type", help="v4, v6 or both."),
    colo: Optional[str] = typer.Option(None, "--colo", help="Region codes, e.g. HKG,SJC."),
    enable_httping: Optional[bool] = typer.Option(None, "--httping/--no-httping"),
) -> None:
    """
    Update and persist the run configuration.
    """
    _, _, store = _bootstrap()
    changes: Dict[str, Any] = {
        key: value
        for key, value in {
            "cron_spec": cron_spec,
            "zone_id": zone_id,
            "api_key": api_key,
            "email": email,
            "main_domain": main_domain,
            "domains": domains,
            "download_url": download_url,
            "test_count": test_count,
            "max_result": max_result,
            "min_speed": min_speed,
            "max_delay": max_delay,
            "min_delay": min_delay,
            "test_port": test_port,
            "ip_type": ip_type,
            "colo": colo,
            "enable_httping": enable_httping,
        }.items()
        if value is not None
    }
    if not changes:
        typer.echo("Nothing to change.")
        return
    try:
        store.save(**changes)
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(f"Saved {', '.join(sorted(changes))}.")


@app.command()
def run() -> None:
    """
    Run the speed test and DNS update once, now.
    """
    settings, sink, store = _bootstrap()
    coordinator = RunCoordinator(settings, store, sink)
    result = coordinator.run_once()
    sink.flush()
    print_run_result(dict(result))
    if result["status"] == STATUS_FAILED:
        raise typer.Exit(code=1)


@app.command()
def serve() -> None:
    """
    Run on the configured cron schedule until interrupted.
    """
    settings, sink, store = _bootstrap()
    coordinator = RunCoordinator(settings, store, sink)
    scheduler = CronScheduler(coordinator.trigger)
    store.subscribe(scheduler.on_config_saved)
    scheduler.update(store.current.cron_spec)
    scheduler.start()
    log.info(f"speeddns {__version__} scheduler running", extra={"data_dir": str(settings.data_dir)})
    idle = threading.Event()
    try:
        # Saves from `speeddns configure` land on disk; reloading notifies the scheduler.
        while not idle.wait(settings.config_poll_seconds):
            store.refresh()
    finally:
        scheduler.stop()
        sink.flush()


@app.command()
def logs(
    offset: int = typer.Option(0, "--offset", "-o", help="Byte offset to read from."),
    clear: bool = typer.Option(False, "--clear", help="Truncate the log file."),
) -> None:
    """
    Print the log file from an offset, or clear it.
    """
    settings = get_settings()
    sink = get_log_sink(settings.log_file)
    if clear:
        sink.clear()
        typer.echo("ok")
        return
    content, next_offset = sink.read(offset)
    typer.echo(content, nl=False)
    typer.echo(f"\n-- next offset: {next_offset}", err=True)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
