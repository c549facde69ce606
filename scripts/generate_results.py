"""
Sample data generator for local dry runs.

Writes deterministic address pools (`ip.txt`, `ipv6.txt`), a ranked
`result.csv` in cfst's output layout, and optionally a stand-in `cfst`
shell script that copies that CSV to its `-o` argument. Pointing DATA_DIR at
the output directory lets `speeddns run` exercise everything except the real
speed test.
"""

from __future__ import annotations

import csv
import random
import stat
import sys
from pathlib import Path

import typer

app = typer.Typer(help="Generate sample address pools, cfst results and a fake cfst.")

RESULT_HEADER = [
    "IP Address",
    "Sent",
    "Received",
    "Loss Rate",
    "Avg Latency",
    "Download Speed (MB/s)",
]

FAKE_CFST = """#!/bin/sh
# Stand-in for cfst: copy the canned result to the -o path.
out=result.csv
code={exit_code}
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift ;;
  esac
  shift
done
echo "fake cfst: writing $out"
echo "fake cfst: diagnostics on stderr" >&2
cp "{source}" "$out" || code=1
exit $code
"""


def _sample_addresses(rng: random.Random, count: int, ipv6: bool) -> list[str]:
    if ipv6:
        return [f"2001:db8::{rng.randint(1, 0xFFFF):x}" for _ in range(count)]
    prefixes = ["198.51.100", "203.0.113"]
    return [f"{rng.choice(prefixes)}.{rng.randint(1, 254)}" for _ in range(count)]


def _write_pool(path: Path, addresses: list[str]) -> None:
    # No trailing newline, like hand-edited uploads often are.
    path.write_text("\n".join(addresses), encoding="utf-8")


def _generate_results_csv(csv_path: Path, addresses: list[str], seed: int) -> None:
    rng = random.Random(seed)
    rows = []
    for address in addresses:
        latency = round(rng.uniform(20, 300), 2)
        speed = round(rng.uniform(0.5, 40), 2)
        rows.append([address, "4", "4", "0.00", f"{latency:.2f}", f"{speed:.2f}"])
    # cfst ranks by speed, best first.
    rows.sort(key=lambda row: float(row[5]), reverse=True)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(RESULT_HEADER)
        writer.writerows(rows)


def _write_fake_cfst(path: Path, canned_result: Path, exit_code: int = 0) -> None:
    path.write_text(FAKE_CFST.format(source=canned_result, exit_code=exit_code), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@app.command()
def main(
    output: Path = typer.Option(
        Path("data"),
        "--output",
        "-o",
        help="Directory to write the sample files into.",
    ),
    count: int = typer.Option(
        20,
        "--count",
        "-n",
        help="Number of addresses per pool.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    fake_cfst: bool = typer.Option(
        False,
        "--fake-cfst",
        help="Also write a stand-in cfst executable.",
    ),
) -> None:
    """
    Generate address pools and a ranked result CSV.
    """
    rng = random.Random(seed)
    output.mkdir(parents=True, exist_ok=True)

    ip4 = _sample_addresses(rng, count, ipv6=False)
    ip6 = _sample_addresses(rng, count, ipv6=True)
    _write_pool(output / "ip.txt", ip4)
    _write_pool(output / "ipv6.txt", ip6)

    canned = output / "sample_result.csv"
    _generate_results_csv(canned, ip4, seed=seed)
    typer.echo(f"Wrote {count} IPv4 and {count} IPv6 addresses and {canned}")

    if fake_cfst:
        _write_fake_cfst(output / "cfst", canned)
        typer.echo(f"Wrote fake cfst -> {output / 'cfst'}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
