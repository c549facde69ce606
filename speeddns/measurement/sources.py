"""
Endpoint source resolution: which address pool file cfst should test.
"""

from __future__ import annotations

from pathlib import Path

from speeddns.domain.models import IPType
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class EndpointSourceError(RuntimeError):
    """The selected address pool cannot be provided."""


def _read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise EndpointSourceError(f"cannot read address pool {path}: {exc}") from exc


def combine_files(destination: Path, *sources: Path) -> Path:
    """
    Concatenate `sources` into `destination`, each followed by a newline.

    Every source is read before the destination is touched, so a missing input
    leaves no half-written file behind.
    """
    contents = [_read_source(src) for src in sources]
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("wb") as out:
            for content in contents:
                out.write(content)
                out.write(b"\n")
    except OSError as exc:
        raise EndpointSourceError(f"cannot write merged address pool {destination}: {exc}") from exc
    return destination


def resolve_source_file(
    ip_type: IPType | str,
    ip4_file: Path,
    ip6_file: Path,
    combined_file: Path,
) -> Path:
    """
    Return the file cfst should read its candidate addresses from.

    Raises
    ------
    EndpointSourceError
        The selected file (or either input of a merge) is missing or
        unreadable, or the merged file cannot be written.
    """
    mode = IPType(ip_type)
    if mode is IPType.BOTH:
        path = combine_files(combined_file, ip4_file, ip6_file)
        log.info(
            "Merged IPv4 and IPv6 address pools",
            extra={"ip4": str(ip4_file), "ip6": str(ip6_file), "combined": str(path)},
        )
        return path

    path = ip6_file if mode is IPType.V6 else ip4_file
    if not path.is_file():
        raise EndpointSourceError(f"address pool file not found: {path}")
    return path


__all__ = ["EndpointSourceError", "combine_files", "resolve_source_file"]
