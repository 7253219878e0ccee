"""High-level API for building and verifying download lists."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .compression import IdentityCompressor, Lz10Compressor, decompress_lz10
from .config import BuildConfig
from .constants import build_pairs
from .context import BuildContext
from .listing.builder import BuildResult
from .logging import get_logger, section
from .orchestrator import AdmissionGate, run_builds
from .packing.errors import (
    CollaboratorError,
    E_QUERY,
    E_SIZE_MISMATCH,
    E_WRITE_IO,
    ProtocolError,
    config_error,
)
from .packing.inspector import validate_list, verify_list
from .reporting import get_reporter
from .sources.catalog import load_catalog
from .sources.metadata import (
    MetadataProvider,
    NullMetadataProvider,
    load_metadata,
)
from .storage import FileStorage

__all__ = [
    "BuildSummary",
    "create_context",
    "build_lists",
    "verify_list_file",
]


@dataclass(slots=True)
class BuildSummary:
    results: list[BuildResult]
    peak_concurrency: int

    @property
    def total_bytes(self) -> int:
        return sum(r.compressed_size for r in self.results)


def create_context(config: BuildConfig) -> BuildContext:
    if config.catalog is None:
        raise config_error("No catalog configured")
    try:
        catalog = load_catalog(config.catalog)
    except FileNotFoundError as exc:
        raise config_error(f"Catalog not found: {config.catalog}") from exc
    except ValueError as exc:
        raise CollaboratorError(
            E_QUERY, f"Cannot load catalog: {exc}", {"path": str(config.catalog)}
        ) from exc
    metadata: MetadataProvider = NullMetadataProvider()
    if config.metadata is not None:
        try:
            metadata = load_metadata(config.metadata)
        except FileNotFoundError as exc:
            raise config_error(f"Metadata not found: {config.metadata}") from exc
        except ValueError as exc:
            raise config_error(str(exc), {"path": str(config.metadata)}) from exc
    return BuildContext(
        catalog=catalog,
        metadata=metadata,
        compressor=Lz10Compressor() if config.compress else IdentityCompressor(),
        storage=FileStorage(config.output_dir),
        generate_titles=config.generate_titles,
    )


def build_lists(
    config: BuildConfig, context: Optional[BuildContext] = None
) -> BuildSummary:
    """Build every configured (region, language) list.

    Raises :class:`BuildFailedError` for the first failed build; nothing
    is returned for partial success.
    """
    logger = get_logger()
    rep = get_reporter()
    ctx = context or create_context(config)
    pairs = build_pairs(config.selected_regions())
    gate = AdmissionGate(config.concurrency)
    with ctx:
        with section("Prepare"):
            ctx.prepare()
        with section("Build"):
            results = run_builds(ctx, pairs, gate=gate)
    summary = BuildSummary(results=results, peak_concurrency=gate.peak)
    logger.debug(
        "Built %d lists with peak concurrency %d", len(results), gate.peak
    )
    rep.status(
        "Build summary: "
        + f"lists={len(results)} bytes={summary.total_bytes} "
        + f"concurrency={config.concurrency} output={config.output_dir}"
    )
    return summary


def verify_list_file(path: str | Path, *, compressed: bool = True) -> dict[str, Any]:
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as exc:
        raise CollaboratorError(
            E_WRITE_IO, f"Cannot read {p}: {exc}", {"path": str(p)}
        ) from exc
    payload = decompress_lz10(raw) if compressed else raw
    rep = get_reporter()
    problems = validate_list(payload)
    for problem in problems:
        rep.error(problem, path=str(p))
    info = verify_list(payload)
    if problems:
        # header invariants hold but a table runs past the payload
        raise ProtocolError(
            E_SIZE_MISMATCH, problems[0], {"path": str(p), "problems": problems}
        )
    info["problems"] = problems
    rep.status(
        "Verify summary: "
        + f"file={p.name} size={info['size']} crc={info['checksum']:08x} ok=true"
    )
    return info
