from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, Iterable, Sequence

from ftoc.exceptions import FeatureFileError
from ftoc.ingest.adapter_contract import ParseFailure
from ftoc.ingest.registry import parser_for
from ftoc.model.feature import Feature

logger = logging.getLogger(__name__)

FEATURE_SUFFIX = ".feature"
DEFAULT_PARALLEL_THRESHOLD = 5
MAX_WORKERS = 16
DEFAULT_EXCLUDE_DIRS: frozenset[str] = frozenset({".git", "node_modules", "target", "build"})

ParseFn = Callable[[Path], Feature]


@dataclass(frozen=True)
class CorpusLoad:
    paths: tuple[Path, ...]
    features: tuple[Feature, ...]
    failures: tuple[ParseFailure, ...]
    parallel: bool = False


def iter_feature_paths(
    paths: Iterable[str | Path],
    *,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """Expand input paths to feature files, pruning excluded directories early.

    Explicit file arguments are kept even when they do not exist, so the
    loader can report them as failures.
    """
    excluded = set(exclude_dirs)
    out: list[Path] = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            for root, dirnames, filenames in os.walk(path, topdown=True):
                dirnames[:] = sorted(d for d in dirnames if d not in excluded)
                for filename in sorted(filenames):
                    if not filename.endswith(FEATURE_SUFFIX):
                        continue
                    out.append(Path(root) / filename)
        else:
            out.append(path)
    return sorted(dict.fromkeys(out))


def default_worker_count() -> int:
    return max(1, min(os.cpu_count() or 1, MAX_WORKERS))


def parse_feature_file(path: Path, *, detect_dialect: bool = True) -> Feature:
    parser = parser_for(path, detect_dialect=detect_dialect)
    return parser.parse_file(path)


def _failure_for(path: Path, exc: Exception) -> ParseFailure:
    cause = exc.cause if isinstance(exc, FeatureFileError) else exc
    stage = "decode" if isinstance(cause, UnicodeError) else "read"
    return ParseFailure(path=path, stage=stage, error=f"{type(cause).__name__}: {cause}")


def _parse_guarded(
    path: Path, parse_fn: ParseFn
) -> tuple[Feature | None, ParseFailure | None]:
    try:
        return parse_fn(path), None
    except (FeatureFileError, OSError, UnicodeError) as exc:
        failure = _failure_for(path, exc)
        logger.warning("Skipping %s: %s", path, failure.error)
        return None, failure


def _sorted_features(features: Iterable[Feature]) -> tuple[Feature, ...]:
    return tuple(sorted(features, key=lambda feature: feature.path))


def _sorted_failures(failures: Iterable[ParseFailure]) -> tuple[ParseFailure, ...]:
    return tuple(sorted(failures, key=lambda failure: str(failure.path)))


def parse_sequential(
    paths: Sequence[Path], parse_fn: ParseFn
) -> tuple[tuple[Feature, ...], tuple[ParseFailure, ...]]:
    features: list[Feature] = []
    failures: list[ParseFailure] = []
    for path in paths:
        logger.debug("Parsing %s", path)
        feature, failure = _parse_guarded(path, parse_fn)
        if feature is not None:
            features.append(feature)
        if failure is not None:
            failures.append(failure)
    return _sorted_features(features), _sorted_failures(failures)


def parse_parallel(
    paths: Sequence[Path],
    parse_fn: ParseFn,
    *,
    max_workers: int | None = None,
) -> tuple[tuple[Feature, ...], tuple[ParseFailure, ...]]:
    features: list[Feature] = []
    failures: list[ParseFailure] = []
    results_lock = threading.Lock()

    def _work(path: Path) -> None:
        logger.debug("Parsing %s", path)
        feature, failure = _parse_guarded(path, parse_fn)
        with results_lock:
            if feature is not None:
                features.append(feature)
            if failure is not None:
                failures.append(failure)

    workers = max_workers if max_workers is not None else default_worker_count()
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_work, path) for path in paths]
        for future in concurrent.futures.as_completed(futures):
            future.result()
    # Completion order is arbitrary; sort so callers see source order.
    return _sorted_features(features), _sorted_failures(failures)


def load_features(
    paths: Iterable[str | Path],
    *,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
    max_workers: int | None = None,
    detect_dialect: bool = True,
    parse_fn: ParseFn | None = None,
) -> CorpusLoad:
    """Discover and parse every feature file under ``paths``.

    Corpora larger than ``parallel_threshold`` files are parsed on a thread
    pool. If the pool itself fails, the same file list is parsed again
    sequentially. A file that cannot be read becomes a ``ParseFailure`` and
    never aborts the batch.
    """
    resolved = tuple(iter_feature_paths(paths))
    parse = parse_fn or partial(parse_feature_file, detect_dialect=detect_dialect)

    if len(resolved) > parallel_threshold:
        logger.info("Parsing %d feature files in parallel", len(resolved))
        try:
            features, failures = parse_parallel(resolved, parse, max_workers=max_workers)
        except (RuntimeError, ValueError) as exc:
            logger.warning("Parallel parsing failed (%s); retrying sequentially", exc)
        else:
            return CorpusLoad(
                paths=resolved, features=features, failures=failures, parallel=True
            )

    features, failures = parse_sequential(resolved, parse)
    return CorpusLoad(paths=resolved, features=features, failures=failures, parallel=False)
