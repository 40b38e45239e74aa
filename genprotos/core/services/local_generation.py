"""
Local batch generator — regenerate description files kept in the repo.

Each configured job names a directory.  Every ``.proto`` file under it
is compiled separately (so one file's options never leak into
another's) into a shared staging directory with
``paths=source_relative``.

Go's ``./...`` pattern skips ``testdata`` directories, so for jobs
rooted at a ``testdata`` directory a ``gen_test.go`` is synthesized that
blank-imports every generated sub-package; building the module's tests
then builds and initializes them too.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path

from genprotos.adapters.shell.command import Protoc, format_go_source
from genprotos.adapters.shell.filesystem import walk_files, write_file
from genprotos.core.models.generation import GenerationJob
from genprotos.core.models.settings import Settings

logger = logging.getLogger(__name__)

IMPORT_TEST_FILE = "gen_test.go"


@dataclass
class JobResult:
    """What one job produced."""

    job: GenerationJob
    generated: list[str] = field(default_factory=list)     # repo-relative .proto paths
    skipped: list[str] = field(default_factory=list)       # legacy or excluded
    sub_packages: set[str] = field(default_factory=set)    # job-relative dirs
    import_file: str | None = None                          # staging-relative


def plugin_options(settings: Settings, rel_path: str, job: GenerationJob) -> str:
    """``--go_out`` options for one local description file."""
    opts = "paths=source_relative"
    overrides = settings.generation.overrides.option_string()
    if overrides:
        opts += "," + overrides
    if rel_path in job.annotate:
        opts += ",annotate_code"
    return opts


def render_import_file(preamble: str, import_paths: set[str] | list[str]) -> str:
    """Go test file that blank-imports every path, sorted."""
    lines = ["package main", "", "import ("]
    lines += [f'\t_ "{path}"' for path in sorted(import_paths)]
    lines.append(")")
    return preamble + "\n".join(lines) + "\n"


def generate_job(settings: Settings, protoc: Protoc, job: GenerationJob, staging: Path) -> JobResult:
    """Compile every description file of one job into ``staging``."""
    result = JobResult(job=job)
    repo_root = settings.repo_root
    src_dir = repo_root / job.path
    legacy_rx = settings.generation.legacy_rx
    proto_include = settings.proto_root / "src" if settings.proto_root else None

    for src_path in walk_files(src_dir, (".proto",)):
        rel_path = src_path.relative_to(repo_root).as_posix()
        if legacy_rx.search(src_path.as_posix()):
            result.skipped.append(rel_path)
            continue

        src_rel = src_path.relative_to(src_dir).as_posix()
        result.sub_packages.add(posixpath.dirname(src_rel) or ".")

        if rel_path in job.exclude:
            logger.debug("Excluded %s", rel_path)
            result.skipped.append(rel_path)
            continue

        args: list[str] = []
        if proto_include is not None:
            args.append(f"-I{proto_include}")
        args += [
            f"-I{repo_root}",
            f"--go_out={plugin_options(settings, rel_path, job)}:{staging}",
            rel_path,
        ]
        protoc.run(job.backends, *args)
        result.generated.append(rel_path)

    if job.is_testdata:
        result.import_file = write_import_file(settings, job, result.sub_packages, staging)

    logger.info(
        "Job %s: %d generated, %d skipped",
        job.path,
        len(result.generated),
        len(result.skipped),
    )
    return result


def write_import_file(
    settings: Settings,
    job: GenerationJob,
    sub_packages: set[str],
    staging: Path,
) -> str:
    """Write ``<job>/gen_test.go`` into staging; returns its staging-relative path."""
    import_paths = {
        posixpath.normpath(posixpath.join(settings.module_path, job.path, sub))
        for sub in sub_packages
    }
    gen = settings.generation
    source = format_go_source(render_import_file(gen.preamble_text(), import_paths), gen.gofmt)
    rel = posixpath.join(job.path, IMPORT_TEST_FILE)
    write_file(staging / rel, source.encode("utf-8"))
    return rel


def generate_local(settings: Settings, protoc: Protoc, staging: Path) -> list[JobResult]:
    """Run every configured local job, in order, into one staging directory."""
    return [generate_job(settings, protoc, job, staging) for job in settings.generation.local]
