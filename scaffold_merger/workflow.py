"""
File workflow — reads context/model files, runs the engine and writes the
merged context only after a fully successful merge.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

from tqdm import tqdm

from .config import Config
from .engine.changeset import ChangeSetReport, aggregate, compare_entity_names
from .engine.merger import ContextMerger, MergeResult
from .engine.properties import DiffResult, diff_properties

logger = logging.getLogger(__name__)

_SOURCE_EXT = ".cs"


def read_source(path: str, encoding: str = "utf-8") -> str:
    """Read a source file, dropping a UTF-8 BOM and keeping line endings."""
    if encoding.lower().replace("_", "-") == "utf-8":
        encoding = "utf-8-sig"
    with open(path, "r", encoding=encoding, newline="") as f:
        return f.read()


def write_source(path: str, text: str, encoding: str = "utf-8") -> None:
    """Write *text* atomically via temp file + rename."""
    abs_path = os.path.abspath(path)
    tmp_path = abs_path + ".scaffoldmerge_tmp"

    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)

        # On Windows, os.rename fails if destination exists
        if os.path.exists(abs_path):
            shutil.move(tmp_path, abs_path)
        else:
            os.rename(tmp_path, abs_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def merge_context_files(
    old_path: str,
    new_path: str,
    output_path: Optional[str] = None,
    config: Optional[Config] = None,
) -> MergeResult:
    """Carry the custom part of *old_path*'s method over into *new_path*.

    The merged text is written to *output_path* (default: *new_path*) only
    when the merge succeeds; on failure no file is touched.
    """
    cfg = config or Config()
    target = output_path or new_path

    old_text = read_source(old_path, cfg.ENCODING)
    new_text = read_source(new_path, cfg.ENCODING)

    merger = ContextMerger(cfg.merge_rules())
    result = merger.merge(old_text, new_text, old_source=old_path, new_source=new_path)
    if not result.success:
        return result

    if result.merged_text == new_text and os.path.abspath(target) == os.path.abspath(new_path):
        logger.info("[Merge] %s unchanged, not rewriting", target)
        return result

    write_source(target, result.merged_text, cfg.ENCODING)
    logger.info("[Merge] Wrote merged context to %s", target)
    return result


def _entity_files(directory: str, cfg: Config) -> dict[str, str]:
    """Map entity name → path for the model files directly under *directory*."""
    signature = cfg.merge_rules().signature_pattern()
    files: dict[str, str] = {}
    if not os.path.isdir(directory):
        logger.warning("[Diff] Model directory not found: %s", directory)
        return files

    for fname in sorted(os.listdir(directory)):
        if not fname.endswith(_SOURCE_EXT) or fname == cfg.CONTEXT_FILE:
            continue
        path = os.path.join(directory, fname)
        if not os.path.isfile(path):
            continue
        if signature.search(read_source(path, cfg.ENCODING)):
            logger.debug("[Diff] Skipping context file %s", path)
            continue
        files[fname[: -len(_SOURCE_EXT)]] = path
    return files


def diff_model_directories(
    old_dir: str,
    new_dir: str,
    config: Optional[Config] = None,
    progress: bool = False,
) -> ChangeSetReport:
    """Compare the model files of two scaffold runs.

    Common and newly added entities are diffed property by property;
    removed entities are only listed.
    """
    cfg = config or Config()
    old_files = _entity_files(old_dir, cfg)
    new_files = _entity_files(new_dir, cfg)
    names = compare_entity_names(old_files, new_files)

    per_entity: dict[str, DiffResult] = {}
    to_diff = sorted(names.common + names.added)
    for name in tqdm(to_diff, unit="entity", desc="Diffing", disable=not progress):
        old_lines = (
            read_source(old_files[name], cfg.ENCODING).splitlines()
            if name in old_files else []
        )
        new_lines = read_source(new_files[name], cfg.ENCODING).splitlines()
        per_entity[name] = diff_properties(old_lines, new_lines)

    report = aggregate(per_entity, names.added, names.removed)
    logger.info(
        "[Diff] %d added, %d removed entities; properties +%d -%d ~%d",
        len(report.added_entities), len(report.removed_entities),
        report.total_properties_added, report.total_properties_removed,
        report.total_properties_changed,
    )
    return report
