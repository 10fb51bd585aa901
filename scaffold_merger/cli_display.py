import logging
import os
import sys
from datetime import datetime

ICONS = {
    "done": "✔",
    "failed": "✘",
    "skipped": "–",
}


def setup_logger(log_dir: str = ".scaffoldmerge/logs", verbose: bool = False) -> logging.Logger:
    """Creates a file logger plus a console handler for warnings.

    All verbose output goes to the file; the console only shows warnings
    unless *verbose* is set.
    """
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"merge_{timestamp}.log")

    logger = logging.getLogger("scaffold_merger")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.DEBUG if verbose else logging.WARNING)
    ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(ch)

    return logger


def status_line(status: str, message: str) -> str:
    """Format one ``<icon> message`` line for the terminal."""
    return f"  {ICONS.get(status, '?')} {message}"


def show_merge_result(result, target: str) -> None:
    """Print the outcome of a context merge."""
    if not result.success:
        print(status_line("failed", result.error), file=sys.stderr)
        return
    if result.changed:
        lines = len(result.preserved_text.splitlines())
        print(status_line("done", f"{target}: carried over {lines} line(s)"))
    else:
        print(status_line("skipped", f"{target}: nothing to carry over"))
