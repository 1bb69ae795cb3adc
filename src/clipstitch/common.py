"""clipstitch.common — shared utilities.

Contains: ${var} path resolution for manifests, external tool lookup,
and the single subprocess entry point every ffmpeg/ffprobe call goes through.
"""

import logging
import re
import shlex
import shutil
import subprocess
from pathlib import Path

import imageio_ffmpeg

from .errors import CleanupFailure

logger = logging.getLogger(__name__)


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return str(paths[key])
    return re.sub(r"\$\{(\w+)\}", _replace, text)


def remove_quietly(path: str | Path) -> bool:
    """Delete a file if present. Returns False when removal failed.

    Failures are logged as CleanupFailure and never raised.
    """
    p = Path(path)
    try:
        p.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("%s", CleanupFailure(p, exc))
        return False
    return True


def remove_tree_quietly(path: str | Path) -> bool:
    """Delete a directory tree if present, logging instead of raising."""
    p = Path(path)
    if not p.exists():
        return True
    try:
        shutil.rmtree(p)
    except OSError as exc:
        logger.warning("%s", CleanupFailure(p, exc))
        return False
    return True


# ── Logging ────────────────────────────────────────────────────────

def configure_logging(verbose: int = 0, quiet: bool = False) -> None:
    """CLI logging setup: warnings by default, -v for progress, -vv for commands."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)-7s %(name)s: %(message)s")


# ── External tools ─────────────────────────────────────────────────
# imageio-ffmpeg ships an ffmpeg binary but no ffprobe, so ffprobe is
# looked up on PATH.

DEFAULT_FFPROBE = "ffprobe"


def default_ffmpeg() -> str:
    """Path to the ffmpeg binary bundled with imageio-ffmpeg."""
    return imageio_ffmpeg.get_ffmpeg_exe()


def run_tool(
    cmd: list[str],
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """Run an external tool from an argument vector and capture its output.

    The return code is NOT checked here: callers decide which error a
    non-zero exit maps to, and need stderr to build it. Output is decoded
    as UTF-8 with undecodable bytes replaced, since ffmpeg echoes file
    metadata verbatim.

    Raises:
        OSError: The binary could not be launched.
        subprocess.TimeoutExpired: timeout elapsed (the child is killed).
    """
    logger.debug("CMD: %s", shlex.join(str(c) for c in cmd))
    return subprocess.run(
        [str(c) for c in cmd],
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
    )


def stderr_tail(stderr: str | None, lines: int = 20) -> str:
    """Last few lines of a tool's stderr, for error messages."""
    if not stderr:
        return ""
    return "\n".join(stderr.strip().splitlines()[-lines:])
