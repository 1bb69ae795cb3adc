"""Stitch manifest loader — a stitch job described in YAML.

Follows the same ${var} path resolution as profile files. Relative clip
paths are resolved against the manifest's directory.

Stitch manifest schema:
  project_id: promo-42
  profile: standard               # optional: built-in name or profile file
  output_root: /data/out          # optional
  paths:
    clips: /data/generated
  clips:
    - ${clips}/scene-0.mp4
    - path: ${clips}/scene-1.mp4  # mapping form is also accepted
"""

from pathlib import Path

import yaml

from .common import resolve_path_vars
from .profile import PROFILES


def _resolve(value: str, paths: dict, base_dir: Path) -> str:
    p = Path(resolve_path_vars(str(value), paths))
    if not p.is_absolute():
        p = base_dir / p
    return str(p)


def load_stitch_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a stitch manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Validate project_id.
      3. Resolve ${path} variables and relative paths in clips.
      4. Resolve profile and output_root the same way (profile names of
         built-ins are left as-is).

    Returns:
        Dict with project_id, clips (list of absolute path strings),
        profile (str or None) and output_root (str or None).

    Raises:
        ValueError: Missing/invalid fields.
    """
    manifest_path = Path(manifest_path)
    with open(manifest_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError("Stitch manifest: top level must be a mapping")
    if "project_id" not in raw:
        raise ValueError("Stitch manifest: missing required 'project_id' field")
    if "clips" not in raw:
        raise ValueError("Stitch manifest: missing required 'clips' field")

    project_id = raw["project_id"]
    if not isinstance(project_id, (str, int)) or not str(project_id).strip():
        raise ValueError(f"Stitch manifest: invalid project_id {project_id!r}")

    paths = raw.get("paths") or {}
    if not isinstance(paths, dict):
        raise ValueError("Stitch manifest: 'paths' must be a mapping")
    base_dir = manifest_path.resolve().parent

    raw_clips = raw["clips"]
    if not isinstance(raw_clips, list) or not raw_clips:
        raise ValueError("Stitch manifest: 'clips' must be a non-empty list")

    clips = []
    for i, entry in enumerate(raw_clips):
        if isinstance(entry, dict):
            if "path" not in entry:
                raise ValueError(f"Clip {i}: missing required field 'path'")
            entry = entry["path"]
        if not isinstance(entry, str) or not entry.strip():
            raise ValueError(f"Clip {i}: path must be a non-empty string, got {entry!r}")
        clips.append(_resolve(entry, paths, base_dir))

    profile = raw.get("profile")
    if profile is not None and str(profile) not in PROFILES:
        profile = _resolve(profile, paths, base_dir)

    output_root = raw.get("output_root")
    if output_root is not None:
        output_root = _resolve(output_root, paths, base_dir)

    return {
        "project_id": str(project_id),
        "clips": clips,
        "profile": str(profile) if profile is not None else None,
        "output_root": output_root,
    }


def validate_clip_paths(config: dict) -> None:
    """Check that all clip paths exist on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = [c for c in config["clips"] if not Path(c).exists()]
    if missing:
        msg = f"Missing {len(missing)} clip file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
