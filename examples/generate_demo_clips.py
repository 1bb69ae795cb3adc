#!/usr/bin/env python3
"""Generate synthetic clips and a stitch manifest for trying clipstitch.

Creates 5 short clips in examples/demo-clips/ and writes
examples/demo-stitch.yaml that stitches them in order. The clips are picked
to exercise every transition band and the audio handling:

  scene-0 -> scene-1   same colour, both with a tone     high similarity
  scene-1 -> scene-2   similar colour, scene-2 is silent medium similarity
  scene-2 -> scene-3   different colour and resolution   low similarity
  scene-3 -> scene-4   checkerboard vs flat colour       low similarity

Needs moviepy and numpy (pip install -e '.[test]').

Usage:
    python examples/generate_demo_clips.py
    # Then preview and render:
    clipstitch stitch --manifest examples/demo-stitch.yaml --dry-run
    clipstitch stitch --manifest examples/demo-stitch.yaml -v
"""

from pathlib import Path

import numpy as np
import yaml
from moviepy import AudioClip, ColorClip, ImageClip

EXAMPLES_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = EXAMPLES_DIR / "demo-clips"
FPS = 24

# (name, colour, duration, size, tone Hz or None for a silent clip)
CLIPS = [
    ("scene-0", (60, 60, 180),   2.5, (640, 360), 330),
    ("scene-1", (60, 60, 180),   2.0, (640, 360), 440),
    ("scene-2", (70, 70, 170),   3.0, (640, 360), None),
    ("scene-3", (200, 130, 40),  2.0, (480, 360), 550),
    ("scene-4", None,            2.5, (640, 360), None),  # checkerboard
]


def _checkerboard(size: tuple[int, int], cell: int = 40) -> np.ndarray:
    w, h = size
    ys, xs = np.mgrid[0:h, 0:w]
    mask = ((xs // cell) + (ys // cell)) % 2 == 0
    frame = np.zeros((h, w, 3), dtype=np.uint8)
    frame[mask] = (230, 230, 230)
    frame[~mask] = (30, 30, 30)
    return frame


def _tone(freq: float, duration: float) -> AudioClip:
    def frame(t):
        wave = 0.2 * np.sin(2 * np.pi * freq * t)
        return np.stack([wave, wave], axis=-1) if np.ndim(t) else [wave, wave]
    return AudioClip(frame, duration=duration, fps=44100)


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    written = []
    for name, color, duration, size, tone in CLIPS:
        out = OUTPUT_DIR / f"{name}.mp4"
        written.append(out)
        if out.exists():
            print(f"  skip {name} (exists)")
            continue

        if color is None:
            clip = ImageClip(_checkerboard(size), duration=duration)
        else:
            clip = ColorClip(size=size, color=color, duration=duration)
        if tone is not None:
            clip = clip.with_audio(_tone(tone, duration))

        clip.write_videofile(
            str(out), fps=FPS, audio=tone is not None, audio_codec="aac", logger=None,
        )
        print(f"  wrote {name} ({duration}s, {size[0]}x{size[1]}, "
              f"{'tone' if tone else 'silent'})")

    manifest = {
        "project_id": "demo",
        "profile": "standard",
        "output_root": "demo-renders",
        "paths": {"clips": str(OUTPUT_DIR)},
        "clips": [f"${{clips}}/{p.name}" for p in written],
    }
    manifest_path = EXAMPLES_DIR / "demo-stitch.yaml"
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False))

    print(f"\nDone. {len(written)} clips in {OUTPUT_DIR}, manifest at {manifest_path}")


if __name__ == "__main__":
    main()
