"""Bulk assignment of row sounds."""
from __future__ import annotations

import random
from typing import Dict, List, Mapping

from minebeat.audio.backend import BUILTIN_SAMPLES
from minebeat.components.row_audio import AudioMode, RowAudioConfigs

MELODY_SHARE = 0.35


def _group(catalog: Mapping[str, Dict[str, str]], name: str) -> List[str]:
    return sorted(key for key, entry in catalog.items() if entry.get("group") == name)


def randomize_all_rows(
    configs: RowAudioConfigs,
    rows: int,
    rng: random.Random,
    catalog: Mapping[str, Dict[str, str]] = BUILTIN_SAMPLES,
) -> None:
    """Every row gets either synthesis or a random builtin sample."""
    configs.reset()
    choices = [None] + sorted(catalog)
    for row in range(rows):
        pick = rng.choice(choices)
        if pick is None:
            configs.set(row, mode=AudioMode.SYNTHESIZED)
        else:
            configs.set(row, mode=AudioMode.SAMPLE, sample_ref=pick, volume=round(rng.uniform(0.7, 1.1), 2))


def smart_randomize_all_rows(
    configs: RowAudioConfigs,
    rows: int,
    rng: random.Random,
    catalog: Mapping[str, Dict[str, str]] = BUILTIN_SAMPLES,
) -> None:
    """Arrange the board like a drum rack with a melody on top.

    The bottom band gets low hits, the middle band mid hits and the top band
    bright one-shots. About a third of the rows, chosen across the board,
    stay on synthesis so the pentatonic melody survives.
    """
    configs.reset()
    if rows <= 0:
        return
    low, mid, high = _group(catalog, "low"), _group(catalog, "mid"), _group(catalog, "high")
    melody_rows = set(rng.sample(range(rows), max(1, round(rows * MELODY_SHARE))))

    for row in range(rows):
        if row in melody_rows:
            configs.set(row, mode=AudioMode.SYNTHESIZED)
            continue
        # row 0 is the top of the board
        height = 1 - row / max(1, rows - 1)
        if height < 1 / 3:
            pool, volume = low, 1.0
        elif height < 2 / 3:
            pool, volume = mid, 0.85
        else:
            pool, volume = high, 0.7
        if not pool:
            configs.set(row, mode=AudioMode.SYNTHESIZED)
            continue
        configs.set(row, mode=AudioMode.SAMPLE, sample_ref=rng.choice(pool), volume=volume)
