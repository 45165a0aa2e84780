from __future__ import annotations

from typing import Dict, Mapping

from minebeat.constants import BASE_NOTE, MAX_NOTE, PENTATONIC_OFFSETS


def row_to_midi(row: int, rows: int) -> int:
    """Pentatonic note for a board row; row 0 is the top of the board and the highest note."""
    degree = max(0, rows - 1 - row)
    octave, index = divmod(degree, len(PENTATONIC_OFFSETS))
    return BASE_NOTE + PENTATONIC_OFFSETS[index] + octave * 12


def midi_to_frequency(note: float) -> float:
    return 440.0 * 2 ** ((note - 69) / 12)


def compute_pitch_overrides(rows: int) -> Dict[int, int]:
    """Fold rows whose natural note overshoots MAX_NOTE down by whole octaves.

    Without this every row above the ceiling would clamp to the same pitch.
    """
    overrides: Dict[int, int] = {}
    for row in range(rows):
        note = row_to_midi(row, rows)
        if note <= MAX_NOTE:
            continue
        while note > MAX_NOTE:
            note -= 12
        overrides[row] = note
    return overrides


def resolve_note(row: int, rows: int, overrides: Mapping[int, int] | None = None) -> int:
    note = row_to_midi(row, rows)
    if overrides and row in overrides:
        note = overrides[row]
    return min(note, MAX_NOTE)


def row_frequency(row: int, rows: int, overrides: Mapping[int, int] | None = None) -> float:
    return midi_to_frequency(resolve_note(row, rows, overrides))
