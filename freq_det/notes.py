from __future__ import annotations

import math
from dataclasses import dataclass

_NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


@dataclass(frozen=True)
class NoteReading:
    name: str  # e.g. "A4"
    midi: int
    cents: float  # offset from the equal-tempered note, [-50, 50)
    target_hz: float


def hz_to_midi(hz: float, a4_hz: float = 440.0) -> float:
    return 69.0 + 12.0 * math.log2(hz / a4_hz)


def midi_to_hz(midi: float, a4_hz: float = 440.0) -> float:
    return float(a4_hz * (2.0 ** ((midi - 69.0) / 12.0)))


def nearest_note(hz: float, a4_hz: float = 440.0) -> NoteReading | None:
    if not (hz > 0.0 and math.isfinite(hz)) or a4_hz <= 0:
        return None
    midi_f = hz_to_midi(hz, a4_hz)
    midi = int(math.floor(midi_f + 0.5))
    cents = (midi_f - midi) * 100.0
    name = f"{_NOTE_NAMES[midi % 12]}{midi // 12 - 1}"
    return NoteReading(name=name, midi=midi, cents=float(cents), target_hz=midi_to_hz(midi, a4_hz))
