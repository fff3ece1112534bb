"""Drum presets: lug counts and tuning ranges per head."""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .tuning_types import HeadSide

FrequencyRange = Tuple[float, float]


@dataclass(frozen=True)
class DrumPreset:
    """Static description of a drum that can be tuned."""

    id: str
    name: str
    lugs: int
    batter_range: FrequencyRange  # Hz
    resonant_range: FrequencyRange  # Hz
    sizes: Tuple[str, ...]
    default_size: str
    description: str = ""
    tips: str = ""

    def frequency_range(self, head_side) -> FrequencyRange:
        """Return the tuning range for one head of the drum."""
        if HeadSide.parse(head_side) is HeadSide.BATTER:
            return self.batter_range
        return self.resonant_range


DRUMS: Tuple[DrumPreset, ...] = (
    DrumPreset(
        id="snare",
        name="Snare",
        lugs=8,
        batter_range=(220.0, 330.0),
        resonant_range=(280.0, 420.0),
        sizes=('13"', '14"'),
        default_size='14"',
        description="Batter & resonant head tuning",
        tips="Tune the resonant head slightly higher than the batter for snare response.",
    ),
    DrumPreset(
        id="bass",
        name="Bass Drum",
        lugs=8,
        batter_range=(55.0, 90.0),
        resonant_range=(60.0, 100.0),
        sizes=('18"', '20"', '22"', '24"'),
        default_size='22"',
        description="Deep punch & resonance control",
        tips="Tune both heads evenly for maximum sustain. "
        "Detune the batter slightly for more attack.",
    ),
    DrumPreset(
        id="rack-tom",
        name="Rack Tom",
        lugs=6,
        batter_range=(140.0, 240.0),
        resonant_range=(160.0, 280.0),
        sizes=('10"', '12"', '13"'),
        default_size='12"',
        description="Clear pitch with controlled sustain",
        tips="Tune the resonant head a minor third above the batter for melodic toms.",
    ),
    DrumPreset(
        id="floor-tom",
        name="Floor Tom",
        lugs=8,
        batter_range=(80.0, 160.0),
        resonant_range=(90.0, 180.0),
        sizes=('14"', '16"', '18"'),
        default_size='16"',
        description="Warm low-end with body",
        tips="Lower tuning gives more warmth. Keep lugs even to avoid warbling.",
    ),
    DrumPreset(
        id="hi-hat",
        name="Hi-Hat",
        lugs=6,
        batter_range=(300.0, 500.0),
        resonant_range=(330.0, 550.0),
        sizes=('13"', '14"', '15"'),
        default_size='14"',
        description="Chick sound & wash tuning",
        tips="The bottom hi-hat should be slightly tighter than the top for a clean 'chick'.",
    ),
)

_DRUMS_BY_ID: Dict[str, DrumPreset] = {drum.id: drum for drum in DRUMS}


def list_drums() -> List[DrumPreset]:
    return list(DRUMS)


def get_drum(drum_id: str) -> DrumPreset:
    """Look up a preset by id.

    Raises:
        ValueError: If no preset has that id
    """
    try:
        return _DRUMS_BY_ID[drum_id]
    except KeyError:
        raise ValueError(
            f"Unknown drum: {drum_id!r} (expected one of {', '.join(_DRUMS_BY_ID)})"
        ) from None
