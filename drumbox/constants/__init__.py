"""Constants for drumbox.

This package contains:

- ``drumbox.constants`` - Editor defaults (tempo range, resolution, tracks)
- ``drumbox.constants.durations`` - Notation duration classes and their written symbols

The default resolution is one bar of 4/4 in sixteenth notes (16 steps), and
the default kit is hi-hat, snare and kick, in that display order.
"""

MIN_BPM = 40
MAX_BPM = 240
DEFAULT_BPM = 90

DEFAULT_BARS = 1
DEFAULT_BEATS_PER_BAR = 4
DEFAULT_STEPS_PER_BEAT = 4
DEFAULT_STEPS = DEFAULT_BARS * DEFAULT_BEATS_PER_BAR * DEFAULT_STEPS_PER_BEAT

# (id, label, short label)
DEFAULT_TRACKS = (
	("hh", "Hi-hat", "HH"),
	("sn", "Snare", "SN"),
	("bd", "Kick", "BD"),
)

# Revision counter wraps instead of growing without bound.
REVISION_MODULUS = 2 ** 32

NO_STEP = -1

# Trailing-edge delay for tempo changes sent to a running engine.
TEMPO_DEBOUNCE_SECONDS = 0.12

# Display refresh rate used by the asyncio frame scheduler.
FRAME_RATE = 60
