"""Plain-text rendering surface for the step grid and its notation.

:class:`TextSurface` implements the render gate's surface contract.  Each
draw produces two rows per track: the step grid, grouped by beat, and the
transcribed notation underneath::

	  Hi-hat      |X . X . | X . X . | X . X . | X . X .|
	              8 8 8 8 8 8 8 8
	  Kick        |X . . . | . . . . | X . . . | . . . .|
	              q qr q qr

Notation tokens use the short duration codes (``w h q 8 16 32 64``).  A
trailing ``r`` marks a rest, a leading ``~`` marks a continuation that is
being shown, and ``/3`` (etc.) marks a tuplet.

The playhead cell is drawn as ``O`` (hit) or ``o`` (empty).
"""

import shutil
import typing

import drumbox.notation

if typing.TYPE_CHECKING:
	from drumbox.state import StateSnapshot


_LABEL_WIDTH = 12
_MIN_TERMINAL_WIDTH = 40


def event_token (event: drumbox.notation.NotationEvent) -> str:

	"""Short text for one notation event, e.g. ``q``, ``8r``, ``~16``, ``8/3``."""

	if event.duration_class is not None:
		token = event.duration_class.symbol
	else:
		token = f"{event.length_in_steps}s"

	if event.tuplet is not None:
		token += f"/{event.tuplet[0]}"

	if event.is_rest:
		token += "r"
	elif event.is_continuation:
		token = "~" + token

	return token


def format_status (snapshot: "StateSnapshot") -> str:

	"""One-line transport summary, e.g. ``92 BPM  1x4x4 (16 steps)  Step: 5/16  Playing``."""

	parts: typing.List[str] = [f"{snapshot.bpm:g} BPM"]

	parts.append(f"{snapshot.bars}x{snapshot.beats_per_bar}x{snapshot.steps_per_beat} ({snapshot.steps} steps)")

	if snapshot.current_step >= 0:
		parts.append(f"Step: {snapshot.current_step + 1}/{snapshot.steps}")

	parts.append("Playing" if snapshot.is_playing else "Ready")

	return "  ".join(parts)


class TextSurface:

	"""Render surface that keeps the last drawing as lines of text.

	Pass ``stream`` (e.g. ``sys.stdout``) to have each draw written out as
	well; otherwise read :attr:`lines` or call :meth:`render`.
	"""

	def __init__ (self, stream: typing.Optional[typing.TextIO] = None, width: typing.Optional[int] = None) -> None:

		"""
		Parameters:
			stream: Where to write each drawing, or ``None`` to only keep it.
			width: Column budget for the grid; defaults to the terminal width.
		"""

		self._stream = stream
		self._width = width
		self._lines: typing.List[str] = []
		self.draws = 0

	@property
	def lines (self) -> typing.List[str]:
		return list(self._lines)

	def render (self) -> str:

		"""The last drawing as a single string."""

		return "\n".join(self._lines)

	def draw (self, events_by_track: typing.Mapping[str, typing.Sequence[drumbox.notation.NotationEvent]], snapshot: "StateSnapshot") -> None:

		"""Rebuild the text from freshly transcribed events and the snapshot they came from."""

		width = self._width if self._width is not None else shutil.get_terminal_size(fallback=(80, 24)).columns

		lines: typing.List[str] = [format_status(snapshot)]

		if width >= _MIN_TERMINAL_WIDTH:
			for track in snapshot.tracks:
				lines.append(self._grid_row(track.label, snapshot.pattern.get(track.id, ()), snapshot, width))
				lines.append(self._notation_row(events_by_track.get(track.id, ())))

		if not snapshot_has_hits(snapshot):
			lines.append("  (toggle steps in the grid to see notation)")

		self._lines = lines
		self.draws += 1

		if self._stream is not None:
			self._stream.write(self.render() + "\n")
			self._stream.flush()

	# ------------------------------------------------------------------
	# Row builders
	# ------------------------------------------------------------------

	def _grid_row (self, label_text: str, row: typing.Sequence[bool], snapshot: "StateSnapshot", width: int) -> str:

		"""One track's steps, grouped by beat, cut to fit ``width``."""

		spb = snapshot.steps_per_beat
		columns = self._fit_columns(len(row), spb, width)
		cells: typing.List[str] = []

		for i in range(columns):

			if i > 0 and i % spb == 0:
				cells.append("|")

			if i == snapshot.current_step:
				cells.append("O" if row[i] else "o")
			else:
				cells.append("X" if row[i] else ".")

		label = label_text[:_LABEL_WIDTH].ljust(_LABEL_WIDTH)

		return f"  {label}|{' '.join(cells)}|"

	@staticmethod
	def _notation_row (events: typing.Sequence[drumbox.notation.NotationEvent]) -> str:

		"""The event tokens for one track, under the grid row."""

		return " " * (2 + _LABEL_WIDTH) + " ".join(event_token(e) for e in events)

	@staticmethod
	def _fit_columns (steps: int, steps_per_beat: int, width: int) -> int:

		"""How many steps fit in ``width`` characters.

		Each step takes two characters (cell + space) and each beat
		separator another two, plus the indent, label and outer pipes.
		"""

		overhead = 2 + _LABEL_WIDTH + 2
		available = width - overhead

		if available <= 0:
			return 0

		per_beat = 2 * steps_per_beat + 2
		whole_beats = (available + 1) // per_beat
		columns = whole_beats * steps_per_beat

		return min(steps, max(columns, min(steps_per_beat, (available + 1) // 2)))


def snapshot_has_hits (snapshot: "StateSnapshot") -> bool:

	"""True when any track of ``snapshot`` has a step on."""

	return any(any(row) for row in snapshot.pattern.values())
