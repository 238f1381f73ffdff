"""
drumbox - a step-sequencer editing core with rhythmic transcription.

Toggle boolean hits on a grid of steps per instrument track, and drumbox
keeps a consistent timing model and turns the grid into conventional
rhythmic notation: durations, rests and beat-respecting grouping.

What it provides:

- **Pattern state store.** ``PatternStore`` is the single writer for
  tracks, resolution, pattern rows, tempo and playhead.  Every edit is
  normalised, resizes keep every note that still fits, and a wrapping
  revision counter marks content changes.
- **Transcription.** ``drumbox.notation.transcribe()`` turns one track's
  row into notes and rests that never cross a beat, split greedily into
  whole/half/quarter/eighth/sixteenth pieces, with sustained tails tagged
  as continuations.
- **Render gate.** Redraws only when the pattern actually changed, at
  most once per display frame, never for playhead ticks.
- **Editor.** Wires a playback engine, a drawing surface, presets and a
  debounced tempo control around the store.

Minimal example:

    ```python
    import drumbox
    import drumbox.notation

    store = drumbox.PatternStore()
    store.toggle_step("bd", 0, True)
    store.toggle_step("sn", 4, True)

    events = drumbox.notation.transcribe(store.get().pattern["sn"], store.get().steps_per_beat, "sn")
    ```

Package-level exports: ``PatternStore``, ``Track``, ``Resolution``, ``Editor``, ``transcribe``.
"""

import drumbox.editor
import drumbox.notation
import drumbox.state
import drumbox.timing


PatternStore = drumbox.state.PatternStore
Track = drumbox.state.Track
Resolution = drumbox.timing.Resolution
Editor = drumbox.editor.Editor
transcribe = drumbox.notation.transcribe
