import pytest

import drumbox.__main__


@pytest.fixture(autouse=True)
def fixed_width (monkeypatch) -> None:

	"""Pin the terminal width so the grid layout is predictable."""

	monkeypatch.setenv("COLUMNS", "80")


def test_parse_args_defaults () -> None:

	"""With no arguments the default config path is used."""

	args = drumbox.__main__.parse_args([])

	assert args.config == "drumbox.yaml"
	assert args.preset is None
	assert args.show_continuations is False


def test_main_renders_configured_preset (tmp_path, capsys) -> None:

	"""The command prints the preset from the config file as grid and notation."""

	path = tmp_path / "drumbox.yaml"
	path.write_text("editor:\n  preset: rock\n")

	drumbox.__main__.main(["--config", str(path)])

	out = capsys.readouterr().out

	assert out.startswith("92 BPM  1x4x4 (16 steps)  Ready")
	assert "  Hi-hat      |X . X . | X . X . | X . X . | X . X .|" in out
	assert "8 8 8 8 8 8 8 8" in out
	assert out.count("BPM") == 1


def test_main_preset_flag_overrides_config (tmp_path, capsys) -> None:

	"""--preset wins over the config file, and a missing config is not an error."""

	drumbox.__main__.main(["--config", str(tmp_path / "missing.yaml"), "--preset", "funk"])

	out = capsys.readouterr().out

	assert out.startswith("98 BPM")
	assert "16 16 16 16" in out


def test_main_show_continuations (tmp_path, capsys) -> None:

	"""--show-continuations draws sustained tails with ~."""

	drumbox.__main__.main(["--config", str(tmp_path / "missing.yaml"), "--preset", "half", "--show-continuations"])

	out = capsys.readouterr().out

	assert "~" in out


def test_main_without_preset_shows_hint (tmp_path, capsys) -> None:

	"""With no preset the empty grid and the hint are printed."""

	drumbox.__main__.main(["--config", str(tmp_path / "missing.yaml")])

	out = capsys.readouterr().out

	assert out.startswith("90 BPM")
	assert "(toggle steps in the grid to see notation)" in out
