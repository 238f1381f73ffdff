import argparse
import asyncio
import logging
import sys
import typing

import drumbox.config
import drumbox.display
import drumbox.editor
import drumbox.presets


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	"""
	Parse command-line arguments.
	"""

	parser = argparse.ArgumentParser(prog="drumbox", description="Print a drum pattern as a step grid and rhythmic notation.")
	parser.add_argument("--config", default=drumbox.config.DEFAULT_CONFIG_PATH, help="YAML config file")
	parser.add_argument("--preset", default=None, help=f"preset to load ({', '.join(drumbox.presets.names())})")
	parser.add_argument("--show-continuations", action="store_true", help="draw sustained tails instead of hiding them")

	return parser.parse_args(argv)


async def render_once (config: drumbox.config.EditorConfig, stream: typing.TextIO) -> drumbox.display.TextSurface:

	"""
	Build an editor from the config, load its preset and draw a single frame.
	"""

	store = config.build_store()
	surface = drumbox.display.TextSurface(stream=stream)

	editor = drumbox.editor.Editor(
		store,
		surface,
		display = config.continuation_display,
		tempo_debounce = config.tempo_debounce,
		default_preset = config.preset,
	)

	editor.start()
	editor.render_now()
	editor.close()

	return surface


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point for the drumbox command.
	"""

	args = parse_args(argv)
	config = drumbox.config.EditorConfig.from_dict(drumbox.config.load_config(args.config))

	if args.preset:
		config.preset = args.preset

	if args.show_continuations:
		config.hide_continuations = False

	asyncio.run(render_once(config, sys.stdout))


if __name__ == "__main__":
	main()
