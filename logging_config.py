import logging
import sys


def setup_logging(level_name: str = "INFO") -> None:
	"""Configure root logger for the application."""
	level = getattr(logging, level_name.upper(), logging.INFO)

	# Basic configuration for root logger
	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
		stream=sys.stdout,
	)

	# The access line is written by the app itself
	logging.getLogger("werkzeug").setLevel(logging.WARNING)


def format_duration(seconds: float) -> str:
	"""Render an elapsed time the way access lines show it (e.g. 3.250ms)."""
	if seconds < 1e-3:
		return f"{seconds * 1e6:.3f}µs"
	if seconds < 1:
		return f"{seconds * 1e3:.3f}ms"
	return f"{seconds:.3f}s"
