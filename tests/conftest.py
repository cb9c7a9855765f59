from pathlib import Path
from types import SimpleNamespace

import geoip2.errors
import pytest

from app import create_app
from config import Settings

ROOT = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = ROOT / "templates"


def make_record(country: str = "", city: str = ""):
	"""Minimal stand-in for a geoip2 City model."""
	return SimpleNamespace(
		country=SimpleNamespace(names={"en": country, "de": f"{country} (de)"} if country else {}),
		city=SimpleNamespace(names={"en": city} if city else {}),
	)


class FakeReader:
	"""In-memory replacement for geoip2.database.Reader."""

	def __init__(self, records=None) -> None:
		self.records = records or {}
		self.lookups = []
		self.closed = False

	def city(self, ip):
		key = str(ip)
		self.lookups.append(key)
		if key not in self.records:
			raise geoip2.errors.AddressNotFoundError(f"The address {key} is not in the database.")
		value = self.records[key]
		if isinstance(value, Exception):
			raise value
		return value

	def close(self) -> None:
		self.closed = True

	def __enter__(self):
		return self

	def __exit__(self, *exc) -> None:
		self.close()


@pytest.fixture
def geoip_reader():
	return FakeReader({
		"8.8.8.8": make_record("United States"),
		"81.2.69.142": make_record("United Kingdom", "London"),
		"2001:4860:4860::8888": make_record("United States"),
		"10.9.9.9": RuntimeError("corrupt search tree"),
	})


@pytest.fixture
def settings():
	return Settings(templates_dir=TEMPLATES_DIR)


@pytest.fixture
def app(settings, geoip_reader):
	return create_app(settings, geoip_reader)


@pytest.fixture
def client(app):
	return app.test_client()
