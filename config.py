# config.py

import ipaddress
import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_PORT = 5001
# Docker bridge network
DEFAULT_TRUSTED_PROXIES = "172.18.0.0/16"
DEFAULT_GEOIP_CITY_DB = Path("geoip") / "GeoLite2-City.mmdb"
DEFAULT_TEMPLATES_DIR = Path("templates")


class ConfigError(Exception):
	"""Fatal startup error. `kind` is the short name logged as error=<kind>."""

	def __init__(self, kind: str, detail) -> None:
		super().__init__(f"{kind}: {detail}")
		self.kind = kind
		self.detail = str(detail)


def _env_bool(name: str, default: bool = False) -> bool:
	"""Read a boolean value from environment variables."""
	raw = os.getenv(name)
	if raw is None:
		return default
	return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str, default: str) -> str:
	"""Read a string value, treating an empty variable as unset."""
	raw = os.getenv(name)
	if raw is None or raw.strip() == "":
		return default
	return raw


def _env_port(name: str, default: int) -> int:
	"""Read a TCP port from environment variables."""
	raw = _env_str(name, str(default))
	try:
		port = int(raw)
	except ValueError:
		raise ConfigError("invalid_port", f"{name}={raw!r} is not an integer")
	if not 0 < port < 65536:
		raise ConfigError("invalid_port", f"{name}={port} is out of range")
	return port


def parse_trusted_proxies(raw: str) -> tuple:
	"""Parse a comma-separated CIDR list into a tuple of networks.

	Entries without a prefix length are single hosts. Host bits are masked
	off, so 172.18.0.1/16 is accepted as 172.18.0.0/16.
	"""
	networks = []
	for entry in raw.split(","):
		value = entry.strip()
		try:
			networks.append(ipaddress.ip_network(value, strict=False))
		except ValueError as e:
			raise ConfigError("trusted_proxy_config_failed", f"invalid entry {value!r}: {e}")
	return tuple(networks)


@dataclass(frozen=True)
class Settings:
	"""Central application settings loaded from environment variables."""

	port: int = DEFAULT_PORT
	trusted_proxies: tuple = parse_trusted_proxies(DEFAULT_TRUSTED_PROXIES)

	geoip_city_db: Path = DEFAULT_GEOIP_CITY_DB
	templates_dir: Path = DEFAULT_TEMPLATES_DIR

	log_level: str = "INFO"
	debug: bool = False

	@classmethod
	def from_env(cls) -> "Settings":
		"""Build settings from the process environment. Raises ConfigError."""
		return cls(
			port=_env_port("PORT", DEFAULT_PORT),
			trusted_proxies=parse_trusted_proxies(
				_env_str("TRUSTED_PROXIES", DEFAULT_TRUSTED_PROXIES)
			),
			geoip_city_db=Path(_env_str("GEOIP_DB_PATH", str(DEFAULT_GEOIP_CITY_DB))),
			templates_dir=Path(_env_str("TEMPLATES_DIR", str(DEFAULT_TEMPLATES_DIR))),
			log_level=_env_str("LOG_LEVEL", "INFO").strip().upper(),
			debug=_env_bool("DEBUG", False),
		)
