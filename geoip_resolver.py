import ipaddress
import logging
from pathlib import Path

import geoip2.database
import geoip2.errors

from config import ConfigError

logger = logging.getLogger(__name__)

LANGUAGE = "en"


def open_city_reader(path: Path) -> geoip2.database.Reader:
	"""Open the GeoLite2 City database, raising ConfigError if it is unusable."""
	try:
		reader = geoip2.database.Reader(str(path))
	except Exception as e:
		raise ConfigError("geoip_db_open_failed", e)

	meta = reader.metadata()
	logger.info(
		"event=geoip_loaded path=%s type=%s build_epoch=%s",
		path,
		meta.database_type,
		meta.build_epoch,
	)
	return reader


class GeoIPResolver:
	"""Resolve IP literals to English (country, city) names.

	The reader is shared by every request thread; geoip2 readers support
	concurrent lookups without locking.
	"""

	def __init__(self, reader=None) -> None:
		self.reader = reader

	def resolve(self, ip: str) -> tuple[str, str]:
		"""Return (country, city). Unknown or malformed input gives ("", "")."""
		if self.reader is None:
			return "", ""

		try:
			ip_obj = ipaddress.ip_address(ip)
		except ValueError:
			logger.debug("Invalid IP address format: %r", ip)
			return "", ""

		try:
			record = self.reader.city(ip_obj)
		except geoip2.errors.AddressNotFoundError:
			logger.debug("No GeoIP record for IP: %s", ip)
			return "", ""
		except Exception as e:
			logger.warning("GeoIP lookup error for IP %s: %s", ip, e)
			return "", ""

		country = record.country.names.get(LANGUAGE, "") if record.country else ""
		city = ""
		if record.city and record.city.names:
			city = record.city.names.get(LANGUAGE, "")

		return country or "", city or ""
