import json
import logging
import sys
import time

from flask import Flask, Response, current_app, g, request
from jinja2 import TemplateError
from werkzeug.exceptions import HTTPException

from client_ip import get_client_ip
from config import ConfigError, Settings
from formatters import HTML_TEMPLATE, respond
from geoip_resolver import GeoIPResolver, open_city_reader
from logging_config import format_duration, setup_logging
from visitor import VisitorInfo


logger = logging.getLogger(__name__)


def before_request():
	"""Store request start time for latency measurement."""
	g.request_start_time = time.perf_counter()


def after_request(response):
	"""Write one access line per request."""
	try:
		start = getattr(g, "request_start_time", None)
		duration = time.perf_counter() - start if start is not None else 0.0

		logger.info(
			"status=%d method=%s path=%s ip=%s ua=%s duration=%s",
			response.status_code,
			request.method,
			request.path,
			get_client_ip(request, current_app.config["TRUSTED_PROXIES"]),
			json.dumps(request.headers.get("User-Agent", "")),
			format_duration(duration),
		)
	except Exception as e:
		logger.error("after_request logging failed: %s", e)

	return response


def handle_exception(e):
	"""Turn any uncaught failure into a 500 without taking the process down."""
	if isinstance(e, HTTPException):
		return e

	logger.error(
		"event=unhandled_error method=%s path=%s detail=%s",
		request.method,
		request.path,
		e,
		exc_info=e,
	)
	return Response("Internal Server Error\n", status=500, mimetype="text/plain")


def index():
	"""Describe the caller: IP, user agent and GeoIP location."""
	start = time.perf_counter()

	ip = get_client_ip(request, current_app.config["TRUSTED_PROXIES"])
	country, city = current_app.extensions["geoip_resolver"].resolve(ip)

	info = VisitorInfo(
		ip=ip,
		user_agent=request.headers.get("User-Agent", ""),
		country=country,
		city=city,
	)
	response = respond(info, request.headers.get("Accept"))

	logger.info(
		"event=handled ip=%s method=%s path=%s duration=%s",
		ip,
		request.method,
		request.path,
		format_duration(time.perf_counter() - start),
	)
	return response


def create_app(settings: Settings | None = None, geoip_reader=None) -> Flask:
	"""Build the Flask app.

	`geoip_reader` is owned by the caller; with None every lookup comes back
	empty. Raises ConfigError if the HTML template cannot be loaded.
	"""
	if settings is None:
		settings = Settings()

	app = Flask(__name__, template_folder=str(settings.templates_dir.resolve()))
	app.config["TRUSTED_PROXIES"] = settings.trusted_proxies
	app.extensions["geoip_resolver"] = GeoIPResolver(geoip_reader)

	try:
		app.jinja_env.get_template(HTML_TEMPLATE)
	except TemplateError as e:
		raise ConfigError(
			"template_load_failed",
			f"{HTML_TEMPLATE} in {settings.templates_dir}: {e!r}",
		)

	app.before_request(before_request)
	app.after_request(after_request)
	app.register_error_handler(Exception, handle_exception)
	app.add_url_rule("/", view_func=index, methods=["GET"])

	return app


def _fatal(kind: str, detail) -> None:
	logger.error("error=%s detail=%s", kind, detail)
	sys.exit(1)


def main() -> None:
	try:
		settings = Settings.from_env()
	except ConfigError as e:
		setup_logging()
		_fatal(e.kind, e.detail)

	setup_logging(settings.log_level)

	try:
		# Reader is closed when the server stops
		with open_city_reader(settings.geoip_city_db) as reader:
			app = create_app(settings, reader)

			logger.info("event=server_start port=%s", settings.port)
			# Debug should only be enabled in development
			app.run(
				host="0.0.0.0",
				port=settings.port,
				debug=settings.debug,
				use_reloader=False,
				threaded=True,
			)
	except ConfigError as e:
		_fatal(e.kind, e.detail)
	except OSError as e:
		_fatal("listen_failed", e)


if __name__ == "__main__":
	main()
