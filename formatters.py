from dataclasses import asdict

from flask import Response, jsonify, render_template

from visitor import VisitorInfo

JSON = "json"
TEXT = "text"
HTML = "html"

HTML_TEMPLATE = "template.html"


def negotiate(accept: str | None) -> str:
	"""Pick a representation from the Accept header.

	Plain substring checks, no media-range or q-value parsing. JSON wins
	over plain text, plain text over HTML.
	"""
	accept = accept or ""
	if "application/json" in accept:
		return JSON
	if "text/plain" in accept:
		return TEXT
	return HTML


def respond(info: VisitorInfo, accept: str | None) -> Response:
	"""Render `info` in the representation the client asked for."""
	kind = negotiate(accept)

	if kind == JSON:
		return jsonify(info.to_dict())

	if kind == TEXT:
		return Response(info.to_text(), status=200, mimetype="text/plain")

	# Rendering errors propagate to the app's error handler (500)
	return Response(
		render_template(HTML_TEMPLATE, **asdict(info)),
		status=200,
		mimetype="text/html",
	)
