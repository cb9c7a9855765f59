from dataclasses import dataclass


@dataclass(frozen=True)
class VisitorInfo:
	"""What the service knows about the caller of a single request."""

	ip: str
	user_agent: str = ""
	country: str = ""
	city: str = ""

	def to_dict(self) -> dict:
		"""JSON payload; country and city are omitted when unknown."""
		data = {
			"ip": self.ip,
			"user_agent": self.user_agent,
		}
		if self.country:
			data["country"] = self.country
		if self.city:
			data["city"] = self.city
		return data

	def to_text(self) -> str:
		return (
			f"Visitor IP: {self.ip}\n"
			f"User-Agent: {self.user_agent}\n"
			f"Country: {self.country}\n"
			f"City: {self.city}\n"
		)
