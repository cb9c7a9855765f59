import ipaddress


def split_host_port(addr: str) -> tuple[str, str]:
	"""Split "host:port" or "[v6host]:port". Raises ValueError without a port."""
	if addr.startswith("["):
		end = addr.find("]")
		if end == -1:
			raise ValueError(f"missing ']' in address {addr!r}")
		if not addr[end + 1:].startswith(":"):
			raise ValueError(f"missing port in address {addr!r}")
		return addr[1:end], addr[end + 2:]

	host, sep, port = addr.rpartition(":")
	if not sep:
		raise ValueError(f"missing port in address {addr!r}")
	if ":" in host:
		raise ValueError(f"too many colons in address {addr!r}")
	return host, port


def peer_host(remote_addr: str) -> str:
	"""Host portion of the transport peer, or the address unchanged if it has no port."""
	try:
		host, _ = split_host_port(remote_addr)
	except ValueError:
		return remote_addr
	return host


def is_trusted_proxy(host: str, trusted_proxies) -> bool:
	"""Check whether a peer host falls inside any trusted network."""
	try:
		ip_obj = ipaddress.ip_address(host)
	except ValueError:
		return False

	# ::ffff:a.b.c.d must match IPv4 networks
	if ip_obj.version == 6 and ip_obj.ipv4_mapped is not None:
		ip_obj = ip_obj.ipv4_mapped

	return any(ip_obj in network for network in trusted_proxies)


def get_client_ip(request, trusted_proxies) -> str:
	"""Return the IP that should be considered the caller of `request`.

	X-Real-IP is honored only when the immediate peer is a trusted proxy;
	its value is then returned verbatim, even if it is not a valid IP.
	"""
	remote_addr = request.remote_addr or ""
	host = peer_host(remote_addr)

	if not is_trusted_proxy(host, trusted_proxies):
		return host

	real_ip = request.headers.get("X-Real-IP", "")
	if real_ip:
		return real_ip

	return host
