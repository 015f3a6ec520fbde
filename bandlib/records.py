"""Validated input records for listing updates."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from bandlib import errors


#============================================
def _require_text(data: dict, keys: list[str], label: str) -> str:
	"""
	Return the first non-blank value found under any of keys.
	"""
	for key in keys:
		value = data.get(key)
		if value is None:
			continue
		text = str(value).strip()
		if text:
			return text
	raise errors.ValidationError(f"Missing required field: {label}")


#============================================
def _optional_text(data: dict, keys: list[str]) -> str | None:
	for key in keys:
		value = data.get(key)
		if value is None:
			continue
		text = str(value).strip()
		if text:
			return text
	return None


#============================================
def validate_http_url(value: str, label: str) -> str:
	"""
	Require an absolute http or https URL.
	"""
	parsed = urlparse(value)
	if parsed.scheme not in ("http", "https") or not parsed.netloc:
		raise errors.ValidationError(f"Field {label} must be an http(s) URL: {value!r}")
	return value


@dataclass(frozen=True)
class EventRecord:
	name: str
	day: str
	month: str
	description: str
	venue_link: str

	#============================================
	@classmethod
	def from_dict(cls, data: dict) -> EventRecord:
		"""
		Build an event from dashboard form keys, rejecting blanks.
		"""
		return cls(
			name=_require_text(data, ["name"], "name"),
			day=_require_text(data, ["day"], "day"),
			month=_require_text(data, ["month"], "month"),
			description=_require_text(data, ["description"], "description"),
			venue_link=_require_text(data, ["venue_link", "venueLink"], "venue_link"),
		)


@dataclass(frozen=True)
class ReleaseRecord:
	host_link: str
	cover_image_path: str | None = None

	#============================================
	@classmethod
	def from_dict(cls, data: dict) -> ReleaseRecord:
		"""
		Build a release from dashboard form keys.
		"""
		host_link = _require_text(data, ["host_link", "hostLink"], "host_link")
		validate_http_url(host_link, "host_link")
		cover_image_path = _optional_text(
			data,
			["cover_image_path", "cover_image", "coverImage"],
		)
		return cls(host_link=host_link, cover_image_path=cover_image_path)


@dataclass(frozen=True)
class SiteCoordinates:
	owner: str = ""
	repo_name: str = ""
