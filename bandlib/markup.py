"""Render listing records into single self-closing component tags.

Both renderers are pure. Every interpolated value is HTML-escaped so a
quote in a band's event name cannot break out of its attribute.
"""

# Standard Library
import html

from bandlib import records


#============================================
def escape_attribute(value: str) -> str:
	"""Escape a value for a double-quoted attribute.

	Args:
		value: Raw text supplied by the dashboard.

	Returns:
		Text with ampersands, angle brackets and both quote styles escaped.
	"""
	return html.escape(str(value), quote=True)


#============================================
def render_event(record: records.EventRecord) -> str:
	"""Render one event as an `<Event ... />` line.

	Args:
		record: Validated event record.

	Returns:
		Newline-terminated tag with attributes in fixed order.
	"""
	return (
		f'<Event title="{escape_attribute(record.name)}" '
		+ f'description="{escape_attribute(record.description)}" '
		+ f'month="{escape_attribute(record.month)}" '
		+ f'day="{escape_attribute(record.day)}" '
		+ f'link="{escape_attribute(record.venue_link)}" />\n'
	)


#============================================
def render_release(asset_public_path: str, host_link: str) -> str:
	"""Render one release as a `<Release ... />` line.

	Args:
		asset_public_path: Site-relative URL of the uploaded cover image.
		host_link: Where the release is hosted.

	Returns:
		Newline-terminated tag.
	"""
	return (
		f'<Release image="{escape_attribute(asset_public_path)}" '
		+ f'link="{escape_attribute(host_link)}" />\n'
	)
