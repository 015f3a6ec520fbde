import base64
import binascii

from bandlib import errors


#============================================
def decode_text(payload: str) -> str:
	"""
	Decode a contents API base64 payload into UTF-8 text.

	GitHub wraps the payload at 60 columns; the line breaks are dropped
	before decoding. Non-UTF-8 content is rejected rather than replaced,
	since the decoded text is written back on commit.
	"""
	compact = "".join((payload or "").split())
	try:
		raw = base64.b64decode(compact, validate=True)
	except binascii.Error as error:
		raise errors.TransportError("Remote content is not valid base64.") from error
	try:
		return raw.decode("utf-8")
	except UnicodeDecodeError as error:
		raise errors.TransportError("Remote content is not UTF-8 text.") from error
