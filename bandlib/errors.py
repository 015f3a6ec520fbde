"""Failure taxonomy shared by the site sync modules.

Every exception carries a `kind` string. Public operations report that
string in their result instead of letting the exception escape.
"""


#============================================
class SiteSyncError(RuntimeError):
	"""
	Base class for all site sync failures.
	"""

	kind = "SiteSyncError"

	def __init__(self, message: str, detail: str = ""):
		super().__init__(message)
		self.detail = detail

	#============================================
	def describe(self) -> str:
		"""
		Return message plus upstream detail when present.
		"""
		text = str(self)
		if self.detail:
			return f"{text} ({self.detail})"
		return text


#============================================
class TransportError(SiteSyncError):
	"""
	Network, timeout, or unexpected remote status failure.
	"""

	kind = "TransportError"


#============================================
class RateLimitError(TransportError):
	"""
	Raised when GitHub API rate limits block further requests.
	"""


#============================================
class NotFoundError(SiteSyncError):
	"""
	Remote repository or file does not exist.
	"""

	kind = "NotFoundError"


#============================================
class ConflictError(SiteSyncError):
	"""
	Remote store rejected a stale version token.
	"""

	kind = "ConflictError"


#============================================
class AnchorNotFoundError(SiteSyncError):
	"""
	Document does not contain the expected insertion anchor.
	"""

	kind = "AnchorNotFound"


#============================================
class AssetFileNotFoundError(SiteSyncError):
	"""
	Local asset file is missing before upload.
	"""

	kind = "FileNotFoundError"


#============================================
class ValidationError(SiteSyncError):
	"""
	Caller-supplied record is missing or has malformed fields.
	"""

	kind = "ValidationError"


#============================================
class FetchError(SiteSyncError):
	"""
	Reading the target document failed.
	"""

	kind = "FetchError"


#============================================
class UploadError(SiteSyncError):
	"""
	Asset upload phase of a release failed.
	"""

	kind = "UploadError"


#============================================
class AssetReadError(AssetFileNotFoundError):
	"""
	Local asset exists but cannot be read (permissions, I/O failure).
	"""
