from bandlib import errors


#============================================
def splice_before_anchor(document: str, fragment: str, anchor: str) -> str:
	"""
	Insert fragment immediately before the last occurrence of anchor.

	Only one occurrence is touched. A missing anchor raises instead of
	appending, so a drifted template is never guessed at.
	"""
	if not anchor:
		raise ValueError("anchor must be a non-empty string")
	index = document.rfind(anchor)
	if index < 0:
		raise errors.AnchorNotFoundError(f"Anchor {anchor!r} not found in document.")
	return document[:index] + fragment + document[index:]
