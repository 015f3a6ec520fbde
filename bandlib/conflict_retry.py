from bandlib import errors


#============================================
def retry_on_conflict(attempt_fn, max_attempts: int = 3, log_fn=None) -> tuple:
	"""
	Re-run a whole fetch-splice-commit attempt after a stale-token conflict.

	attempt_fn takes no arguments and must fetch fresh state each call.
	Only ConflictError is retried; anything else propagates immediately.
	Returns (value, attempts_used). Raises the last ConflictError when
	every attempt conflicts.
	"""
	if max_attempts < 1:
		raise ValueError(f"max_attempts must be >= 1; got {max_attempts}")
	for attempt in range(1, max_attempts + 1):
		try:
			return attempt_fn(), attempt
		except errors.ConflictError as error:
			if attempt == max_attempts:
				if log_fn is not None:
					log_fn(f"Conflict on attempt {attempt}/{max_attempts}; giving up: {error}")
				raise
			if log_fn is not None:
				log_fn(f"Conflict on attempt {attempt}/{max_attempts}; retrying with a fresh fetch.")
	raise RuntimeError("unreachable retry state")
