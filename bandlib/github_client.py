import threading
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone

import requests
from github import Auth
from github import Github
from github import GithubException

from bandlib import content_codec
from bandlib import errors


@dataclass(frozen=True)
class RemoteFile:
	path: str
	content: str
	version_token: str


#============================================
class GitHubClient:
	"""
	Thin PyGithub wrapper for reading and writing single repository files.
	"""

	def __init__(self, token: str, timeout_seconds: int = 15, log_fn=None, verify_tls: bool = True):
		self.log_fn = log_fn
		self._counter_lock = threading.Lock()
		self._api_call_count = 0
		self._api_calls_by_context: dict[str, int] = {}
		self.client = self._build_github_client(token, timeout_seconds, verify_tls)

	#============================================
	def _build_github_client(self, token: str, timeout_seconds: int, verify_tls: bool) -> Github:
		"""
		Create Github client with a bounded timeout and retry disabled.
		"""
		if token:
			return Github(
				auth=Auth.Token(token),
				timeout=timeout_seconds,
				retry=None,
				verify=verify_tls,
			)
		return Github(timeout=timeout_seconds, retry=None, verify=verify_tls)

	#============================================
	def log(self, message: str) -> None:
		"""
		Emit one log line when logger is configured.
		"""
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def record_api_call(self, context: str) -> None:
		"""
		Track one outbound GitHub API call.

		One client may serve several request threads, so counters are locked.
		"""
		with self._counter_lock:
			self._api_call_count += 1
			if context not in self._api_calls_by_context:
				self._api_calls_by_context[context] = 0
			self._api_calls_by_context[context] += 1

	#============================================
	def api_usage_snapshot(self) -> dict:
		"""
		Return API call counters for reporting.
		"""
		with self._counter_lock:
			return {
				"api_call_count": self._api_call_count,
				"api_calls_by_context": dict(self._api_calls_by_context),
			}

	#============================================
	def normalize_datetime(self, value: datetime) -> datetime:
		"""
		Normalize datetime to timezone-aware UTC.
		"""
		if value.tzinfo is None:
			return value.replace(tzinfo=timezone.utc)
		return value.astimezone(timezone.utc)

	#============================================
	def parse_rate_limit_reset(self, reset_value) -> datetime:
		"""
		Normalize PyGithub reset values to timezone-aware UTC datetime.
		"""
		if isinstance(reset_value, datetime):
			return self.normalize_datetime(reset_value)
		if isinstance(reset_value, (int, float)):
			return datetime.fromtimestamp(float(reset_value), tz=timezone.utc)
		if isinstance(reset_value, str):
			return datetime.fromisoformat(reset_value.replace("Z", "+00:00"))
		raise RuntimeError(f"Unsupported rate-limit reset value: {reset_value!r}")

	#============================================
	def get_core_rate_limit_snapshot(self) -> tuple[int, datetime]:
		"""
		Read core rate-limit remaining/reset across PyGithub versions.
		"""
		self.record_api_call("GET /rate_limit")
		overview = self.client.get_rate_limit()
		rate_limit = getattr(overview, "core", None)
		if rate_limit is None:
			resources = getattr(overview, "resources", None)
			if isinstance(resources, dict):
				rate_limit = resources.get("core")
			elif resources is not None:
				rate_limit = getattr(resources, "core", None)
		if rate_limit is None:
			raise RuntimeError("Rate limit data does not expose core resource fields.")
		remaining = int(getattr(rate_limit, "remaining"))
		reset_time = self.parse_rate_limit_reset(getattr(rate_limit, "reset"))
		return remaining, reset_time

	#============================================
	def error_detail(self, error: GithubException) -> str:
		"""
		Extract the upstream message from a GithubException.
		"""
		data = getattr(error, "data", None)
		if isinstance(data, dict) and data.get("message"):
			return str(data["message"])
		if data:
			return str(data)
		return str(error)

	#============================================
	def raise_from_github_error(self, error: GithubException, context: str) -> None:
		"""
		Translate a GithubException into the site sync failure taxonomy.
		"""
		status = getattr(error, "status", None)
		detail = self.error_detail(error)
		lower = detail.lower()
		if status == 404:
			raise errors.NotFoundError(f"Not found while {context}.", detail=detail) from error
		if status == 409:
			raise errors.ConflictError(
				f"Version token rejected as stale while {context}.",
				detail=detail,
			) from error
		# creating over an existing path is rejected with 422 "sha wasn't supplied"
		if status == 422 and "sha" in lower:
			raise errors.ConflictError(
				f"Remote path already exists or changed while {context}.",
				detail=detail,
			) from error
		if status in (403, 429) and "rate limit" in lower:
			reset_text = "unknown"
			remaining_text = "unknown"
			try:
				remaining, reset_time = self.get_core_rate_limit_snapshot()
				reset_text = reset_time.isoformat()
				remaining_text = str(remaining)
			except (GithubException, requests.exceptions.RequestException, RuntimeError) as snapshot_error:
				self.log(f"Rate limit check ({context}) unavailable: {snapshot_error}")
			raise errors.RateLimitError(
				"GitHub API rate limit exceeded while "
				+ f"{context}; remaining={remaining_text}; reset_at={reset_text}. "
				+ "Provide settings.yaml github.token for higher limits.",
				detail=detail,
			) from error
		raise errors.TransportError(
			f"GitHub returned status {status} while {context}.",
			detail=detail,
		) from error

	#============================================
	def call_api(self, context: str, call_fn):
		"""
		Run one API call, classifying every failure.
		"""
		self.record_api_call(context)
		try:
			return call_fn()
		except GithubException as error:
			self.raise_from_github_error(error, context)
		except requests.exceptions.RequestException as error:
			raise errors.TransportError(
				f"GitHub transport failure while {context}.",
				detail=str(error),
			) from error

	#============================================
	def get_repo(self, owner: str, repo_name: str):
		"""
		Get a lazy repository handle; no request is sent until it is used.
		"""
		return self.client.get_repo(f"{owner}/{repo_name}", lazy=True)

	#============================================
	def fetch_file(self, owner: str, repo_name: str, path: str) -> RemoteFile:
		"""
		Read one text file and its blob SHA.
		"""
		context = f"GET /repos/{owner}/{repo_name}/contents/{path}"
		repo_obj = self.get_repo(owner, repo_name)
		content = self.call_api(context, lambda: repo_obj.get_contents(path))
		if isinstance(content, list):
			raise errors.NotFoundError(f"Expected a file but found a directory at {path}.")
		version_token = getattr(content, "sha", "") or ""
		if not version_token:
			raise errors.TransportError(f"Response for {context} carried no sha.")
		# files over 1 MB come back with encoding "none" and no inline content
		encoding = getattr(content, "encoding", "base64") or "base64"
		if encoding != "base64":
			raise errors.TransportError(
				f"Response for {context} has no inline content (encoding={encoding!r}).",
				detail="file too large for the contents API",
			)
		text = content_codec.decode_text(getattr(content, "content", "") or "")
		self.log(f"Fetched {owner}/{repo_name}:{path} sha={version_token} ({len(text)} chars)")
		return RemoteFile(path=path, content=text, version_token=version_token)

	#============================================
	def _result_content(self, result: dict, context: str):
		content = None
		if isinstance(result, dict):
			content = result.get("content")
		if content is None:
			raise errors.TransportError(f"Response for {context} carried no content object.")
		return content

	#============================================
	def commit_file(
		self,
		owner: str,
		repo_name: str,
		path: str,
		new_content: str,
		version_token: str,
		message: str,
	) -> str:
		"""
		Overwrite one text file, gated on the version token; return the new token.
		"""
		if not version_token:
			raise ValueError("version_token is required to update an existing file")
		context = f"PUT /repos/{owner}/{repo_name}/contents/{path}"
		repo_obj = self.get_repo(owner, repo_name)
		result = self.call_api(
			context,
			lambda: repo_obj.update_file(path, message, new_content, sha=version_token),
		)
		new_token = getattr(self._result_content(result, context), "sha", "") or ""
		if not new_token:
			raise errors.TransportError(f"Response for {context} carried no sha.")
		self.log(f"Committed {owner}/{repo_name}:{path} sha={version_token} -> {new_token}")
		return new_token

	#============================================
	def create_file(
		self,
		owner: str,
		repo_name: str,
		path: str,
		data: bytes,
		message: str,
	) -> str:
		"""
		Commit one new blob at path; return the stored remote path.
		"""
		context = f"PUT /repos/{owner}/{repo_name}/contents/{path}"
		repo_obj = self.get_repo(owner, repo_name)
		result = self.call_api(
			context,
			lambda: repo_obj.create_file(path, message, data),
		)
		stored_path = getattr(self._result_content(result, context), "path", "") or path
		self.log(f"Created {owner}/{repo_name}:{stored_path} ({len(data)} bytes)")
		return stored_path
