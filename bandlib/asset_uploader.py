import os

from bandlib import errors
from bandlib.github_client import GitHubClient


#============================================
class AssetUploader:
	"""
	Push local binary files into the site repository as new blobs.
	"""

	def __init__(self, client: GitHubClient, log_fn=None):
		self.client = client
		self.log_fn = log_fn

	#============================================
	def log(self, message: str) -> None:
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def upload(
		self,
		owner: str,
		repo_name: str,
		local_path: str,
		remote_path: str,
		message: str = "",
	) -> str:
		"""
		Commit one local file at remote_path; return the stored path.

		Runs exactly one create call with no retry, so one call never
		produces two commits. An existing remote path surfaces as ConflictError.
		"""
		if not os.path.isfile(local_path):
			raise errors.AssetFileNotFoundError(f"File not found: {local_path}")
		try:
			with open(local_path, "rb") as handle:
				data = handle.read()
		except OSError as error:
			raise errors.AssetReadError(
				f"Could not read local asset: {local_path}",
				detail=str(error),
			) from error
		if not message:
			message = f"Upload {os.path.basename(remote_path)}"
		self.log(f"Uploading {local_path} -> {owner}/{repo_name}:{remote_path}")
		return self.client.create_file(owner, repo_name, remote_path, data, message)
