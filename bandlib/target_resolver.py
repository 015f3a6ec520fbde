import posixpath
from dataclasses import dataclass

from bandlib import errors
from bandlib import records
from bandlib.site_settings import SiteSyncConfig

EVENTS_LISTING = "events_listing"
RELEASES_LISTING = "releases_listing"
ASSET_DIRECTORY = "asset_directory"
CONTENT_KINDS = (EVENTS_LISTING, RELEASES_LISTING, ASSET_DIRECTORY)


@dataclass(frozen=True)
class TargetConfig:
	owner: str
	repo_name: str
	file_path: str


#============================================
class TargetResolver:
	"""
	Single source of repository coordinates and in-repo paths.
	"""

	def __init__(self, config: SiteSyncConfig):
		self.config = config

	#============================================
	def resolve(self, content_kind: str, coords: records.SiteCoordinates | None = None) -> TargetConfig:
		"""
		Map a content kind to owner, repository and path.
		"""
		paths = {
			EVENTS_LISTING: self.config.events_path,
			RELEASES_LISTING: self.config.releases_path,
			ASSET_DIRECTORY: self.config.asset_dir,
		}
		if content_kind not in paths:
			raise ValueError(f"Unknown content kind: {content_kind!r}")
		owner = self.config.default_owner
		repo_name = self.config.repo_name
		if coords is not None:
			owner = coords.owner or owner
			repo_name = coords.repo_name or repo_name
		if not owner or not repo_name:
			raise errors.ValidationError(
				f"Repository owner and name are required for {content_kind}; "
				+ f"got owner={owner!r} repo_name={repo_name!r}"
			)
		return TargetConfig(owner=owner, repo_name=repo_name, file_path=paths[content_kind])

	#============================================
	def anchor_for(self, content_kind: str) -> str:
		"""
		Closing tag used as the splice point for a listing.
		"""
		if content_kind == EVENTS_LISTING:
			return self.config.events_anchor
		if content_kind == RELEASES_LISTING:
			return self.config.releases_anchor
		raise ValueError(f"Content kind has no anchor: {content_kind!r}")

	#============================================
	def asset_remote_path(self, file_name: str, coords: records.SiteCoordinates | None = None) -> TargetConfig:
		"""
		Target for a new asset stored under the asset directory.
		"""
		directory = self.resolve(ASSET_DIRECTORY, coords)
		remote_path = posixpath.join(directory.file_path.strip("/"), file_name)
		return TargetConfig(
			owner=directory.owner,
			repo_name=directory.repo_name,
			file_path=remote_path,
		)

	#============================================
	def public_asset_path(self, remote_path: str) -> str:
		"""
		Convert an in-repo path under the public root into a site URL path.

		public/images/test.jpg -> /<base_path>/images/test.jpg
		"""
		relative = remote_path.strip("/")
		root = self.config.public_root.strip("/")
		if root and (relative == root or relative.startswith(root + "/")):
			relative = relative[len(root):].lstrip("/")
		base_path = "/" + self.config.base_path.strip("/")
		if base_path == "/":
			return "/" + relative
		return base_path + "/" + relative
