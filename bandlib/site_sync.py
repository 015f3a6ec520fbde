"""Splice-and-commit orchestration for band site listings.

Each listing update runs fetch, synthesize, splice and commit in order,
re-running the whole cycle on a stale-token conflict up to the configured
attempt count. Releases run as a two-phase saga: the cover image is
uploaded first, then the listing is patched to reference it. A failed
second phase leaves the uploaded image unreferenced; that is logged and
reported, not rolled back.

Public methods never raise site sync failures. They return a SyncResult
carrying either the new value or the failure kind and upstream detail.
"""

# Standard Library
import dataclasses
import os
import re

from bandlib import conflict_retry
from bandlib import errors
from bandlib import markup
from bandlib import records
from bandlib import splice
from bandlib import target_resolver
from bandlib.asset_uploader import AssetUploader
from bandlib.github_client import GitHubClient
from bandlib.site_settings import SiteSyncConfig


@dataclasses.dataclass(frozen=True)
class SyncResult:
	ok: bool
	value: str = ""
	public_path: str = ""
	failure_kind: str = ""
	detail: str = ""
	attempts: int = 0

	#============================================
	@classmethod
	def done(cls, value: str, attempts: int = 1, public_path: str = ""):
		return cls(ok=True, value=value, public_path=public_path, attempts=attempts)

	#============================================
	@classmethod
	def failed(cls, error: errors.SiteSyncError, attempts: int = 0):
		return cls(
			ok=False,
			failure_kind=error.kind,
			detail=error.describe(),
			attempts=attempts,
		)

	#============================================
	def to_dict(self) -> dict:
		return dataclasses.asdict(self)


#============================================
def slugify(text: str) -> str:
	"""
	Lowercase text and collapse every non-alphanumeric run into one dash.
	"""
	slug = (text or "").strip().lower()
	slug = re.sub(r"[^a-z0-9]+", "-", slug)
	return slug.strip("-")


#============================================
def coerce_event(event) -> records.EventRecord:
	"""
	Accept an EventRecord or form dict and return a validated record.
	"""
	if isinstance(event, records.EventRecord):
		return records.EventRecord.from_dict(dataclasses.asdict(event))
	if isinstance(event, dict):
		return records.EventRecord.from_dict(event)
	raise errors.ValidationError(f"Unsupported event payload type: {type(event).__name__}")


#============================================
def coerce_release(release) -> records.ReleaseRecord:
	"""
	Accept a ReleaseRecord or form dict and return a validated record.
	"""
	if isinstance(release, records.ReleaseRecord):
		return records.ReleaseRecord.from_dict(dataclasses.asdict(release))
	if isinstance(release, dict):
		return records.ReleaseRecord.from_dict(release)
	raise errors.ValidationError(f"Unsupported release payload type: {type(release).__name__}")


#============================================
class SiteSync:
	"""
	Entry point the dashboard calls to edit a band site's repository.
	"""

	def __init__(self, config: SiteSyncConfig, client: GitHubClient | None = None, log_fn=None):
		self.config = config
		self.log_fn = log_fn
		if client is None:
			client = GitHubClient(
				config.access_token,
				timeout_seconds=config.timeout_seconds,
				log_fn=log_fn,
				verify_tls=config.verify_tls,
			)
		self.client = client
		self.resolver = target_resolver.TargetResolver(config)
		self.uploader = AssetUploader(client, log_fn=log_fn)

	#============================================
	def log(self, message: str) -> None:
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def splice_and_commit(
		self,
		target: target_resolver.TargetConfig,
		anchor: str,
		render_fn,
		message: str,
	) -> str:
		"""
		Run one fetch, synthesize, splice, commit cycle; return the new token.

		render_fn is called after every fetch so a retried cycle always
		renders fresh.
		"""
		location = f"{target.owner}/{target.repo_name}:{target.file_path}"
		self.log(f"[fetching] {location}")
		try:
			remote_file = self.client.fetch_file(target.owner, target.repo_name, target.file_path)
		except (errors.NotFoundError, errors.TransportError) as error:
			raise errors.FetchError(
				f"Could not fetch {location}.",
				detail=error.describe(),
			) from error
		self.log("[synthesizing] rendering fragment")
		fragment = render_fn()
		self.log(f"[splicing] inserting before {anchor!r}")
		spliced = splice.splice_before_anchor(remote_file.content, fragment, anchor)
		self.log(f"[committing] {location} with sha={remote_file.version_token}")
		new_token = self.client.commit_file(
			target.owner,
			target.repo_name,
			target.file_path,
			spliced,
			remote_file.version_token,
			message,
		)
		self.log(f"[done] {location} sha={new_token}")
		return new_token

	#============================================
	def _update_listing(self, content_kind: str, render_fn, message: str, coords) -> SyncResult:
		"""
		Resolve the listing target and run splice-and-commit with conflict retry.
		"""
		attempt_count = 0
		try:
			target = self.resolver.resolve(content_kind, coords)
			anchor = self.resolver.anchor_for(content_kind)

			def run_attempt() -> str:
				nonlocal attempt_count
				attempt_count += 1
				return self.splice_and_commit(target, anchor, render_fn, message)

			new_token, attempts = conflict_retry.retry_on_conflict(
				run_attempt,
				max_attempts=self.config.max_conflict_attempts,
				log_fn=self.log_fn,
			)
		except errors.SiteSyncError as error:
			self.log(f"[failed] {content_kind}: {error.kind}: {error.describe()}")
			return SyncResult.failed(error, attempts=attempt_count)
		return SyncResult.done(new_token, attempts=attempts)

	#============================================
	def add_event_to_listing(self, event, coords: records.SiteCoordinates | None = None) -> SyncResult:
		"""
		Append one event tag to the dates listing.
		"""
		try:
			record = coerce_event(event)
		except errors.ValidationError as error:
			return SyncResult.failed(error)
		message = f"Add event {record.name} ({record.day} {record.month}) to dates listing"
		return self._update_listing(
			target_resolver.EVENTS_LISTING,
			lambda: markup.render_event(record),
			message,
			coords,
		)

	#============================================
	def upload_asset(
		self,
		local_path: str,
		remote_path: str,
		coords: records.SiteCoordinates | None = None,
	) -> SyncResult:
		"""
		Upload one local file to remote_path in the site repository.

		value holds the stored in-repo path, public_path the site URL path.
		"""
		try:
			target = self.resolver.resolve(target_resolver.ASSET_DIRECTORY, coords)
			stored_path = self.uploader.upload(
				target.owner,
				target.repo_name,
				local_path,
				remote_path,
			)
		except errors.SiteSyncError as error:
			self.log(f"[failed] upload {local_path}: {error.kind}: {error.describe()}")
			return SyncResult.failed(error)
		return SyncResult.done(
			stored_path,
			public_path=self.resolver.public_asset_path(stored_path),
		)

	#============================================
	def add_release_to_listing(self, release, coords: records.SiteCoordinates | None = None) -> SyncResult:
		"""
		Upload the cover image, then append one release tag to the cover-flow listing.
		"""
		try:
			record = coerce_release(release)
			if not record.cover_image_path:
				raise errors.ValidationError("Release requires a cover image to render its tag.")
			asset_target = self.resolver.asset_remote_path(
				os.path.basename(record.cover_image_path),
				coords,
			)
			# fail on bad listing coordinates before anything is uploaded
			self.resolver.resolve(target_resolver.RELEASES_LISTING, coords)
		except errors.ValidationError as error:
			return SyncResult.failed(error)

		self.log(f"[release 1/2] uploading cover {record.cover_image_path}")
		try:
			stored_path = self.uploader.upload(
				asset_target.owner,
				asset_target.repo_name,
				record.cover_image_path,
				asset_target.file_path,
				message=f"Upload release cover {os.path.basename(asset_target.file_path)}",
			)
		except errors.SiteSyncError as error:
			wrapped = errors.UploadError(
				"Release cover upload failed.",
				detail=f"{error.kind}: {error.describe()}",
			)
			self.log(f"[failed] release upload: {wrapped.describe()}")
			return SyncResult.failed(wrapped)
		public_path = self.resolver.public_asset_path(stored_path)

		self.log(f"[release 2/2] adding release tag for {public_path}")
		result = self._update_listing(
			target_resolver.RELEASES_LISTING,
			lambda: markup.render_release(public_path, record.host_link),
			f"Add release {record.host_link} to cover-flow listing",
			coords,
		)
		if not result.ok:
			self.log(f"[warning] orphaned asset left at {stored_path}")
			return dataclasses.replace(
				result,
				public_path=public_path,
				detail=f"{result.detail}; orphaned asset: {stored_path}",
			)
		return dataclasses.replace(result, public_path=public_path)

	#============================================
	def upload_logo(
		self,
		local_path: str,
		band_name: str,
		coords: records.SiteCoordinates | None = None,
	) -> SyncResult:
		"""
		Upload a band logo as <slug>_logo.<ext> under the asset directory.
		"""
		try:
			slug = slugify(band_name)
			if not slug:
				raise errors.ValidationError(f"Band name has no usable characters: {band_name!r}")
			extension = os.path.splitext(local_path)[1].lower()
			if not extension:
				raise errors.ValidationError(f"Logo file has no extension: {local_path}")
			target = self.resolver.asset_remote_path(f"{slug}_logo{extension}", coords)
		except errors.ValidationError as error:
			return SyncResult.failed(error)
		return self.upload_asset(
			local_path,
			target.file_path,
			records.SiteCoordinates(owner=target.owner, repo_name=target.repo_name),
		)
