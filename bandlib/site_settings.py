import os
from dataclasses import dataclass

import yaml

DEFAULT_EVENTS_PATH = "src/components/Dates.vue"
DEFAULT_RELEASES_PATH = "src/components/CoverFlow.vue"
DEFAULT_ASSET_DIR = "public/images"
DEFAULT_PUBLIC_ROOT = "public"
DEFAULT_EVENTS_ANCHOR = "</div>"
DEFAULT_RELEASES_ANCHOR = "</ul>"
DEFAULT_TIMEOUT_SECONDS = 15
DEFAULT_MAX_CONFLICT_ATTEMPTS = 3


@dataclass(frozen=True)
class SiteSyncConfig:
	access_token: str
	default_owner: str
	template_name: str
	repo_name: str
	events_path: str = DEFAULT_EVENTS_PATH
	releases_path: str = DEFAULT_RELEASES_PATH
	asset_dir: str = DEFAULT_ASSET_DIR
	public_root: str = DEFAULT_PUBLIC_ROOT
	base_path: str = "/"
	events_anchor: str = DEFAULT_EVENTS_ANCHOR
	releases_anchor: str = DEFAULT_RELEASES_ANCHOR
	timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
	max_conflict_attempts: int = DEFAULT_MAX_CONFLICT_ATTEMPTS
	verify_tls: bool = True


#============================================
def get_repo_root() -> str:
	"""
	Return repository root based on this module location.
	"""
	module_dir = os.path.dirname(os.path.abspath(__file__))
	repo_root = os.path.dirname(module_dir)
	return repo_root


#============================================
def resolve_settings_path(path_text: str) -> str:
	"""
	Resolve settings path against cwd first, then repo root.
	"""
	if os.path.isabs(path_text):
		return path_text
	cwd_candidate = os.path.abspath(path_text)
	if os.path.isfile(cwd_candidate):
		return cwd_candidate
	repo_root = get_repo_root()
	repo_candidate = os.path.join(repo_root, path_text)
	return os.path.abspath(repo_candidate)


#============================================
def load_settings(path_text: str) -> tuple[dict, str]:
	"""
	Load the site sync YAML settings and return them with the resolved path.

	A missing file is not an error; every key has a default except the token.
	"""
	resolved_path = resolve_settings_path(path_text)
	if not os.path.isfile(resolved_path):
		return {}, resolved_path
	with open(resolved_path, "r", encoding="utf-8") as handle:
		data = yaml.safe_load(handle.read())
	if data is None:
		return {}, resolved_path
	if not isinstance(data, dict):
		raise RuntimeError(
			f"Site sync settings must be a YAML mapping with github: and site: keys: {resolved_path}"
		)
	return data, resolved_path


#============================================
def get_nested_value(settings: dict, keys: list[str], default_value):
	"""
	Read nested mapping value by key path.
	"""
	current = settings
	for key in keys:
		if not isinstance(current, dict):
			return default_value
		if key not in current:
			return default_value
		current = current[key]
	return current


#============================================
def get_setting_str(settings: dict, keys: list[str], default_value: str) -> str:
	"""
	Read a string setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	return str(value).strip()


#============================================
def get_setting_int(settings: dict, keys: list[str], default_value: int) -> int:
	"""
	Read an integer setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	try:
		return int(value)
	except ValueError as error:
		raise RuntimeError(f"Invalid integer for setting path {'.'.join(keys)}: {value}") from error


#============================================
def get_setting_bool(settings: dict, keys: list[str], default_value: bool) -> bool:
	"""
	Read a boolean setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if isinstance(value, bool):
		return value
	if value is None:
		return default_value
	if isinstance(value, int):
		return value != 0
	if isinstance(value, str):
		text = value.strip().lower()
		if text in {"1", "true", "yes", "on"}:
			return True
		if text in {"0", "false", "no", "off"}:
			return False
	raise RuntimeError(f"Invalid boolean for setting path {'.'.join(keys)}: {value}")


#============================================
def build_sync_config(settings: dict) -> SiteSyncConfig:
	"""
	Build the immutable sync configuration from loaded settings.
	"""
	template_name = get_setting_str(settings, ["github", "template_repo"], "")
	repo_name = get_setting_str(settings, ["site", "repo_name"], "") or template_name
	base_path = get_setting_str(settings, ["site", "base_path"], "")
	if not base_path:
		base_path = f"/{repo_name}/" if repo_name else "/"
	timeout_seconds = get_setting_int(
		settings, ["github", "timeout_seconds"], DEFAULT_TIMEOUT_SECONDS,
	)
	if timeout_seconds < 1:
		raise RuntimeError(f"github.timeout_seconds must be >= 1; got {timeout_seconds}")
	max_attempts = get_setting_int(
		settings, ["site", "max_conflict_attempts"], DEFAULT_MAX_CONFLICT_ATTEMPTS,
	)
	if max_attempts < 1:
		raise RuntimeError(f"site.max_conflict_attempts must be >= 1; got {max_attempts}")
	return SiteSyncConfig(
		access_token=get_setting_str(settings, ["github", "token"], ""),
		default_owner=get_setting_str(settings, ["github", "owner"], ""),
		template_name=template_name,
		repo_name=repo_name,
		events_path=get_setting_str(settings, ["site", "events_path"], DEFAULT_EVENTS_PATH),
		releases_path=get_setting_str(settings, ["site", "releases_path"], DEFAULT_RELEASES_PATH),
		asset_dir=get_setting_str(settings, ["site", "asset_dir"], DEFAULT_ASSET_DIR),
		public_root=get_setting_str(settings, ["site", "public_root"], DEFAULT_PUBLIC_ROOT),
		base_path=base_path,
		events_anchor=get_setting_str(settings, ["site", "events_anchor"], DEFAULT_EVENTS_ANCHOR),
		releases_anchor=get_setting_str(settings, ["site", "releases_anchor"], DEFAULT_RELEASES_ANCHOR),
		timeout_seconds=timeout_seconds,
		max_conflict_attempts=max_attempts,
		verify_tls=get_setting_bool(settings, ["github", "verify_tls"], True),
	)
