#!/usr/bin/env python3
import argparse
import json
import sys
from datetime import datetime

import rich.console

from bandlib import records
from bandlib import site_settings
from bandlib.site_sync import SiteSync


RICH_CONSOLE = rich.console.Console()


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	line = f"[sync_band_site {now_text}] {message}"
	lower = message.lower()
	style = "cyan"
	if ("failed" in lower) or ("error" in lower):
		style = "bold red"
	elif ("conflict" in lower) or ("orphaned" in lower) or ("warning" in lower):
		style = "yellow"
	elif ("[done]" in lower) or ("committed" in lower) or ("created" in lower):
		style = "green"
	RICH_CONSOLE.print(line, style=style, markup=False, highlight=False)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Add events, releases, and assets to a band site repository."
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for token, owner, and site paths.",
	)
	parser.add_argument(
		"--owner",
		default="",
		help="Repository owner (falls back to settings.yaml github.owner).",
	)
	parser.add_argument(
		"--repo",
		default="",
		help="Repository name (falls back to settings.yaml site.repo_name).",
	)
	subparsers = parser.add_subparsers(dest="command", required=True)

	event_parser = subparsers.add_parser("add-event", help="Add one event to the dates listing.")
	event_parser.add_argument("--name", required=True)
	event_parser.add_argument("--day", required=True)
	event_parser.add_argument("--month", required=True)
	event_parser.add_argument("--description", required=True)
	event_parser.add_argument("--venue-link", dest="venue_link", required=True)

	release_parser = subparsers.add_parser(
		"add-release",
		help="Upload a cover image and add one release to the cover-flow listing.",
	)
	release_parser.add_argument("--host-link", dest="host_link", required=True)
	release_parser.add_argument("--cover-image", dest="cover_image", required=True)

	asset_parser = subparsers.add_parser("upload-asset", help="Upload one local file.")
	asset_parser.add_argument("local_path")
	asset_parser.add_argument("remote_path")

	logo_parser = subparsers.add_parser("upload-logo", help="Upload the band logo.")
	logo_parser.add_argument("local_path")
	logo_parser.add_argument("--band-name", dest="band_name", required=True)

	args = parser.parse_args(argv)
	return args


#============================================
def run_command(sync: SiteSync, args: argparse.Namespace):
	"""
	Dispatch one parsed sub-command and return its SyncResult.
	"""
	coords = records.SiteCoordinates(owner=args.owner.strip(), repo_name=args.repo.strip())
	if args.command == "add-event":
		event = {
			"name": args.name,
			"day": args.day,
			"month": args.month,
			"description": args.description,
			"venue_link": args.venue_link,
		}
		return sync.add_event_to_listing(event, coords)
	if args.command == "add-release":
		release = {"host_link": args.host_link, "cover_image": args.cover_image}
		return sync.add_release_to_listing(release, coords)
	if args.command == "upload-asset":
		return sync.upload_asset(args.local_path, args.remote_path, coords)
	if args.command == "upload-logo":
		return sync.upload_logo(args.local_path, args.band_name, coords)
	raise RuntimeError(f"Unknown command: {args.command}")


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Run one site update and print its result as JSON.
	"""
	args = parse_args(argv)
	settings, settings_path = site_settings.load_settings(args.settings)
	log_step(f"Using settings file: {settings_path}")
	config = site_settings.build_sync_config(settings)
	if not config.access_token:
		log_step("Error: settings.yaml github.token is required for repository writes.")
		return 2
	sync = SiteSync(config, log_fn=log_step)
	result = run_command(sync, args)
	print(json.dumps(result.to_dict(), ensure_ascii=True, sort_keys=True))
	usage = sync.client.api_usage_snapshot()
	log_step(f"GitHub API calls: {usage['api_call_count']}")
	if not result.ok:
		log_step(f"Update failed: {result.failure_kind}: {result.detail}")
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
