import threading
from datetime import datetime
from datetime import timezone
from types import SimpleNamespace

import pytest
import requests
from github import GithubException

from bandlib import errors

import fake_github


DATES_PATH = "src/components/Dates.vue"


#============================================
def test_fetch_file_decodes_content_and_sha() -> None:
	"""
	Fetch returns decoded text plus the blob SHA as version token.
	"""
	repo = fake_github.FakeRepo()
	repo.set_file(DATES_PATH, "<template><div></div></template>", "abc123")
	client = fake_github.make_stub_client(repo)
	remote_file = client.fetch_file("test-owner", "City-Ground-BandPress", DATES_PATH)
	assert remote_file.content == "<template><div></div></template>"
	assert remote_file.version_token == "abc123"
	assert remote_file.path == DATES_PATH
	assert client.requested_repos == ["test-owner/City-Ground-BandPress"]


#============================================
def test_fetch_file_missing_raises_not_found() -> None:
	client = fake_github.make_stub_client(fake_github.FakeRepo())
	with pytest.raises(errors.NotFoundError):
		client.fetch_file("test-owner", "City-Ground", DATES_PATH)


#============================================
def test_fetch_file_directory_raises_not_found() -> None:
	"""
	A directory listing where a file was expected is not treated as content.
	"""
	repo = SimpleNamespace(get_contents=lambda path: [SimpleNamespace(path="a"), SimpleNamespace(path="b")])
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.NotFoundError):
		client.fetch_file("test-owner", "City-Ground", "src/components")


#============================================
def test_fetch_file_timeout_raises_transport_error() -> None:
	"""
	Transport-level failures surface as TransportError, never empty content.
	"""
	repo = fake_github.FakeRepo({DATES_PATH: "<div></div>"})
	repo.get_error = requests.exceptions.Timeout("read timed out")
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.TransportError) as excinfo:
		client.fetch_file("test-owner", "City-Ground", DATES_PATH)
	assert "read timed out" in excinfo.value.detail


#============================================
def test_fetch_file_server_error_raises_transport_error() -> None:
	repo = fake_github.FakeRepo({DATES_PATH: "<div></div>"})
	repo.get_error = GithubException(502, {"message": "Bad Gateway"}, None)
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.TransportError) as excinfo:
		client.fetch_file("test-owner", "City-Ground", DATES_PATH)
	assert excinfo.value.detail == "Bad Gateway"


#============================================
def test_commit_file_returns_new_token_from_content_object() -> None:
	repo = fake_github.FakeRepo(new_shas=["def456"])
	repo.set_file(DATES_PATH, "<div></div>", "abc123")
	client = fake_github.make_stub_client(repo)
	new_token = client.commit_file(
		"test-owner", "City-Ground", DATES_PATH, "<div>x</div>", "abc123", "Add event",
	)
	assert new_token == "def456"
	assert repo.updates[0]["sha"] == "abc123"
	assert repo.updates[0]["message"] == "Add event"
	assert repo.files[DATES_PATH]["text"] == "<div>x</div>"


#============================================
def test_commit_with_stale_token_is_rejected_and_fresh_token_succeeds() -> None:
	"""
	Reusing a token after it was consumed is a conflict; the returned token works.
	"""
	repo = fake_github.FakeRepo(new_shas=["sha-1", "sha-2"])
	repo.set_file(DATES_PATH, "<div></div>", "abc123")
	client = fake_github.make_stub_client(repo)
	first_token = client.commit_file("o", "r", DATES_PATH, "<div>1</div>", "abc123", "first")
	with pytest.raises(errors.ConflictError):
		client.commit_file("o", "r", DATES_PATH, "<div>2</div>", "abc123", "second")
	second_token = client.commit_file("o", "r", DATES_PATH, "<div>2</div>", first_token, "second")
	assert second_token == "sha-2"
	assert repo.files[DATES_PATH]["text"] == "<div>2</div>"


#============================================
def test_commit_file_requires_token() -> None:
	client = fake_github.make_stub_client(fake_github.FakeRepo({DATES_PATH: "<div></div>"}))
	with pytest.raises(ValueError):
		client.commit_file("o", "r", DATES_PATH, "<div></div>", "", "no token")
	assert client.api_usage_snapshot()["api_call_count"] == 0


#============================================
def test_create_file_over_existing_path_is_conflict() -> None:
	"""
	The API's own 422 "sha wasn't supplied" rule surfaces as ConflictError.
	"""
	repo = fake_github.FakeRepo({"public/images/test.jpg": "old"})
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.ConflictError):
		client.create_file("o", "r", "public/images/test.jpg", b"new", "Upload test.jpg")


#============================================
def test_create_file_returns_stored_path_and_counts_call() -> None:
	repo = fake_github.FakeRepo()
	client = fake_github.make_stub_client(repo)
	stored_path = client.create_file("o", "r", "public/images/test.jpg", b"\x89PNG", "Upload")
	assert stored_path == "public/images/test.jpg"
	assert repo.creates[0]["content"] == b"\x89PNG"
	usage = client.api_usage_snapshot()
	assert usage["api_call_count"] == 1
	assert usage["api_calls_by_context"] == {"PUT /repos/o/r/contents/public/images/test.jpg": 1}


#============================================
def test_unclassified_validation_error_is_transport_error() -> None:
	repo = fake_github.FakeRepo({DATES_PATH: "<div></div>"})
	repo.update_error = GithubException(422, {"message": "Invalid path"}, None)
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.TransportError):
		client.commit_file("o", "r", DATES_PATH, "<div></div>", "sha-x", "msg")


#============================================
def test_rate_limit_error_includes_reset_snapshot() -> None:
	"""
	403 rate-limit responses raise RateLimitError with remaining/reset details.
	"""
	reset_time = datetime(2026, 2, 22, 3, 30, 0, tzinfo=timezone.utc)
	overview = SimpleNamespace(core=SimpleNamespace(remaining=0, reset=reset_time))
	repo = fake_github.FakeRepo({DATES_PATH: "<div></div>"})
	repo.get_error = GithubException(403, {"message": "API rate limit exceeded for user"}, None)
	client = fake_github.make_stub_client(repo, rate_overview=overview)
	with pytest.raises(errors.RateLimitError) as excinfo:
		client.fetch_file("o", "r", DATES_PATH)
	assert "remaining=0" in str(excinfo.value)
	assert "2026-02-22T03:30:00+00:00" in str(excinfo.value)
	assert excinfo.value.kind == "TransportError"


#============================================
def test_rate_limit_error_tolerates_unknown_snapshot_shape() -> None:
	lines = []
	repo = fake_github.FakeRepo({DATES_PATH: "<div></div>"})
	repo.get_error = GithubException(403, {"message": "API rate limit exceeded"}, None)
	client = fake_github.make_stub_client(repo, log_lines=lines, rate_overview=SimpleNamespace(resources={}))
	with pytest.raises(errors.RateLimitError) as excinfo:
		client.fetch_file("o", "r", DATES_PATH)
	assert "remaining=unknown" in str(excinfo.value)
	assert any("unavailable" in line for line in lines)


#============================================
def test_core_rate_limit_snapshot_from_resources_dict() -> None:
	"""
	Rate limit should parse from overview.resources['core'] shape.
	"""
	overview = SimpleNamespace(resources={"core": SimpleNamespace(remaining=3, reset=1761110400)})
	client = fake_github.make_stub_client(fake_github.FakeRepo(), rate_overview=overview)
	remaining, parsed_reset = client.get_core_rate_limit_snapshot()
	assert remaining == 3
	assert parsed_reset.tzinfo is not None


#============================================
def test_core_rate_limit_snapshot_from_resources_attribute() -> None:
	overview = SimpleNamespace(
		resources=SimpleNamespace(
			core=SimpleNamespace(remaining=9, reset="2026-02-22T03:35:00Z"),
		)
	)
	client = fake_github.make_stub_client(fake_github.FakeRepo(), rate_overview=overview)
	remaining, parsed_reset = client.get_core_rate_limit_snapshot()
	assert remaining == 9
	assert parsed_reset.isoformat() == "2026-02-22T03:35:00+00:00"


#============================================
def test_fetch_file_without_inline_content_raises_transport_error() -> None:
	"""
	Large files come back with encoding "none"; they are never read as empty.
	"""
	large_file = SimpleNamespace(path=DATES_PATH, sha="abc123", content="", encoding="none")
	repo = SimpleNamespace(get_contents=lambda path: large_file)
	client = fake_github.make_stub_client(repo)
	with pytest.raises(errors.TransportError) as excinfo:
		client.fetch_file("o", "r", DATES_PATH)
	assert "encoding='none'" in str(excinfo.value)


#============================================
def test_api_call_counters_are_thread_safe() -> None:
	"""
	Concurrent callers sharing one client do not lose counter updates.
	"""
	client = fake_github.make_stub_client(fake_github.FakeRepo())

	def record_many():
		for _ in range(500):
			client.record_api_call("GET /repos/o/r/contents/x")

	threads = [threading.Thread(target=record_many) for _ in range(8)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()
	usage = client.api_usage_snapshot()
	assert usage["api_call_count"] == 4000
	assert usage["api_calls_by_context"]["GET /repos/o/r/contents/x"] == 4000
