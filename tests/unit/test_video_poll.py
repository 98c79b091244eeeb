# SPDX-License-Identifier: MIT
"""Unit tests for the video job poll loop.

Sleep and clock are injected, so each test runs instantly and time only moves
when the fake sleep is awaited.
"""

import httpx
import pytest

from mediagate.providers.siliconflow import VideoStatusResult
from mediagate.tasks.video_poll import POLL_INTERVAL, POLL_TIMEOUT, TaskOutcome, TaskSubmission, poll_video_task

VIDEO_URL = "https://cdn.siliconflow.cn/out/abc.mp4"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def submission():
    return TaskSubmission(
        request_id="req-1/abc",
        prompt="a cat surfing",
        model="Wan-AI/Wan2.1-T2V-14B",
        api_key="sf-key",
        start_time=0.0,
    )


def _status(status, **kwargs):
    return VideoStatusResult(status=status, **kwargs)


@pytest.fixture
def statuses(mocker):
    """Patch the provider status call; tests assign ``side_effect``."""
    return mocker.patch("mediagate.tasks.video_poll.get_video_status", new_callable=mocker.AsyncMock)


async def _poll(submission, settings, notifier, storage, clock, mirror=None, timeout=POLL_TIMEOUT):
    return await poll_video_task(
        submission,
        settings,
        notifier=notifier,
        storage=storage,
        mirror=mirror,
        timeout=timeout,
        sleep=clock.sleep,
        clock=clock,
    )


@pytest.mark.unit
async def test_succeed_without_url_fails_after_one_check(statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [_status("Succeed")]

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.FAILED
    assert statuses.await_count == 1
    assert len(notifier.messages) == 1
    assert "no video URL" in notifier.messages[0]


@pytest.mark.unit
async def test_in_progress_then_succeed(mocker, statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [
        _status("InQueue"),
        _status("InProgress"),
        _status("InProgress"),
        _status("Succeed", video_url=VIDEO_URL, inference_time=42.0, seed=7),
    ]

    async def fake_download(url, storage_, path_type, filename, timeout=60.0):
        return await storage_.write(path_type, filename, b"MP4DATA")

    download = mocker.patch("mediagate.tasks.video_poll.download_file", side_effect=fake_download)

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.SUCCEEDED
    assert statuses.await_count == 4
    assert clock.sleeps == [POLL_INTERVAL] * 3
    assert download.call_args.args[0] == VIDEO_URL
    assert download.call_args.args[3] == "video_req-1_abc.mp4"
    assert (settings.output_dir / "video" / "video_req-1_abc.mp4").read_bytes() == b"MP4DATA"

    # Exactly one terminal notification
    assert len(notifier.messages) == 1
    assert "Video generation complete" in notifier.messages[0]
    assert "42.0s" in notifier.messages[0]
    assert VIDEO_URL in notifier.messages[0]


@pytest.mark.unit
async def test_succeed_with_mirror_sends_upload_notification(
    mocker, statuses, submission, settings, notifier, storage, clock, fake_mirror
):
    statuses.side_effect = [_status("Succeed", video_url=VIDEO_URL)]

    async def fake_download(url, storage_, path_type, filename, timeout=60.0):
        return await storage_.write(path_type, filename, b"MP4")

    mocker.patch("mediagate.tasks.video_poll.download_file", side_effect=fake_download)
    mirror = fake_mirror
    mirror.url = "https://img.example.com/file/v.mp4"

    outcome = await _poll(submission, settings, notifier, storage, clock, mirror=mirror)

    assert outcome is TaskOutcome.SUCCEEDED
    assert mirror.uploads == [("video_req-1_abc.mp4", 3)]
    assert len(notifier.messages) == 2
    assert "uploaded" in notifier.messages[0]
    assert "https://img.example.com/file/v.mp4" in notifier.messages[1]


@pytest.mark.unit
async def test_unreadable_video_skips_mirror_and_still_succeeds(
    mocker, statuses, submission, settings, notifier, storage, clock, fake_mirror
):
    statuses.side_effect = [_status("Succeed", video_url=VIDEO_URL)]

    async def fake_download(url, storage_, path_type, filename, timeout=60.0):
        return await storage_.write(path_type, filename, b"MP4")

    mocker.patch("mediagate.tasks.video_poll.download_file", side_effect=fake_download)
    mocker.patch.object(storage, "read", side_effect=OSError("disk gone"))

    outcome = await _poll(submission, settings, notifier, storage, clock, mirror=fake_mirror)

    assert outcome is TaskOutcome.SUCCEEDED
    assert fake_mirror.uploads == []
    assert len(notifier.messages) == 2
    assert "saved locally" in notifier.messages[0]
    assert "Video generation complete" in notifier.messages[1]
    assert "Remote URL" not in notifier.messages[1]


@pytest.mark.unit
async def test_download_failure_notifies_failure(mocker, statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [_status("Succeed", video_url=VIDEO_URL)]
    request = httpx.Request("GET", VIDEO_URL)
    mocker.patch(
        "mediagate.tasks.video_poll.download_file",
        side_effect=httpx.HTTPStatusError("gone", request=request, response=httpx.Response(410, request=request)),
    )

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.FAILED
    assert len(notifier.messages) == 1
    assert "download failed" in notifier.messages[0]


@pytest.mark.unit
async def test_failed_reports_reason(statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [_status("InProgress"), _status("Failed", reason="content policy")]

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.FAILED
    assert statuses.await_count == 2
    assert len(notifier.messages) == 1
    assert "content policy" in notifier.messages[0]


@pytest.mark.unit
async def test_failed_without_reason(statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [_status("Failed")]

    await _poll(submission, settings, notifier, storage, clock)

    assert "unknown error" in notifier.messages[0]


@pytest.mark.unit
async def test_status_check_error_becomes_failed(statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = httpx.ConnectError("network down")

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.FAILED
    assert statuses.await_count == 1
    assert len(notifier.messages) == 1
    assert "Error checking status: network down" in notifier.messages[0]


@pytest.mark.unit
async def test_timeout_stops_polling(statuses, submission, settings, notifier, storage, clock):
    statuses.return_value = _status("InProgress")

    outcome = await _poll(submission, settings, notifier, storage, clock, timeout=35.0)

    assert outcome is TaskOutcome.TIMED_OUT
    # Checks at t=0, 10, 20, 30; at t=40 the deadline is exceeded before checking
    assert statuses.await_count == 4
    assert len(notifier.messages) == 1
    assert "timed out" in notifier.messages[0]


@pytest.mark.unit
async def test_expired_submission_never_checks(statuses, submission, settings, notifier, storage, clock):
    clock.now = POLL_TIMEOUT + 1

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.TIMED_OUT
    statuses.assert_not_awaited()
    assert len(notifier.messages) == 1


@pytest.mark.unit
async def test_unknown_status_sends_one_diagnostic(statuses, submission, settings, notifier, storage, clock):
    statuses.side_effect = [_status("Paused")]

    outcome = await _poll(submission, settings, notifier, storage, clock)

    assert outcome is TaskOutcome.FAILED
    assert statuses.await_count == 1
    assert clock.sleeps == []
    assert len(notifier.messages) == 1
    assert "Paused" in notifier.messages[0]


@pytest.mark.unit
def test_status_payload_parsing():
    result = VideoStatusResult.from_payload(
        {
            "status": "Succeed",
            "reason": "",
            "results": {"videos": [{"url": VIDEO_URL}], "timings": {"inference": 3.5}, "seed": 11},
        }
    )
    assert result == VideoStatusResult(status="Succeed", video_url=VIDEO_URL, inference_time=3.5, seed=11)

    bare = VideoStatusResult.from_payload({"status": "InQueue"})
    assert bare.video_url is None and bare.reason is None

