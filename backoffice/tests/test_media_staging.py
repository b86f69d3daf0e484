from __future__ import annotations

from types import SimpleNamespace

import pytest

from backoffice.features.media.bridge import SubmissionBridge
from backoffice.features.media.errors import AttachmentValidationError, ProviderAlreadyRegisteredError
from backoffice.features.media.schemas import CandidateFile
from backoffice.features.media.staging import StagingList

MB = 1024 * 1024


def _staging(**overrides) -> StagingList:
    options = {"max_file_size": 50 * MB, "max_total_size": 100 * MB}
    options.update(overrides)
    return StagingList(**options)


def _file(name: str, content_type: str, size: int) -> CandidateFile:
    return CandidateFile(filename=name, content_type=content_type, size_bytes=size)


def test_stage_keeps_rejected_entries_visible_but_out_of_pending_files() -> None:
    staging = _staging()

    staged = staging.stage(
        [
            _file("logo.png", "image/png", 2 * MB),
            _file("report.pdf", "application/pdf", 60 * MB),
            _file("tools.zip", "application/zip", MB),
        ]
    )

    assert [item.accepted for item in staged] == [True, False, False]
    assert staged[0].preview_ref is not None
    assert staged[1].preview_ref is None
    assert "50MB" in (staged[1].rejection_reason or "")
    assert [item.filename for item in staging.pending_files()] == ["logo.png"]
    assert staging.accepted_size == 2 * MB
    assert len(staging.items) == 3


def test_aggregate_limit_spans_separate_selections() -> None:
    staging = _staging()
    staging.stage([_file("a.mp4", "video/mp4", 45 * MB), _file("b.mp4", "video/mp4", 45 * MB)])

    later = staging.stage([_file("c.mp4", "video/mp4", 20 * MB)])

    assert later[0].accepted is False
    assert later[0].rejection_reason == "Exceeds the 100MB total limit"


def test_max_files_rejects_whole_selection() -> None:
    staging = _staging(max_files=2)
    staging.stage([_file("a.png", "image/png", 10)])

    with pytest.raises(AttachmentValidationError, match="You can only upload 2 files"):
        staging.stage([_file("b.png", "image/png", 10), _file("c.png", "image/png", 10)])

    assert len(staging.items) == 1
    assert staging.previews.live_count == 1


def test_remove_unknown_attachment_returns_false() -> None:
    staging = _staging()
    assert staging.remove("missing") is False


def test_clear_pending_twice_matches_clearing_once() -> None:
    bridge = SubmissionBridge()
    staging = _staging()
    staging.attach_to(bridge)
    staging.stage([_file("a.png", "image/png", 10), _file("b.txt", "text/plain", 10)])

    bridge.clear_pending()
    first_state = (staging.items, staging.previews.live_count, staging.previews.release_count)
    bridge.clear_pending()
    second_state = (staging.items, staging.previews.live_count, staging.previews.release_count)

    assert first_state == second_state == ((), 0, 1)


def test_bridge_snapshot_reflects_current_state() -> None:
    bridge = SubmissionBridge()
    staging = _staging()
    staging.attach_to(bridge)

    first, second = staging.stage([_file("a.png", "image/png", 10), _file("b.png", "image/png", 10)])
    assert [item.id for item in bridge.get_pending_files()] == [first.id, second.id]

    staging.remove(first.id)
    assert [item.id for item in bridge.get_pending_files()] == [second.id]


def test_bridge_without_provider_is_empty_and_clear_is_safe() -> None:
    bridge = SubmissionBridge()

    assert bridge.get_pending_files() == []
    bridge.clear_pending()
    assert bridge.has_provider is False


def test_close_unregisters_picker_from_bridge() -> None:
    bridge = SubmissionBridge()
    staging = _staging()
    staging.attach_to(bridge)
    staging.stage([_file("a.png", "image/png", 10)])

    staging.close()

    assert bridge.has_provider is False
    assert bridge.get_pending_files() == []
    with pytest.raises(AttachmentValidationError):
        staging.stage([_file("b.png", "image/png", 10)])


def test_bridge_refuses_second_provider() -> None:
    bridge = SubmissionBridge()
    _staging().attach_to(bridge)

    with pytest.raises(ProviderAlreadyRegisteredError):
        _staging().attach_to(bridge)


def test_separate_bridges_do_not_share_state() -> None:
    first_bridge, second_bridge = SubmissionBridge(), SubmissionBridge()
    first, second = _staging(), _staging()
    first.attach_to(first_bridge)
    second.attach_to(second_bridge)

    first.stage([_file("a.png", "image/png", 10)])

    assert len(first_bridge.get_pending_files()) == 1
    assert second_bridge.get_pending_files() == []


def test_from_settings_reads_limits() -> None:
    settings = SimpleNamespace(
        upload_max_file_size_bytes=MB,
        upload_max_batch_size_bytes=2 * MB,
        upload_max_files=0,
    )
    staging = StagingList.from_settings(settings)

    staged = staging.stage([_file("big.png", "image/png", MB + 1)])

    assert staged[0].rejection_reason == "big.png exceeds the 1MB per-file limit"
