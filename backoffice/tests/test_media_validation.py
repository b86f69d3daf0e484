from __future__ import annotations

import pytest

from backoffice.features.media import validation
from backoffice.features.media.errors import AttachmentValidationError
from backoffice.features.media.schemas import CandidateFile
from backoffice.features.media.validation import (
    ALLOWED_MIME_TYPES,
    DENIED_MIME_TYPES,
    is_allowed_content_type,
    validate_candidate,
    validate_selection,
    validate_total_size,
)

MB = 1024 * 1024
LIMITS = {"max_file_size": 50 * MB, "max_total_size": 100 * MB}


def _file(name: str, content_type: str, size: int) -> CandidateFile:
    return CandidateFile(filename=name, content_type=content_type, size_bytes=size)


@pytest.mark.parametrize("content_type", sorted(DENIED_MIME_TYPES))
def test_denied_types_are_rejected_even_when_allow_listed(monkeypatch, content_type) -> None:
    monkeypatch.setattr(validation, "ALLOWED_MIME_TYPES", ALLOWED_MIME_TYPES | {content_type})

    outcome = validate_candidate(_file("payload.bin", content_type, 10), **LIMITS)

    assert outcome.accepted is False
    assert outcome.rejection_reason == f"Unsupported file type: {content_type}"
    assert is_allowed_content_type(content_type) is False


def test_allowed_types_are_classified_by_prefix() -> None:
    cases = {
        "image/svg+xml": "image",
        "video/quicktime": "video",
        "audio/flac": "audio",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation": "document",
        "text/csv": "document",
    }
    for content_type, kind in cases.items():
        outcome = validate_candidate(_file("f", content_type, 1), **LIMITS)
        assert outcome.accepted is True, content_type
        assert outcome.kind == kind
        assert outcome.rejection_reason is None


def test_unknown_and_empty_types_are_rejected_as_documents() -> None:
    unknown = validate_candidate(_file("notes.xyz", "application/x-unknown", 10), **LIMITS)
    empty = validate_candidate(_file("blob", "", 10), **LIMITS)

    assert unknown.accepted is False
    assert unknown.kind == "document"
    assert empty.accepted is False
    assert empty.rejection_reason == "Unsupported file type: unknown"


def test_zero_byte_file_is_accepted() -> None:
    outcome = validate_candidate(_file("empty.txt", "text/plain", 0), **LIMITS)
    assert outcome.accepted is True


def test_content_type_parameters_are_ignored() -> None:
    outcome = validate_candidate(_file("notes.txt", "Text/Plain; charset=utf-8", 5), **LIMITS)
    assert outcome.accepted is True


def test_per_file_limit_is_checked_before_aggregate_limit() -> None:
    outcome = validate_candidate(
        _file("huge.pdf", "application/pdf", 60 * MB),
        running_total=90 * MB,
        **LIMITS,
    )

    assert outcome.accepted is False
    assert "50MB" in (outcome.rejection_reason or "")
    assert outcome.rejection_reason == "huge.pdf exceeds the 50MB per-file limit"


def test_file_crossing_aggregate_limit_is_rejected_and_earlier_files_stay_accepted() -> None:
    selection = [
        _file("a.mp4", "video/mp4", 40 * MB),
        _file("b.mp4", "video/mp4", 40 * MB),
        _file("c.mp4", "video/mp4", 30 * MB),
        _file("d.png", "image/png", 10 * MB),
    ]

    outcomes = validate_selection(selection, **LIMITS)

    accepted = [(candidate.filename, outcome.accepted) for candidate, outcome in outcomes]
    assert accepted == [("a.mp4", True), ("b.mp4", True), ("c.mp4", False), ("d.png", True)]
    assert outcomes[2][1].rejection_reason == "Exceeds the 100MB total limit"


def test_selection_counts_already_staged_bytes() -> None:
    outcomes = validate_selection(
        [_file("late.png", "image/png", 2 * MB)],
        already_staged_bytes=99 * MB,
        **LIMITS,
    )
    assert outcomes[0][1].accepted is False


def test_rejected_files_do_not_count_towards_running_total() -> None:
    outcomes = validate_selection(
        [
            _file("archive.zip", "application/zip", 90 * MB),
            _file("photo.png", "image/png", 20 * MB),
        ],
        already_staged_bytes=70 * MB,
        **LIMITS,
    )
    assert [outcome.accepted for _, outcome in outcomes] == [False, True]


def test_validate_total_size_reports_formatted_total() -> None:
    files = [_file("a.mp4", "video/mp4", 60 * MB), _file("b.mp4", "video/mp4", 45 * MB)]

    with pytest.raises(AttachmentValidationError) as exc_info:
        validate_total_size(files, max_total_size=100 * MB)

    assert str(exc_info.value) == "Total size of files (105 MB) exceeds the 100MB limit"
    assert validate_total_size(files[:1], max_total_size=100 * MB) == 60 * MB


@pytest.mark.parametrize(
    ("content_type", "allowed"),
    [
        ("image/png", True),
        ("Application/PDF; name=menu.pdf", True),
        ("application/zip", False),
        ("application/x-unknown", False),
        ("", False),
    ],
)
def test_candidate_acceptance_follows_content_type_policy(content_type, allowed) -> None:
    outcome = validate_candidate(_file("f", content_type, 1), **LIMITS)

    assert is_allowed_content_type(content_type) is allowed
    assert outcome.accepted is allowed
