"""Tests for FilesystemReferenceStore - write-once content references."""

import json
from pathlib import Path

import pytest

from stageguard.domain.exceptions import ReferenceReadFailure
from stageguard.domain.models import ContentReference
from stageguard.infrastructure.persistence.references import (
    FilesystemReferenceStore,
    summarize,
)


class TestSummarize:
    """Tests for summarize()."""

    def test_short_text_unchanged(self) -> None:
        assert summarize("hello") == "hello"

    def test_long_text_truncated_with_marker(self) -> None:
        summary = summarize("x" * 250)

        assert summary == "x" * 200 + "..."

    def test_custom_limit(self) -> None:
        assert summarize("abcdef", limit=3) == "abc..."

    def test_list_is_counted(self) -> None:
        assert summarize([1, 2, 3]) == "3 items"

    def test_dict_lists_first_fields(self) -> None:
        assert summarize({"a": 1, "b": 2, "c": 3, "d": 4}) == "4 fields: a, b, c..."
        assert summarize({"a": 1}) == "1 fields: a"


class TestPut:
    """Tests for FilesystemReferenceStore.put()."""

    def test_writes_under_session_scratch_dir(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        ref = reference_store.put("sess-1", workspace, "po", "claude_result", "# Draft")

        path = Path(workspace) / ref.file_path
        assert path.read_text(encoding="utf-8") == "# Draft"
        assert path.parent == Path(workspace) / ".stageguard" / "temp" / "sess-1"
        assert path.name.startswith("po_claude_result_")
        assert path.suffix == ".md"

    def test_file_path_is_relative(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        ref = reference_store.put("sess-1", workspace, "po", "draft", "x")

        assert not Path(ref.file_path).is_absolute()

    def test_size_counts_utf8_bytes(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        ref = reference_store.put("sess-1", workspace, "po", "draft", "验收")

        assert ref.size == 6

    def test_structured_content_is_indented_json(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        ref = reference_store.put(
            "sess-1", workspace, "po", "questions", [{"id": "q1"}], extension="json"
        )

        text = (Path(workspace) / ref.file_path).read_text(encoding="utf-8")
        assert json.loads(text) == [{"id": "q1"}]
        assert "\n  " in text
        assert ref.summary == "1 items"

    def test_never_overwrites(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        """Repeated puts for the same stage/kind land in distinct files."""
        refs = [
            reference_store.put("sess-1", workspace, "po", "draft", f"v{i}")
            for i in range(5)
        ]

        assert len({ref.file_path for ref in refs}) == 5
        assert [reference_store.get(workspace, ref) for ref in refs] == [
            f"v{i}" for i in range(5)
        ]

    def test_custom_state_dir_and_summary_cap(self, workspace: str) -> None:
        store = FilesystemReferenceStore(state_dir=".state", summary_chars=4)

        ref = store.put("s", workspace, "po", "draft", "abcdefgh")

        assert ref.file_path.startswith(".state")
        assert ref.summary == "abcd..."


class TestGet:
    """Tests for FilesystemReferenceStore.get()."""

    def test_reads_full_content(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        content = "y" * 5000
        ref = reference_store.put("sess-1", workspace, "po", "final_result", content)

        assert reference_store.get(workspace, ref) == content

    def test_missing_file_raises(
        self,
        workspace: str,
        reference_store: FilesystemReferenceStore,
        sample_reference: ContentReference,
    ) -> None:
        """Never returns empty content for a dangling reference."""
        with pytest.raises(ReferenceReadFailure) as exc_info:
            reference_store.get(workspace, sample_reference)

        assert exc_info.value.file_path == sample_reference.file_path

    def test_deleted_file_raises(
        self, workspace: str, reference_store: FilesystemReferenceStore
    ) -> None:
        ref = reference_store.put("sess-1", workspace, "po", "draft", "gone soon")
        (Path(workspace) / ref.file_path).unlink()

        with pytest.raises(ReferenceReadFailure, match="missing"):
            reference_store.get(workspace, ref)
