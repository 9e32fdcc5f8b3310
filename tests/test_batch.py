"""Tests for positional id assignment when editing a batch."""

import pytest
from conftest import make_document

from patent_ranker.batch import (
    add_document,
    can_analyze,
    create_empty_document,
    remove_document,
    renumber,
    valid_documents,
)


def _ids(documents):
    return [d.id for d in documents]


class TestAddDocument:
    def test_next_sequential_id(self):
        documents = add_document([create_empty_document("1")])
        assert _ids(documents) == ["1", "2"]
        assert documents[1].metadata == ""

    def test_cap_at_five(self):
        documents = [create_empty_document(str(i)) for i in range(1, 6)]
        with pytest.raises(ValueError, match="at most 5"):
            add_document(documents)


class TestRemoveDocument:
    def test_renumbers_remaining(self):
        """Removing '2' of 1..4 leaves ids 1..3, contents shifted."""
        documents = [make_document(str(i), metadata=f"patent {i}") for i in range(1, 5)]
        remaining = remove_document(documents, 1)
        assert _ids(remaining) == ["1", "2", "3"]
        assert [d.metadata for d in remaining] == ["patent 1", "patent 3", "patent 4"]

    def test_input_unchanged(self):
        documents = [make_document("1"), make_document("2")]
        remove_document(documents, 0)
        assert _ids(documents) == ["1", "2"]

    def test_last_document_kept(self):
        with pytest.raises(ValueError):
            remove_document([make_document("1")], 0)

    def test_bad_index(self):
        with pytest.raises(IndexError):
            remove_document([make_document("1"), make_document("2")], 5)


class TestRenumber:
    def test_positional(self):
        documents = [make_document("7"), make_document("3")]
        assert _ids(renumber(documents)) == ["1", "2"]


class TestValidDocuments:
    def test_blank_metadata_excluded(self):
        documents = [make_document("1"), make_document("2", metadata=" "), make_document("3")]
        assert _ids(valid_documents(documents)) == ["1", "3"]

    def test_can_analyze(self):
        assert can_analyze("reduce battery charging time", [make_document("1")])
        assert not can_analyze("  ", [make_document("1")])
        assert not can_analyze("reduce battery charging time", [create_empty_document("1")])
