"""Batch editing helpers.

Patent ids are positional: a batch of N patents always carries ids "1".."N"
in order. Adding appends the next id; removing renumbers everything that
remains. Helpers return new lists and never mutate their input.
"""

import logging
from typing import Sequence

from patent_ranker.constants import MAX_DOCUMENTS_PER_BATCH, MIN_DOCUMENTS_PER_BATCH
from patent_ranker.llm.schemas import DocumentInput

logger = logging.getLogger(__name__)


def create_empty_document(document_id: str) -> DocumentInput:
    return DocumentInput(id=document_id)


def renumber(documents: Sequence[DocumentInput]) -> list[DocumentInput]:
    """Reassign ids "1".."N" by position."""
    return [d.model_copy(update={"id": str(position)}) for position, d in enumerate(documents, start=1)]


def add_document(documents: Sequence[DocumentInput]) -> list[DocumentInput]:
    """
    Append an empty patent with the next sequential id.

    Raises:
        ValueError: If the batch is already at the maximum size
    """
    if len(documents) >= MAX_DOCUMENTS_PER_BATCH:
        raise ValueError(f"A batch holds at most {MAX_DOCUMENTS_PER_BATCH} patents")
    return [*documents, create_empty_document(str(len(documents) + 1))]


def remove_document(documents: Sequence[DocumentInput], index: int) -> list[DocumentInput]:
    """
    Remove the patent at ``index`` (0-based) and renumber the rest.

    Raises:
        ValueError: If removal would leave the batch empty
        IndexError: If ``index`` is out of range
    """
    if len(documents) <= MIN_DOCUMENTS_PER_BATCH:
        raise ValueError(f"A batch needs at least {MIN_DOCUMENTS_PER_BATCH} patent")
    if not 0 <= index < len(documents):
        raise IndexError(f"No patent at position {index} (batch has {len(documents)})")

    removed = documents[index]
    remaining = renumber([d for i, d in enumerate(documents) if i != index])
    logger.debug(f"Removed patent {removed.id}; {len(remaining)} remain")
    return remaining


def valid_documents(documents: Sequence[DocumentInput]) -> list[DocumentInput]:
    """Patents with non-blank metadata, i.e. those that will be scored."""
    return [d for d in documents if d.has_metadata]


def can_analyze(problem_statement: str, documents: Sequence[DocumentInput]) -> bool:
    """True when there is a problem statement and at least one scoreable patent."""
    return bool(problem_statement.strip()) and bool(valid_documents(documents))
