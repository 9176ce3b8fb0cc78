"""
Content Stores — Abstract Interfaces

The synthesis pipeline reads from three stores it does not own:

  NotebookStore          notebook row + ordered composition references
  KnowledgeElementStore  free-form fragments produced by the extraction agents
  AnnotationStore        user highlights / notes / bookmarks

Concrete backends (relational, document-oriented, HTTP) implement these
ABCs; the pipeline only speaks this protocol.

Contract (ALL implementations):
  - "Not found" is ``None``, never an exception.
  - Exceptions mean the store faulted (connection lost, timeout …).
  - Ownership scoping is the store's job: get_with_composition and
    get_by_id_and_owner must not return another user's rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from notecraft.models.composition import Annotation, KnowledgeElement, Notebook


class NotebookStore(ABC):

    @abstractmethod
    async def get_with_composition(self, notebook_id: str, user_id: str) -> Notebook | None:
        """Notebook owned by ``user_id`` with its composition list, or None."""


class KnowledgeElementStore(ABC):

    @abstractmethod
    async def get_by_id(self, element_id: str) -> KnowledgeElement | None:
        """Knowledge element by id, or None."""


class AnnotationStore(ABC):

    @abstractmethod
    async def get_by_id_and_owner(self, element_id: str, user_id: str) -> Annotation | None:
        """Annotation by id if owned by ``user_id``, or None."""
