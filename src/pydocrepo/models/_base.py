"""Base model for cached repository entities.

Every model a repository caches inherits from :class:`RepoModel` which
provides:

* a required ``id`` field, the key the store uses.
* ``alias_generator=to_camel`` so camelCase document fields map
  automatically to snake_case attributes.
* A ``raw`` dict that captures the original document data.

Models are frozen: the store replaces entries wholesale and callers can
share references without copying.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from pydocrepo.models.document import Document


class HasId(Protocol):
    """Anything the store can key: an object with an ``id`` attribute."""

    @property
    def id(self) -> Any: ...


class RepoModel(BaseModel):
    """Base for repository models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * Stashes the original document data in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str
    """Document id, unique within the repository's collection."""

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original document data."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        # Only auto-stash raw when not explicitly provided (i.e. model_validate
        # from a document).  When constructing with kwargs that include raw=,
        # keep the caller's value.
        if "raw" in values:
            return values
        stashed = dict(values)
        stashed["raw"] = {k: v for k, v in values.items() if k != "id"}
        return stashed

    @classmethod
    def from_document(cls, document: Document) -> Self:
        """Materialize a model from a raw document.

        The document id wins over any ``id`` key stored inside the data.
        Validation failures propagate as :class:`pydantic.ValidationError`.
        """
        return cls.model_validate({**document.data, "id": document.id})
