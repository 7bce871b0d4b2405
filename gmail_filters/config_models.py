"""Pydantic models for the declarative filters config document.

Every model forbids extra fields so that typos surface at load time instead of
being silently ignored.
"""

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

SUPPORTED_VERSION = "v1alpha3"


class Category(StrEnum):
    PERSONAL = "personal"
    SOCIAL = "social"
    UPDATES = "updates"
    FORUMS = "forums"
    PROMOTIONS = "promotions"


class _StrictModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class Author(_StrictModel):
    name: str = ""
    email: str = ""


class LabelColor(_StrictModel):
    background: str
    text: str


class Label(_StrictModel):
    name: str
    color: LabelColor | None = None


class FilterNode(_StrictModel):
    """One node of a rule's matching expression.

    Exactly one of the operators (and/or/not) or field matches must be set; this
    is checked by the criteria parser, not here, so that the error can point at
    the offending rule.
    """

    and_: "list[FilterNode] | None" = Field(default=None, alias="and")
    or_: "list[FilterNode] | None" = Field(default=None, alias="or")
    not_: "FilterNode | None" = Field(default=None, alias="not")

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    reply_to: str | None = Field(
        default=None,
        validation_alias=AliasChoices("replyto", "replyTo", "reply_to"),
        serialization_alias="replyto",
    )
    subject: str | None = None
    list_: str | None = Field(default=None, alias="list")
    has: str | None = None
    query: str | None = None

    is_raw: bool = Field(default=False, alias="isRaw")

    def non_empty_fields(self) -> list[str]:
        """Names (as written in the config) of the populated fields."""
        candidates = [
            ("and", self.and_),
            ("or", self.or_),
            ("not", self.not_),
            ("from", self.from_),
            ("to", self.to),
            ("cc", self.cc),
            ("bcc", self.bcc),
            ("replyto", self.reply_to),
            ("subject", self.subject),
            ("list", self.list_),
            ("has", self.has),
            ("query", self.query),
        ]
        return [name for name, value in candidates if value]


class Actions(_StrictModel):
    archive: bool = False
    delete: bool = False
    mark_read: bool = Field(default=False, alias="markRead")
    star: bool = False
    # Tri-states: None means "leave Gmail's default behavior alone"
    mark_spam: bool | None = Field(default=None, alias="markSpam")
    mark_important: bool | None = Field(default=None, alias="markImportant")
    category: Category | None = None
    labels: list[str] = Field(default_factory=list)
    forward: str | None = None

    def empty(self) -> bool:
        return not (
            self.archive
            or self.delete
            or self.mark_read
            or self.star
            or self.mark_spam is not None
            or self.mark_important is not None
            or self.category
            or self.labels
            or self.forward
        )


class Rule(_StrictModel):
    filter: FilterNode
    actions: Actions


class Config(_StrictModel):
    version: str
    author: Author | None = None
    labels: list[Label] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: str) -> str:
        if v != SUPPORTED_VERSION:
            raise ValueError(f"unsupported config version {v!r} (expected {SUPPORTED_VERSION!r})")
        return v

    def to_yaml_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True, exclude_none=True)


FilterNode.model_rebuild()
