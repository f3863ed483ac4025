"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Remote JSON-LD is loosely shaped; one model per document gives validation
  and self-documentation (`Field`) without coupling the core to httpx.
- The same documents are shown to a learner and exported back as JSON, so a
  parsed document must dump back to what the server sent.

Rules:
- Only `id` and `type` of an actor are required. Every other property accepts
  all the shapes ActivityStreams allows (URI string, embedded object, list);
  helpers such as `Actor.avatar` or `ref_id()` normalize on read, never on
  parse.
- Unknown keys are kept as extras (`extra="allow"`), so
  `model_dump(by_alias=True, exclude_unset=True)` is lossless.
- Presence is tracked by pydantic (`model_fields_set`); an absent field and a
  field explicitly sent as `null` are distinguishable through `has()`.

Note:
- These models describe *what* the data is, not *how* it is obtained.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

ACTIVITY_JSON = "application/activity+json"
LD_JSON = "application/ld+json"
JRD_JSON = "application/jrd+json"
ACTIVITYSTREAMS_CONTEXT = "https://www.w3.org/ns/activitystreams"
PUBLIC_COLLECTION = "https://www.w3.org/ns/activitystreams#Public"


class JsonLdModel(BaseModel):
    """Base for remote JSON-LD documents: camelCase aliases, extras kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def has(self, name: str) -> bool:
        """True when the field (python name or alias) was present in the source."""

        if name in self.model_fields_set:
            return True
        for field_name, info in type(self).model_fields.items():
            if info.alias == name and field_name in self.model_fields_set:
                return True
        return bool(self.model_extra) and name in self.model_extra

    def to_jsonld(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


def ref_id(value: Any) -> str | None:
    """URI of a property given as a URI string or as an embedded object."""

    if isinstance(value, str):
        return value or None
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_unset=True)
    if isinstance(value, dict):
        for key in ("id", "href"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def as_list(value: Any) -> list[Any]:
    """ActivityStreams "one or many": None -> [], single value -> [value]."""

    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


class Handle(BaseModel):
    """A validated `username@domain` handle."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return f"{self.username}@{self.domain}"


class WebFingerLink(JsonLdModel):
    rel: str | None = None
    type: str | None = None
    href: str | None = None
    template: str | None = None


class WebFingerDocument(JsonLdModel):
    """JSON Resource Descriptor (RFC 7033)."""

    subject: str | None = None
    aliases: list[str] = Field(default_factory=list)
    links: list[WebFingerLink] = Field(default_factory=list)


class PublicKey(JsonLdModel):
    id: str | None = None
    owner: str | None = None
    public_key_pem: str | None = Field(default=None, alias="publicKeyPem")


class MediaRef(JsonLdModel):
    """Avatar (`icon`) or header (`image`) of an actor."""

    type: str | None = None
    media_type: str | None = Field(default=None, alias="mediaType")
    url: Any = None

    @property
    def href(self) -> str | None:
        """First URL of `url`, which may itself be a Link or a list."""

        for candidate in as_list(self.url):
            found = ref_id(candidate)
            if found:
                return found
        return None


class ProfileField(JsonLdModel):
    """Entry of an actor's `attachment` (Mastodon PropertyValue, or anything else)."""

    type: str | None = None
    name: str | None = None
    value: Any = None


class CollectionPage(JsonLdModel):
    """OrderedCollectionPage / CollectionPage."""

    id: str | None = None
    type: str | None = None
    part_of: str | JsonLdModel | None = Field(default=None, alias="partOf")
    next: str | CollectionPage | None = None
    prev: str | CollectionPage | None = None
    ordered_items: list[Any] | None = Field(default=None, alias="orderedItems")
    items: list[Any] | None = None

    def raw_items(self) -> list[Any]:
        """`orderedItems` when present, else `items`, else nothing."""

        if self.ordered_items is not None:
            return list(self.ordered_items)
        if self.items is not None:
            return list(self.items)
        return []


class OrderedCollection(CollectionPage):
    """Outbox, followers, following... `first`/`last` are URLs or embedded pages."""

    total_items: int | None = Field(default=None, alias="totalItems")
    first: str | CollectionPage | None = None
    last: str | CollectionPage | None = None


class Actor(JsonLdModel):
    """ActivityPub actor. Only `id` and `type` are required.

    Optional properties keep the shape the server used; read them through the
    helper properties (`avatar`, `key`, `outbox_url`, `profile_fields`, ...).
    """

    context: Any = Field(default=None, alias="@context")
    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    preferred_username: str | None = Field(default=None, alias="preferredUsername")
    name: str | None = None
    summary: str | None = None
    url: Any = None
    icon: str | MediaRef | list[str | MediaRef] | None = None
    image: str | MediaRef | list[str | MediaRef] | None = None
    public_key: str | PublicKey | list[str | PublicKey] | None = Field(default=None, alias="publicKey")
    inbox: str | OrderedCollection | None = None
    outbox: str | OrderedCollection | None = None
    followers: str | OrderedCollection | None = None
    following: str | OrderedCollection | None = None
    discoverable: bool | None = None
    manually_approves_followers: bool | None = Field(default=None, alias="manuallyApprovesFollowers")
    attachment: ProfileField | list[ProfileField | str] | None = None

    @property
    def avatar(self) -> MediaRef | None:
        return _first_media(self.icon)

    @property
    def header(self) -> MediaRef | None:
        return _first_media(self.image)

    @property
    def key(self) -> PublicKey | None:
        """First public key; a bare key URI becomes a key with only `id`."""

        for item in as_list(self.public_key):
            return PublicKey(id=item) if isinstance(item, str) else item
        return None

    @property
    def inbox_url(self) -> str | None:
        return ref_id(self.inbox)

    @property
    def outbox_url(self) -> str | None:
        return ref_id(self.outbox)

    @property
    def followers_url(self) -> str | None:
        return ref_id(self.followers)

    @property
    def following_url(self) -> str | None:
        return ref_id(self.following)

    @property
    def profile_fields(self) -> list[ProfileField]:
        return [item for item in as_list(self.attachment) if isinstance(item, ProfileField)]


def _first_media(value: Any) -> MediaRef | None:
    for item in as_list(value):
        return MediaRef(url=item) if isinstance(item, str) else item
    return None


class EmbeddedObject(JsonLdModel):
    """Object embedded in an activity (Note, Follow, ...)."""

    id: str | None = None
    type: str | None = None
    content: str | None = None
    attributed_to: Any = Field(default=None, alias="attributedTo")
    published: str | None = None


class Activity(JsonLdModel):
    """An activity; `object` is a URI reference or an embedded object."""

    id: str | None = None
    type: str | None = None
    actor: Any = None
    published: str | None = None
    object: str | EmbeddedObject | None = None
    to: list[str] | str | None = None
    cc: list[str] | str | None = None

    @property
    def object_is_reference(self) -> bool:
        return isinstance(self.object, str)

    @property
    def embedded_object(self) -> EmbeddedObject | None:
        return self.object if isinstance(self.object, EmbeddedObject) else None


class ResolutionResult(BaseModel):
    """Outcome of WebFinger discovery for one handle."""

    handle: str
    webfinger: WebFingerDocument
    actor_url: str | None = None


class ActorProfile(BaseModel):
    """Full profile produced by the resolver pipeline."""

    handle: str
    resolution: ResolutionResult
    actor: Actor
    outbox_total_items: int | None = None
    activities: list[Activity] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class MastodonAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    username: str
    acct: str | None = None
    url: str
    display_name: str | None = None


class MastodonMedia(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "unknown"
    url: str | None = None


class TimelineStatus(BaseModel):
    """Status as returned by the Mastodon REST API (`/api/v1/timelines/public`)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    uri: str
    url: str | None = None
    created_at: datetime
    visibility: str = "public"
    language: str | None = None
    content: str = ""
    replies_count: int = 0
    reblogs_count: int = 0
    favourites_count: int = 0
    account: MastodonAccount
    media_attachments: list[MastodonMedia] = Field(default_factory=list)
