"""Searchable collection descriptors.

Each searchable record type is described once here: where the engine keeps
it, which fields the engine matches text against, how it may be sorted,
where the authoritative records live, and which fields stand in for
popularity when fusing rankings across types.
"""

from collections.abc import Callable
from dataclasses import dataclass

# First present field wins when fusing popularity across types
POPULARITY_FALLBACK = ("popularity", "followers_count", "likes_count")


def no_permission_filter(actor_id: str | None) -> str | None:
    """Collections readable by everyone contribute no permission term."""
    return None


def playlist_permission_filter(actor_id: str | None) -> str:
    """Visible if public, or if the actor owns it or is one of its guests.

    Args:
        actor_id: Authenticated caller id, None for anonymous callers

    Returns:
        Engine filter expression admitting only visible playlists
    """
    if not actor_id:
        return "is_private:false"
    return f"is_private:false || owner_id:={actor_id} || guest_ids:={actor_id}"


@dataclass(frozen=True)
class CollectionDescriptor:
    """Immutable description of one searchable type.

    Attributes:
        name: Engine collection name
        type_tag: Singular type name used for the best result
        result_key: Key of this type's block in aggregate responses
        query_by: Fields the engine matches query text against
        sort_fields: Permitted caller sort fields, the first is the default
        ranking_sort_field: Secondary sort used by aggregate searches
        store_table: Store table holding the full records
        store_select: Store projection (may embed related records)
        permission_filter: Builds the visibility filter for an actor
        popularity_fields: Ordered popularity fallback used for fusion
    """

    name: str
    type_tag: str
    result_key: str
    query_by: tuple[str, ...]
    sort_fields: tuple[str, ...]
    ranking_sort_field: str
    store_table: str
    store_select: str = "*"
    permission_filter: Callable[[str | None], str | None] = no_permission_filter
    popularity_fields: tuple[str, ...] = POPULARITY_FALLBACK

    @property
    def default_sort_field(self) -> str:
        return self.sort_fields[0]

    @property
    def query_by_param(self) -> str:
        """Comma-joined text fields in the engine's expected format."""
        return ",".join(self.query_by)

    @property
    def include_fields(self) -> str:
        """Fields the engine should return per hit: the id plus fusion fields."""
        return ",".join(("id", *self.popularity_fields))


MOVIES = CollectionDescriptor(
    name="movies",
    type_tag="movie",
    result_key="movies",
    query_by=("original_title", "titles"),
    sort_fields=("popularity", "vote_average", "release_date", "runtime"),
    ranking_sort_field="popularity",
    store_table="media_movie",
)

TV_SERIES = CollectionDescriptor(
    name="tv_series",
    type_tag="tv_series",
    result_key="tv_series",
    query_by=("original_name", "names"),
    sort_fields=("popularity", "vote_average", "first_air_date", "number_of_seasons"),
    ranking_sort_field="popularity",
    store_table="media_tv_series",
)

PERSONS = CollectionDescriptor(
    name="persons",
    type_tag="person",
    result_key="persons",
    query_by=("name", "also_known_as"),
    sort_fields=("popularity",),
    ranking_sort_field="popularity",
    store_table="media_person",
)

USERS = CollectionDescriptor(
    name="users",
    type_tag="user",
    result_key="users",
    query_by=("username", "full_name"),
    sort_fields=("followers_count",),
    ranking_sort_field="followers_count",
    store_table="user",
)

PLAYLISTS = CollectionDescriptor(
    name="playlists",
    type_tag="playlist",
    result_key="playlists",
    query_by=("title", "description"),
    sort_fields=("likes_count", "created_at", "updated_at"),
    ranking_sort_field="likes_count",
    store_table="playlists",
    store_select="*, user(*)",
    permission_filter=playlist_permission_filter,
)

# Declaration order is the tie-break precedence for the best result
COLLECTIONS: tuple[CollectionDescriptor, ...] = (MOVIES, TV_SERIES, PERSONS, USERS, PLAYLISTS)

_BY_TYPE_TAG = {descriptor.type_tag: descriptor for descriptor in COLLECTIONS}


def get_collection(type_tag: str) -> CollectionDescriptor:
    """Look up a descriptor by its type tag.

    Raises:
        ValueError: If no collection has this type tag
    """
    try:
        return _BY_TYPE_TAG[type_tag]
    except KeyError:
        raise ValueError(
            f"Unknown search type '{type_tag}', expected one of {sorted(_BY_TYPE_TAG)}"
        ) from None


def type_precedence(type_tag: str) -> int:
    """Position of a type in the tie-break order (lower wins)."""
    return COLLECTIONS.index(get_collection(type_tag))
