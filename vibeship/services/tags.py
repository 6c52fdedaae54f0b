"""Project tag assignment and the global tag catalog."""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeship.models.database import ProjectTag, TagCatalog, TagType
from vibeship.models.schemas.project import GroupedTags, TagInput

# Response key for each tag type
TAG_GROUP_KEYS = {
    TagType.model: "models",
    TagType.framework: "frameworks",
    TagType.tool: "tools",
}


def group_tags(tags: Iterable[ProjectTag | TagInput]) -> GroupedTags:
    """Group tag values by type, keeping their order."""
    grouped: dict[str, list[str]] = {key: [] for key in TAG_GROUP_KEYS.values()}
    for tag in tags:
        grouped[TAG_GROUP_KEYS[TagType(tag.tag_type)]].append(tag.tag_value)
    return GroupedTags(**grouped)


def dedupe_tags(tags: Iterable[TagInput]) -> list[TagInput]:
    """Drop repeated (tag_type, tag_value) pairs, first occurrence wins."""
    seen: set[tuple[TagType, str]] = set()
    unique = []
    for tag in tags:
        key = (tag.tag_type, tag.tag_value)
        if key not in seen:
            seen.add(key)
            unique.append(tag)
    return unique


async def get_project_tags(session: AsyncSession, project_id: str) -> list[ProjectTag]:
    """Tags of a project in insertion order."""
    query = select(ProjectTag).where(ProjectTag.project_id == project_id).order_by(ProjectTag.id)
    result = await session.execute(query)
    return list(result.scalars().all())


async def replace_project_tags(
    session: AsyncSession, project_id: str, tags: Iterable[TagInput]
) -> list[ProjectTag]:
    """
    Replace all tags of a project with the given set.

    Deletes and inserts inside the caller's transaction; nothing is committed
    here, so the caller's commit applies both steps atomically.
    """
    await session.execute(delete(ProjectTag).where(ProjectTag.project_id == project_id))
    new_tags = [
        ProjectTag(project_id=project_id, tag_type=tag.tag_type, tag_value=tag.tag_value)
        for tag in dedupe_tags(tags)
    ]
    session.add_all(new_tags)
    await session.flush()
    return new_tags


async def add_to_catalog(session: AsyncSession, tags: Iterable[TagInput]) -> list[TagCatalog]:
    """
    Add tag names the catalog does not know yet.

    The catalog is deduplicated by name. Nothing is committed here.
    """
    tags = dedupe_tags(tags)
    if not tags:
        return []

    names = {tag.tag_value for tag in tags}
    result = await session.execute(select(TagCatalog.name).where(TagCatalog.name.in_(names)))
    known = set(result.scalars().all())

    added = []
    for tag in tags:
        if tag.tag_value in known:
            continue
        entry = TagCatalog(name=tag.tag_value, type=tag.tag_type)
        session.add(entry)
        added.append(entry)
        known.add(tag.tag_value)

    await session.flush()
    return added


async def list_catalog(session: AsyncSession) -> list[TagCatalog]:
    """The whole catalog ordered by name."""
    result = await session.execute(select(TagCatalog).order_by(TagCatalog.name))
    return list(result.scalars().all())
