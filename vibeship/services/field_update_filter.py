"""Validation of project updates sent by AI tools.

Untrusted request bodies are reduced to an allow-listed update plan. Every
check runs before anything is written, and any failure rejects the whole
request.
"""

from dataclasses import dataclass
from typing import Any

from vibeship.core.errors import ValidationFailure
from vibeship.models.database import ProjectStatus, TagType
from vibeship.models.schemas.project import TagInput
from vibeship.services.tags import dedupe_tags

# Fields that AI tools can update
ALLOWED_UPDATE_FIELDS = ("where_i_left_off", "lessons_learned", "status", "description")

VALID_STATUSES = tuple(status.value for status in ProjectStatus)
VALID_TAG_TYPES = tuple(tag_type.value for tag_type in TagType)

TAGS_FIELD = "tags"


@dataclass
class ProjectUpdatePlan:
    """Validated changes to apply to one project."""

    fields: dict[str, Any]
    tags: list[TagInput] | None = None

    @property
    def changed_fields(self) -> list[str]:
        return list(self.fields)

    @property
    def tags_updated(self) -> bool:
        return self.tags is not None

    @property
    def action(self) -> str:
        """Activity label naming what changed, e.g. ``update_status_tags``."""
        parts = self.changed_fields + ([TAGS_FIELD] if self.tags_updated else [])
        return "update_" + "_".join(parts)


def filter_project_update(body: Any) -> ProjectUpdatePlan:
    """
    Reduce a request body to an update plan.

    Args:
        body: Parsed JSON body

    Returns:
        The validated plan

    Raises:
        ValidationFailure: The body is not an object, a value is invalid, or
            nothing updatable was supplied
    """
    if not isinstance(body, dict):
        raise ValidationFailure("Request body must be a JSON object")

    fields: dict[str, Any] = {}
    for field in ALLOWED_UPDATE_FIELDS:
        if field not in body:
            continue
        value = body[field]

        if field == "status":
            if value not in VALID_STATUSES:
                raise ValidationFailure(
                    f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}"
                )
            value = ProjectStatus(value)
        elif value is not None and not isinstance(value, str):
            raise ValidationFailure(f'Field "{field}" must be a string or null')

        fields[field] = value

    tags = None
    if TAGS_FIELD in body:
        tags = parse_tags(body[TAGS_FIELD])

    if not fields and tags is None:
        allowed = ", ".join(ALLOWED_UPDATE_FIELDS + (TAGS_FIELD,))
        raise ValidationFailure(f"No valid fields to update. Allowed fields: {allowed}")

    return ProjectUpdatePlan(fields=fields, tags=tags)


def parse_tags(raw: Any) -> list[TagInput]:
    """
    Validate a tags array of ``{tag_type, tag_value}`` objects.

    Raises:
        ValidationFailure: Wrong shape, empty value, or unknown tag type
    """
    if not isinstance(raw, list):
        raise ValidationFailure('"tags" must be an array of {tag_type, tag_value} objects')

    tags = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationFailure(f"Tag at index {index} must be an object")

        tag_type = item.get("tag_type")
        tag_value = item.get("tag_value")
        if not isinstance(tag_type, str) or not tag_type:
            raise ValidationFailure(f"Tag at index {index} is missing tag_type")
        if not isinstance(tag_value, str) or not tag_value.strip():
            raise ValidationFailure(f"Tag at index {index} is missing tag_value")
        if tag_type not in VALID_TAG_TYPES:
            raise ValidationFailure(
                f'Invalid tag_type "{tag_type}". Must be one of: {", ".join(VALID_TAG_TYPES)}'
            )
        if len(tag_value.strip()) > 100:
            raise ValidationFailure(f"Tag at index {index} is longer than 100 characters")

        tags.append(TagInput(tag_type=TagType(tag_type), tag_value=tag_value.strip()))

    return dedupe_tags(tags)
