"""Formatting of project context for AI tools.

Pure functions: they only shape data that callers already loaded.
"""

from collections.abc import Sequence
from datetime import datetime

from vibeship.core.security.api_keys import mask_api_key
from vibeship.models.database import Project, ProjectStatus, ProjectTag
from vibeship.models.schemas.project import GitHubStats, ProjectContext, ProjectLinks
from vibeship.services.field_update_filter import ALLOWED_UPDATE_FIELDS, VALID_STATUSES, VALID_TAG_TYPES
from vibeship.services.tags import group_tags

STATUS_DESCRIPTIONS = {
    ProjectStatus.active: "Currently being actively developed",
    ProjectStatus.paused: "Development temporarily paused",
    ProjectStatus.shipped: "Project is complete and live",
    ProjectStatus.graveyard: "Project has been abandoned/archived",
}

# Things an API key can never do
FORBIDDEN_ACTIONS = (
    "Delete the project",
    "Rename the project or change its slug",
    "Change public visibility",
    "Change the GitHub link or webhook settings",
    "Create, rotate or revoke API keys",
)


def project_endpoint(base_url: str, project_id: str) -> str:
    return f"{base_url.rstrip('/')}/api/projects/{project_id}"


def instructions_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/api/ai-instructions"


def build_project_context(project: Project, tags: Sequence[ProjectTag]) -> ProjectContext:
    """Machine-readable project state returned by the project API."""
    return ProjectContext(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status,
        where_i_left_off=project.where_i_left_off,
        lessons_learned=project.lessons_learned,
        tags=group_tags(tags),
        links=ProjectLinks(github=project.github_repo_url, live=project.live_url),
        github_stats=GitHubStats(
            stars=project.github_stars,
            forks=project.github_forks,
            open_issues=project.github_open_issues,
            language=project.github_language,
        ),
        created_at=project.created_at,
        updated_at=project.updated_at,
        last_activity_at=project.last_activity_at,
    )


def generate_bootstrap_prompt(project_name: str, base_url: str) -> str:
    """The short prompt owners paste into their AI tool."""
    return (
        f"# VibeShip: {project_name}\n"
        "\n"
        f"Fetch instructions: {instructions_url(base_url)}\n"
        "Then read `.vibe/vibeship.md` for project context.\n"
        "Source `.vibe/.secrets` for API credentials."
    )


def generate_vibeship_md(
    project: Project,
    tags: Sequence[ProjectTag],
    base_url: str,
    synced_at: datetime | None = None,
) -> str:
    """Project context document for the local ``.vibe/vibeship.md`` file."""
    grouped = group_tags(tags)
    status = ProjectStatus(project.status)
    project_url = f"{base_url.rstrip('/')}/projects/{project.id}"

    lines = ["# VibeShip Project Context", ""]
    if synced_at is not None:
        lines += [f"> Last synced: {synced_at.isoformat()}", ""]

    lines += [
        f"## Project: {project.name}",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| **ID** | {project.id} |",
        f"| **Status** | {status.value} ({STATUS_DESCRIPTIONS[status]}) |",
        f"| **VibeShip** | {project_url} |",
        f"| **GitHub** | {project.github_repo_url or 'Not linked'} |",
        f"| **Live** | {project.live_url or 'Not deployed'} |",
        "",
        "## Description",
        "",
        project.description or "_Not set - run initial setup to populate_",
        "",
        "## Where I Left Off",
        "",
        project.where_i_left_off or "_Not documented yet_",
        "",
        "## Lessons Learned",
        "",
        project.lessons_learned or "_None documented yet_",
        "",
        "## Tech Stack",
        "",
        _stack_line("AI Models", grouped.models),
        _stack_line("Frameworks", grouped.frameworks),
        _stack_line("Tools", grouped.tools),
    ]
    return "\n".join(lines) + "\n"


def _stack_line(label: str, values: list[str]) -> str:
    if values:
        return f"- **{label}:** {', '.join(values)}"
    return f"- {label}: Not specified"


def generate_secrets(project_id: str, api_key: str, base_url: str) -> str:
    """Shell-sourceable credentials for ``.vibe/.secrets``."""
    return (
        "# VibeShip API credentials - DO NOT COMMIT THIS FILE\n"
        "# This file should be in .gitignore\n"
        "\n"
        f'export VIBESHIP_PROJECT_ID="{project_id}"\n'
        f'export VIBESHIP_API_KEY="{api_key}"\n'
        f'export VIBESHIP_ENDPOINT="{project_endpoint(base_url, project_id)}"\n'
    )


def generate_write_scope() -> str:
    """What an API key may and may not change."""
    writable = [f"- `{field}`" for field in ALLOWED_UPDATE_FIELDS]
    writable.append(
        f"- `tags` - replaces all tags: `[{{tag_type: {'|'.join(VALID_TAG_TYPES)}, tag_value}}]`"
    )
    forbidden = [f"- {action}" for action in FORBIDDEN_ACTIONS]
    return "\n".join(
        [
            "## API Write Scope",
            "",
            f"Writable fields (status must be one of: {', '.join(VALID_STATUSES)}):",
            *writable,
            "",
            "Never allowed with this key:",
            *forbidden,
        ]
    )


def generate_ai_context_prompt(
    project: Project,
    tags: Sequence[ProjectTag],
    api_key: str,
    base_url: str,
    reveal_key: bool = False,
    synced_at: datetime | None = None,
) -> str:
    """
    Full setup prompt that creates the ``.vibe/`` folder.

    Args:
        project: The project
        tags: Its tags
        api_key: The project's API key
        base_url: Public base URL of the app
        reveal_key: Embed the full key instead of a masked one
        synced_at: Timestamp to stamp into vibeship.md

    Returns:
        Markdown prompt text
    """
    key = api_key if reveal_key else mask_api_key(api_key)
    bootstrap = generate_bootstrap_prompt(project.name, base_url)
    vibeship_md = generate_vibeship_md(project, tags, base_url, synced_at=synced_at)
    secrets = generate_secrets(project.id, key, base_url)
    endpoint = project_endpoint(base_url, project.id)

    needs_setup = not project.description or not project.where_i_left_off or not project.screenshot_url
    setup_note = "**This project needs initial setup.** " if needs_setup else ""
    next_step = (
        "Then run the **Initial Setup** from the fetched instructions to populate project context."
        if needs_setup
        else "Then read .vibe/vibeship.md and ask what to work on today."
    )

    return f"""{bootstrap}

---

## Setup: Create .vibe/ Folder

{setup_note}Run these commands:

```bash
# 1. Add .secrets to gitignore
grep -q ".vibe/.secrets" .gitignore 2>/dev/null || echo ".vibe/.secrets" >> .gitignore

# 2. Create .vibe folder with context and credentials
mkdir -p .vibe

cat > .vibe/vibeship.md << 'EOF'
{vibeship_md}
EOF

cat > .vibe/.secrets << 'EOF'
{secrets}
EOF

chmod 600 .vibe/.secrets
```

---

## API Usage

Endpoint: {endpoint}

```bash
source .vibe/.secrets
curl -s "$VIBESHIP_ENDPOINT" -H "Authorization: Bearer $VIBESHIP_API_KEY"
curl -s -X PATCH "$VIBESHIP_ENDPOINT" \\
  -H "Authorization: Bearer $VIBESHIP_API_KEY" \\
  -H "Content-Type: application/json" \\
  -d '{{"where_i_left_off": "Your progress notes"}}'
```

{generate_write_scope()}

---

After creating files: **"Created .vibe/ folder. vibeship.md can be committed - .secrets is gitignored."**

{next_step}"""
