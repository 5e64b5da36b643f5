"""Design profile repository and prompt context builders."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..database import get_db_connection
from ..knowledge.retrieval import get_knowledge_context
from .knowledge_prompt import get_design_system_prompt

JSON_COLUMNS = {
    "tokens_json": "tokens",
    "components_json": "components",
    "tailwind_config_json": "tailwind_config",
    "tags_json": "tags",
}


def _row_to_profile(row) -> dict:
    profile = dict(row)
    for column, key in JSON_COLUMNS.items():
        raw = profile.pop(column, None)
        profile[key] = json.loads(raw) if raw else None
    if profile["tags"] is None:
        profile["tags"] = []
    return profile


class DesignProfileRepository:
    """Repository for design profiles, one per project name."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def get(self, project_name: Optional[str] = None) -> Optional[dict]:
        """Get a profile by project name, or the most recently updated one."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            if project_name:
                cursor.execute(
                    "SELECT * FROM design_profiles WHERE project_name = ?",
                    (project_name,)
                )
            else:
                cursor.execute(
                    "SELECT * FROM design_profiles ORDER BY updated_at DESC LIMIT 1"
                )
            row = cursor.fetchone()
            return _row_to_profile(row) if row else None

    def list(self, user_id: Optional[str] = None) -> list[dict]:
        """List profiles, newest first."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            if user_id:
                cursor.execute(
                    "SELECT * FROM design_profiles WHERE user_id = ? ORDER BY updated_at DESC",
                    (user_id,)
                )
            else:
                cursor.execute("SELECT * FROM design_profiles ORDER BY updated_at DESC")
            return [_row_to_profile(row) for row in cursor.fetchall()]

    def save(
        self,
        project_name: str,
        tokens: dict,
        components: Optional[dict] = None,
        tailwind_config: Optional[dict] = None,
        css_variables: Optional[str] = None,
        source_url: Optional[str] = None,
        user_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> str:
        """Insert or update the profile for a project. Returns the profile id."""
        now = datetime.now(timezone.utc).isoformat()
        values = (
            user_id,
            source_url,
            json.dumps(tokens),
            json.dumps(components) if components is not None else None,
            json.dumps(tailwind_config) if tailwind_config is not None else None,
            css_variables,
            json.dumps(tags or []),
        )

        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, user_id FROM design_profiles WHERE project_name = ?",
                (project_name,)
            )
            existing = cursor.fetchone()

            if existing:
                profile_id = existing["id"]
                # Keep the original owner when the caller has none
                owner = user_id or existing["user_id"]
                cursor.execute(
                    """
                    UPDATE design_profiles
                    SET user_id = ?, source_url = ?, tokens_json = ?, components_json = ?,
                        tailwind_config_json = ?, css_variables = ?, tags_json = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (owner, *values[1:], now, profile_id)
                )
            else:
                profile_id = str(uuid.uuid4())
                cursor.execute(
                    """
                    INSERT INTO design_profiles
                    (id, user_id, source_url, tokens_json, components_json,
                     tailwind_config_json, css_variables, tags_json, project_name,
                     created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (profile_id, *values, project_name, now, now)
                )
            conn.commit()

        return profile_id

    def delete(self, project_name: str, user_id: Optional[str] = None) -> bool:
        """Delete a profile. With a user_id, only that user's profile is removed."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            if user_id:
                cursor.execute(
                    "DELETE FROM design_profiles WHERE project_name = ? AND user_id = ?",
                    (project_name, user_id)
                )
            else:
                cursor.execute(
                    "DELETE FROM design_profiles WHERE project_name = ?",
                    (project_name,)
                )
            conn.commit()
            return cursor.rowcount > 0

    def get_user_id(self, project_name: Optional[str] = None) -> Optional[str]:
        """Owner of a project's profile, or of the latest profile."""
        profile = self.get(project_name)
        return profile["user_id"] if profile else None


def profile_to_context_prompt(profile: dict) -> str:
    """Render a profile as the design system block the LLM must follow."""
    tokens = profile.get("tokens") or {}
    lines = [
        f'DESIGN SYSTEM CONTEXT (project: "{profile["project_name"]}"):',
        "You MUST use these exact design tokens in all generated code. Do NOT deviate.",
        "",
        f"Colors: {json.dumps(tokens.get('colors') or {})}",
        f"Typography: {json.dumps(tokens.get('typography') or {})}",
        f"Spacing: {json.dumps(tokens.get('spacing') or {})}",
        f"Borders: {json.dumps(tokens.get('borders') or {})}",
        f"Shadows: {json.dumps(tokens.get('shadows') or {})}",
    ]
    if profile.get("components"):
        lines.append(f"Component Patterns: {json.dumps(profile['components'])}")
    if profile.get("css_variables"):
        lines.append(f"CSS Variables:\n{profile['css_variables']}")
    lines.append("")
    lines.append(
        "All colors, spacing, border-radius, shadows, and fonts in your output "
        "MUST match these tokens exactly."
    )
    return "\n".join(lines)


def build_full_context_prompt(profile: Optional[dict], task: str, user_id: Optional[str] = None) -> str:
    """System prompt for a design task: theory, profile tokens and relevant knowledge.

    The knowledge block is searched with the task text, scoped to
    user_id or the profile owner.
    """
    profile_context = profile_to_context_prompt(profile) if profile else None
    owner = user_id or (profile or {}).get("user_id")
    knowledge = get_knowledge_context(owner, task)

    prompt = get_design_system_prompt(profile_context)
    if knowledge:
        prompt = f"{prompt}\n{knowledge}"
    return prompt
