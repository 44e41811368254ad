"""Template service — catalogue queries, compilation, and disk sync."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any

import yaml
from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import TemplateNotFound
from app.models.template import Template, TemplateVersion
from app.schemas.template import TemplateManifest, VariableDefinition
from app.services.substitution import substitute
from app.services.typst import TypstCompiler
from app.services.variables import parse_values
from app.utils.frontmatter import parse_typst_frontmatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledDocument:
    file_name: str
    pdf: bytes


async def list_templates(
    db: AsyncSession,
    *,
    search: str | None = None,
    min_price: int | None = None,
    max_price: int | None = None,
) -> list[Template]:
    """Published templates only, optionally filtered by text and price."""
    stmt = select(Template).where(Template.is_published.is_(True)).order_by(Template.title)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Template.title).like(pattern),
                func.lower(func.coalesce(Template.description, "")).like(pattern),
            )
        )
    if min_price is not None:
        stmt = stmt.where(Template.price >= min_price)
    if max_price is not None:
        stmt = stmt.where(Template.price <= max_price)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_template(db: AsyncSession, template_id: str) -> Template | None:
    return await db.get(Template, template_id)


def variable_definitions(tpl: Template) -> list[VariableDefinition]:
    raw = json.loads(tpl.variables) if tpl.variables else []
    return [VariableDefinition.model_validate(v) for v in raw]


def to_data_url(pdf: bytes, mime: str = "application/pdf") -> str:
    return f"data:{mime};base64,{base64.b64encode(pdf).decode('ascii')}"


async def compile_template(
    db: AsyncSession,
    compiler: TypstCompiler,
    template_id: str,
    raw_values: dict[str, Any],
    *,
    enforce_required: bool = True,
    allow_unpublished: bool = True,
) -> CompiledDocument:
    """Fill a stored template with *raw_values* and compile it to PDF.

    The template lookup and value validation both happen before the
    compiler is started.

    Raises:
        TemplateNotFound: unknown id, or unpublished while
            ``allow_unpublished`` is off.
        ValidationFailed: values do not fit the variable schema.
        CompileFailed: the Typst compiler failed or timed out.
    """
    tpl = await get_template(db, template_id)
    if not tpl or (not tpl.is_published and not allow_unpublished):
        raise TemplateNotFound(template_id)

    values = parse_values(
        variable_definitions(tpl), raw_values, enforce_required=enforce_required
    )
    source = substitute(tpl.typst_content, values)

    logger.info("Compiling template '%s' (v%d)", tpl.id, tpl.current_version)
    pdf = await compiler.compile(source)
    return CompiledDocument(file_name=f"{tpl.title}.pdf", pdf=pdf)


# ── Disk → DB sync ─────────────────────────────────────────────────

async def sync_templates_from_disk(db: AsyncSession) -> dict[str, list[str]]:
    """Scan the templates directory for .typ files and upsert into the DB.

    A change to a template's body or variables bumps ``current_version``
    and appends a version snapshot; metadata-only edits do not.

    Returns dict with 'created' and 'updated' lists of template IDs.
    """
    templates_dir = settings.templates_dir
    if not templates_dir.exists():
        return {"created": [], "updated": []}

    created: list[str] = []
    updated: list[str] = []

    for typ_file in sorted(templates_dir.rglob("*.typ")):
        try:
            meta, body = parse_typst_frontmatter(typ_file.read_text(encoding="utf-8"))
            if not meta:
                logger.debug("Skipping %s: no frontmatter", typ_file)
                continue
            manifest = TemplateManifest.model_validate(meta)
        except (yaml.YAMLError, ValidationError) as exc:
            logger.warning("Skipping invalid template %s: %s", typ_file, exc)
            continue

        variables = json.dumps(
            [v.model_dump(by_alias=True, exclude_none=True) for v in manifest.variables]
        )

        existing = await db.get(Template, manifest.id)
        if existing:
            changed = False
            if existing.title != manifest.title:
                existing.title = manifest.title
                changed = True
            if existing.description != manifest.description:
                existing.description = manifest.description
                changed = True
            if existing.price != manifest.price:
                existing.price = manifest.price
                changed = True
            if existing.is_published != manifest.published:
                existing.is_published = manifest.published
                changed = True
            if existing.typst_content != body or existing.variables != variables:
                existing.typst_content = body
                existing.variables = variables
                existing.current_version += 1
                db.add(_version_row(existing, "Synced from disk"))
                changed = True
            if changed:
                updated.append(manifest.id)
        else:
            tpl = Template(
                id=manifest.id,
                title=manifest.title,
                description=manifest.description,
                price=manifest.price,
                typst_content=body,
                variables=variables,
                current_version=1,
                is_published=manifest.published,
            )
            db.add(tpl)
            db.add(_version_row(tpl, "Initial version"))
            created.append(manifest.id)

    if created or updated:
        await db.commit()

    if created:
        logger.info("Synced %d new templates from disk: %s", len(created), created)
    if updated:
        logger.info("Updated %d templates from disk: %s", len(updated), updated)

    return {"created": created, "updated": updated}


def _version_row(tpl: Template, changelog: str) -> TemplateVersion:
    return TemplateVersion(
        id=f"{tpl.id}_v{tpl.current_version}",
        template_id=tpl.id,
        version=tpl.current_version,
        typst_content=tpl.typst_content,
        variables=tpl.variables,
        changelog=changelog,
    )
