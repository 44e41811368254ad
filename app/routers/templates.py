"""Template catalogue + compile endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.exceptions import CompileFailed, CompileTimeout, TemplateNotFound, ValidationFailed
from app.schemas.template import (
    CompileRequest,
    CompileResponse,
    TemplateDetail,
    TemplateSummary,
)
from app.services import template_service
from app.services.typst import TypstCompiler, get_compiler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[TemplateSummary])
async def list_templates(
    search: str | None = None,
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Published templates, without their Typst source."""
    return await template_service.list_templates(
        db, search=search, min_price=min_price, max_price=max_price
    )


@router.post("/sync", status_code=200)
async def sync_templates(db: AsyncSession = Depends(get_db)):
    """Re-scan the templates directory and upsert any .typ files into the DB."""
    result = await template_service.sync_templates_from_disk(db)
    return {
        "created": result["created"],
        "updated": result["updated"],
        "message": f"{len(result['created'])} created, {len(result['updated'])} updated",
    }


@router.get("/{template_id}", response_model=TemplateDetail)
async def get_template(template_id: str, db: AsyncSession = Depends(get_db)):
    tpl = await template_service.get_template(db, template_id)
    if not tpl:
        raise HTTPException(status_code=404, detail="Template not found")
    return tpl


@router.post("/{template_id}/compile", response_model=CompileResponse)
async def compile_template(
    template_id: str,
    body: CompileRequest,
    db: AsyncSession = Depends(get_db),
    compiler: TypstCompiler = Depends(get_compiler),
):
    try:
        doc = await template_service.compile_template(
            db,
            compiler,
            template_id,
            body.variables,
            enforce_required=settings.enforce_required_variables,
            allow_unpublished=settings.allow_unpublished_compile,
        )
    except TemplateNotFound:
        raise HTTPException(status_code=404, detail="Template not found")
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=e.errors)
    except CompileTimeout as e:
        raise HTTPException(status_code=504, detail=e.message)
    except CompileFailed as e:
        logger.warning("Compilation of '%s' failed: %s", template_id, e.message)
        raise HTTPException(status_code=502, detail=f"PDF compilation failed: {e.message}")

    return CompileResponse(
        pdf_data_url=template_service.to_data_url(doc.pdf),
        file_name=doc.file_name,
    )
