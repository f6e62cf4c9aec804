from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from diagen import __version__
from diagen.db.session import get_db, log_generation
from diagen.errors import GenerationError, ParseError
from diagen.icons.index import IconIndex, load_icon_index
from diagen.inference.base import LLMClient
from diagen.inference.config import get_llm_client as build_llm_client
from diagen.inference.ollama_client import OllamaClient
from diagen.pipeline.controller import GenerationController
from diagen.schemas import GenerateRequest, GenerateResponse, ValidateRequest
from diagen.validation.diagram_fixer import validate_and_fix_diagram
from diagen.validation.diagram_validator import validate_diagram
from diagen.validation.path_validator import find_suspicious_paths, validate_and_repair

router = APIRouter(prefix="/api")


# ============================================================
# DEPENDENCIES
# ============================================================

def get_icon_index(request: Request) -> IconIndex:
    """Shared read-only index built at startup; built lazily if startup skipped it"""
    index = getattr(request.app.state, "icon_index", None)
    if index is None:
        index = load_icon_index()
        request.app.state.icon_index = index
    return index


def get_llm_client() -> LLMClient:
    return build_llm_client()


def get_ollama_client() -> OllamaClient:
    return OllamaClient()


# ============================================================
# ROUTES
# ============================================================

@router.get("/health")
def health(index: IconIndex = Depends(get_icon_index)):
    return {
        "status": "ok",
        "version": __version__,
        "icons": len(index),
        "providers": index.counts(),
    }


@router.get("/ollama/models")
def list_models(client: OllamaClient = Depends(get_ollama_client)):
    try:
        return {"models": client.list_models()}
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/icons")
def icon_tree(index: IconIndex = Depends(get_icon_index)):
    return {
        "tree": index.as_tree(),
        "counts": index.counts(),
        "total": len(index),
    }


@router.get("/icons/search")
def icon_search(
    q: str = Query("", description="Matches filename, display name or category"),
    provider: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    index: IconIndex = Depends(get_icon_index),
):
    results = index.search(q, provider=provider, limit=limit)
    return {
        "query": q,
        "count": len(results),
        "results": [entry.to_dict() for entry in results],
    }


@router.post("/generate", response_model=GenerateResponse)
def generate_diagram(
    request: GenerateRequest,
    index: IconIndex = Depends(get_icon_index),
    llm_client: LLMClient = Depends(get_llm_client),
    db: Session = Depends(get_db),
):
    print(f"[Routes] /api/generate: {len(request.markdown)} chars, providers={request.providers or 'auto'}")
    controller = GenerationController(index, llm_client)

    try:
        context = controller.run(request.markdown, providers=request.providers, model=request.model)
    except ParseError as e:
        print(f"[Routes] ❌ Could not parse generation output: {e}")
        raise HTTPException(
            status_code=422,
            detail={
                "message": str(e),
                "raw_excerpt": e.excerpt(),
                "hint": "The model did not return a usable diagram. Try generating again.",
            },
        )
    except GenerationError as e:
        print(f"[Routes] ❌ Generation failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    if context.errors:
        raise HTTPException(
            status_code=400,
            detail={"errors": [err.to_dict() for err in context.errors]},
        )

    log_generation(db, context, model=request.model or getattr(llm_client, "model", None))
    return context.to_response()


@router.post("/validate")
def validate_loaded_diagram(
    request: ValidateRequest,
    index: IconIndex = Depends(get_icon_index),
):
    suspicious = find_suspicious_paths(request.diagram)
    result = validate_and_repair(request.diagram, index)
    diagram = result.diagram

    fix_result = None
    if request.fix_structure:
        diagram, structure, fix_result = validate_and_fix_diagram(diagram, index=index)
    else:
        structure = validate_diagram(diagram, index)

    return {
        "diagram": diagram.to_dict(),
        "validation": result.report.to_dict(),
        "structure": structure.to_dict(),
        "fixes": fix_result.to_dict() if fix_result else None,
        "warnings": suspicious,
    }
