from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from diagen.ir.diagram import DiagramPayload


class GenerateRequest(BaseModel):
    markdown: str = Field(..., min_length=1)
    providers: List[str] = []  # Explicit override; empty means auto-detect
    model: Optional[str] = None


class ValidateRequest(BaseModel):
    """Repair a loaded or hand-edited diagram against the icon inventory"""
    diagram: DiagramPayload
    fix_structure: bool = False


class GenerateResponse(BaseModel):
    success: bool
    diagram: Optional[Dict[str, Any]] = None
    providers: List[str] = []
    validation: Dict[str, Any] = {}
    structure: Optional[Dict[str, Any]] = None
    fixes: Optional[Dict[str, Any]] = None
    warnings: List[str] = []
    errors: List[Dict[str, Any]] = []
