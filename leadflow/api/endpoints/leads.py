import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from leadflow.error_handler import ErrorHandler
from leadflow.integrations.contracts.interfaces import RawSubmission
from leadflow.leads.orchestrator import LeadSubmissionOrchestrator
from leadflow.api.dependencies import get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()
error_handler = ErrorHandler()


class LeadSubmitRequest(BaseModel):
    formData: Dict[str, Any] = Field(..., description="Form field id -> submitted value")
    fieldMappings: Optional[Dict[str, str]] = Field(default=None, description="Form field id -> API field name")


@router.post("/submit", tags=["Leads"])
async def submit_lead(
    request: LeadSubmitRequest,
    orchestrator: LeadSubmissionOrchestrator = Depends(get_orchestrator),
):
    submission = RawSubmission(form_data=request.formData, field_mappings=request.fieldMappings or {})
    try:
        result = await orchestrator.submit(submission)
    except Exception as e:
        return JSONResponse(status_code=500, content=error_handler.handle_exception(e, context={"route": "submit"}))
    return {"success": True, "data": result.to_dict()}
