"""SWMS document endpoints: assemble the form sections and render them to PDF."""

from fastapi import APIRouter, Depends, Response

from riskify.core.logging import get_logger
from riskify.documents.model import DocumentModel
from riskify.schemas import RenderRequest
from riskify.services import DependencyContainer, get_container

logger = get_logger(__name__)
router = APIRouter()


@router.post("/swms/pdf", response_class=Response)
async def render_swms_pdf(
    request: RenderRequest,
    container: DependencyContainer = Depends(get_container),
) -> Response:
    """Assemble the document and return the PDF from the first renderer that succeeds."""
    document = container.assembler.assemble(request)
    orchestrator = container.create_orchestrator()
    pdf = await orchestrator.render(document)

    logger.info(f"[SWMS] {document.document_id} rendered by {orchestrator.last_backend} ({len(pdf)} bytes)")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Render-Backend": orchestrator.last_backend or "",
            "X-Document-Id": document.document_id,
        },
    )


@router.post("/swms/preview", response_model=DocumentModel)
async def preview_swms(
    request: RenderRequest,
    container: DependencyContainer = Depends(get_container),
) -> DocumentModel:
    """Assemble only: returns the document with scores, levels and ids filled in."""
    return container.assembler.assemble(request)
