"""
External rendering service client (tier 1).

POSTs the document as structured JSON to the configured template service.
The service answers either with the PDF bytes directly or with a JSON body
referencing a PDF URL, which is then downloaded. Anything else is a tier
failure and the chain falls through to the local renderers.
"""

from typing import Any, Optional
from urllib.parse import urljoin

import httpx

from riskify.core.exceptions import RendererTimeout, RendererUnavailable
from riskify.documents.model import DocumentModel
from riskify.rendering.base import BaseRenderer, RenderLoggerProtocol


def build_payload(document: DocumentModel) -> dict[str, Any]:
    """Convert the document into the template service's JSON contract."""
    project = document.project
    return {
        "documentId": document.document_id,
        "preparedOn": document.prepared_on.isoformat(),
        "projectName": project.project_name,
        "companyName": project.company_name,
        "jobNumber": project.job_number,
        "projectAddress": project.project_address,
        "swmsCreatorName": project.swms_creator_name,
        "swmsCreatorPosition": project.swms_creator_position,
        "principalContractor": project.principal_contractor,
        "projectManager": project.project_manager,
        "siteSupervisor": project.site_supervisor,
        "startDate": project.start_date,
        "duration": project.duration,
        "tradeType": project.trade_type,
        "workDescription": project.work_description,
        "authorisingPerson": project.authorising_person,
        "authorisingPosition": project.authorising_position,
        "authorisingSignature": project.authorising_signature,
        "activities": [
            {
                "id": activity.activity_id,
                "activity": activity.name,
                "description": activity.description,
                "trade": activity.trade,
                "hazards": [
                    {
                        "category": hazard.category.value,
                        "description": hazard.description,
                        "initialRiskScore": hazard.initial_risk.value,
                        "initialRisk": hazard.initial_risk.level.value,
                        "controlMeasures": list(hazard.control_measures),
                        "residualRiskScore": hazard.residual_risk.value,
                        "residualRisk": hazard.residual_risk.level.value,
                    }
                    for hazard in activity.hazards
                ],
                "initialRiskScore": activity.initial_risk.value,
                "initialRisk": activity.initial_risk.level.value,
                "controlMeasures": list(activity.control_measures),
                "residualRiskScore": activity.residual_risk.value,
                "residualRisk": activity.residual_risk.level.value,
                "legislation": list(activity.legislation),
            }
            for activity in document.activities
        ],
        "plantEquipment": [
            {
                "equipment": item.name,
                "model": item.model,
                "serial": item.serial_number,
                "category": item.category,
                "riskLevel": item.risk_level.value,
                "nextInspection": item.next_inspection.isoformat() if item.next_inspection else "TBD",
                "certificationRequired": "Required" if item.certification_required else "Not Required",
            }
            for item in document.equipment
        ],
        "ppeRequirements": list(document.ppe),
        "hrcwCategories": list(document.hrcw_categories),
        "emergencyContacts": [
            {"name": contact.name, "phone": contact.phone}
            for contact in document.emergency.contacts
        ],
        "emergencyProcedures": document.emergency.procedures,
        "emergencyMonitoring": document.emergency.monitoring,
        "assemblyPoint": document.emergency.assembly_point,
        "nearestHospital": document.emergency.nearest_hospital,
        "hospitalPhone": document.emergency.hospital_phone,
        "signInEntries": [
            {
                "name": entry.name,
                "company": entry.company,
                "position": entry.position,
                "date": entry.entry_date,
                "timeIn": entry.time_in,
                "timeOut": entry.time_out,
                "signature": entry.signature,
                "inductionComplete": entry.induction_complete,
            }
            for entry in document.sign_in_entries
        ],
    }


class ExternalRendererClient(BaseRenderer):
    """
    Renderer backed by the external PDF template service.

    The HTTP client lives only for the duration of one call, so a
    cancelled call (orchestrator timeout) aborts and closes the connection.

    Attributes:
        endpoint: URL of the generate-pdf endpoint, or None when not configured.
    """

    NAME = "external"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        endpoint: Optional[str],
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[dict[str, str]] = None,
        logger: Optional[RenderLoggerProtocol] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            endpoint: URL to POST documents to.
            timeout: Time budget for the whole call (request plus download).
            transport: Optional httpx transport (httpx.MockTransport in tests).
            headers: Extra headers, e.g. an API key for the service.
            logger: Optional flow logger.
        """
        super().__init__(timeout=timeout, logger=logger)
        self.endpoint = endpoint
        self._transport = transport
        self._headers = headers or {}

    async def render(self, document: DocumentModel) -> bytes:
        if not self.endpoint:
            raise RendererUnavailable(self.NAME, "external renderer URL not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                self._log_debug(f"POST {self.endpoint}")
                response = await client.post(
                    self.endpoint,
                    json=build_payload(document),
                    headers={"Accept": "application/pdf", **self._headers},
                )
                self._raise_for_status(response)

                if self._is_json(response):
                    pdf_url = self._extract_pdf_url(response)
                    self._log_debug(f"GET {pdf_url}")
                    response = await client.get(pdf_url, headers={"Accept": "application/pdf"})
                    self._raise_for_status(response)

                return self._ensure_pdf(response.content)

        except httpx.TimeoutException as e:
            raise RendererTimeout(self.NAME, self.timeout, details=str(e) or None) from e
        except httpx.HTTPError as e:
            raise RendererUnavailable(self.NAME, "transport error", original_error=e) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise RendererUnavailable(
                self.NAME,
                f"HTTP {response.status_code} from {response.request.url}",
                details=response.text[:200] if response.text else None,
            )

    @staticmethod
    def _is_json(response: httpx.Response) -> bool:
        return "json" in response.headers.get("content-type", "").lower()

    def _extract_pdf_url(self, response: httpx.Response) -> str:
        """Resolve the PDF URL from a JSON response, relative to the endpoint."""
        try:
            body = response.json()
        except ValueError as e:
            raise RendererUnavailable(self.NAME, "invalid JSON response", original_error=e) from e

        pdf_url = None
        if isinstance(body, dict):
            pdf_url = body.get("pdfUrl") or body.get("pdf_url") or body.get("url")
        if not pdf_url:
            raise RendererUnavailable(self.NAME, "response has neither PDF body nor pdfUrl")
        return urljoin(str(response.request.url), pdf_url)
