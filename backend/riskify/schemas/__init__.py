from riskify.schemas.requests import RiskScoreRequest
from riskify.schemas.responses import (
    RenderErrorResponse,
    RenderStatus,
    RiskScoreResponse,
    TierErrorDetail,
)
from riskify.schemas.sections import (
    ActivityInput,
    EmergencyContactInput,
    EmergencySection,
    EquipmentInput,
    HazardInput,
    ProjectInfoSection,
    RenderRequest,
    SignInEntryInput,
)

__all__ = [
    "ActivityInput",
    "EmergencyContactInput",
    "EmergencySection",
    "EquipmentInput",
    "HazardInput",
    "ProjectInfoSection",
    "RenderErrorResponse",
    "RenderRequest",
    "RenderStatus",
    "RiskScoreRequest",
    "RiskScoreResponse",
    "SignInEntryInput",
    "TierErrorDetail",
]
