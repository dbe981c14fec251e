from riskify.documents.assembler import DocumentAssembler
from riskify.documents.model import (
    PPE_CATALOG,
    DocumentModel,
    EmergencyContact,
    EmergencyInfo,
    Hazard,
    PlantEquipment,
    PPEItem,
    ProjectInfo,
    SignInEntry,
    WorkActivity,
)

__all__ = [
    "DocumentAssembler",
    "DocumentModel",
    "EmergencyContact",
    "EmergencyInfo",
    "Hazard",
    "PlantEquipment",
    "PPEItem",
    "ProjectInfo",
    "SignInEntry",
    "WorkActivity",
    "PPE_CATALOG",
]
