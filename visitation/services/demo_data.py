"""Sample records for local development."""

from visitation.models.minister import MinisterInput
from visitation.models.patient import PatientInput
from visitation.services.ministers import MinisterService
from visitation.services.patients import PatientService
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PATIENTS: list[PatientInput] = [
    PatientInput(
        name="Maria da Silva",
        address="Rua das Flores, 123",
        district="Centro",
        phones=["1234-5678", "8765-4321", "9999-8888"],
    ),
    PatientInput(
        name="João Oliveira",
        address="Av. Principal, 456",
        district="Vila Nova",
        phones=["5555-1234", "7777-8888"],
    ),
    PatientInput(
        name="Ana Pereira",
        address="Rua São Pedro, 789",
        district="Jardim",
        phones=["3333-2222"],
        status="recovered",
    ),
    PatientInput(
        name="Carlos Santos",
        address="Av. Dom Pedro, 321",
        district="Santa Rita",
        phones=["9876-5432", "1111-2222", "4444-3333"],
        status="deceased",
    ),
]

DEMO_MINISTERS: list[MinisterInput] = [
    MinisterInput(name="Pedro Alves", phone="9999-1111", username="pedro", password="123456"),
    MinisterInput(name="Marta Souza", phone="8888-2222", username="marta", password="123456", role="admin"),
]


async def seed_demo_data(patient_service: PatientService, minister_service: MinisterService) -> None:
    """Insert the sample patients and ministers."""
    for patient in DEMO_PATIENTS:
        await patient_service.create(patient)
    for minister in DEMO_MINISTERS:
        await minister_service.create(minister)
    logger.info(f"Seeded {len(DEMO_PATIENTS)} patients and {len(DEMO_MINISTERS)} ministers")
