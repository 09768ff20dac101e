from datetime import datetime
import logging

from .config import settings
from .security import UserRole, get_password_hash
from ..models import Conversation, Doctor, Message, PatientProfile, User

logger = logging.getLogger(__name__)

DEMO_DOCTORS = [
    {
        "id": "1",
        "email": "doctor@demo.com",
        "first_name": "Sarah",
        "last_name": "Johnson",
        "specialization": "Cardiology",
        "years_of_experience": 15,
        "consultation_fee": 200.0,
        "bio": "Experienced cardiologist specializing in heart disease prevention and treatment.",
    },
    {
        "id": "2",
        "email": "michael.williams@demo.com",
        "first_name": "Michael",
        "last_name": "Williams",
        "specialization": "General Practice",
        "years_of_experience": 8,
        "consultation_fee": 100.0,
        "bio": "Family medicine physician providing comprehensive primary care services.",
    },
]

DEMO_PATIENT = {
    "id": "3",
    "email": "patient@demo.com",
    "first_name": "John",
    "last_name": "Doe",
}

DEMO_MESSAGES = [
    ("patient", "Hello Doctor, I have a question about my prescription.", "2024-01-15T10:00:00"),
    ("doctor", "Hello! Of course, what would you like to know?", "2024-01-15T10:05:00"),
    ("patient", "Should I take the medication before or after meals?", "2024-01-15T10:10:00"),
    ("doctor", "Please take the medication after meals, twice a day.", "2024-01-15T10:30:00"),
]

def seed_demo_data(store) -> None:
    """Populate a repository with the demo doctors, patient and conversation."""
    if store.get_user_by_email(DEMO_PATIENT["email"]):
        logger.info("Demo data already present")
        return

    password_hash = get_password_hash(settings.DEMO_PASSWORD)

    for data in DEMO_DOCTORS:
        store.add_user(User(
            id=data["id"],
            email=data["email"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=UserRole.DOCTOR,
            password_hash=password_hash,
        ))
        store.add_doctor(Doctor(
            id=data["id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            specialization=data["specialization"],
            years_of_experience=data["years_of_experience"],
            consultation_fee=data["consultation_fee"],
            bio=data["bio"],
        ))

    patient = store.add_user(User(
        id=DEMO_PATIENT["id"],
        email=DEMO_PATIENT["email"],
        first_name=DEMO_PATIENT["first_name"],
        last_name=DEMO_PATIENT["last_name"],
        role=UserRole.PATIENT,
        password_hash=password_hash,
    ))
    store.add_patient_profile(PatientProfile(user_id=patient.id))

    conversation = store.add_conversation(Conversation(
        id="1",
        patient_id=patient.id,
        doctor_id="1",
        created_at=datetime(2024, 1, 15, 9, 0),
    ))
    for index, (role, text, timestamp) in enumerate(DEMO_MESSAGES, start=1):
        store.add_message(Message(
            id=str(index),
            conversation_id=conversation.id,
            sender_id=patient.id if role == "patient" else "1",
            sender_role=UserRole(role),
            text=text,
            timestamp=datetime.fromisoformat(timestamp),
            read=True,
        ))

    logger.info(f"Seeded {len(DEMO_DOCTORS)} demo doctors and 1 demo patient")
