from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

@dataclass
class Address:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

@dataclass
class EmergencyContact:
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None

@dataclass
class PatientProfile:
    user_id: str

    # Contact information
    phone: Optional[str] = None
    address: Address = field(default_factory=Address)
    emergency_contact: EmergencyContact = field(default_factory=EmergencyContact)

    # Personal information
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None

    # Medical information
    blood_group: Optional[str] = None
    allergies: List[str] = field(default_factory=list)
    chronic_conditions: List[str] = field(default_factory=list)

    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __repr__(self):
        return f"<PatientProfile(user_id={self.user_id})>"
