from datetime import date, datetime
from typing import List, Optional
from pydantic import Field

from .base import CamelModel
from .doctor import Pagination
from ..models.appointment import AppointmentStatus

class AddressSchema(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

class EmergencyContactSchema(CamelModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None

class PatientProfileResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: AddressSchema
    emergency_contact: EmergencyContactSchema
    blood_group: Optional[str] = None
    allergies: List[str] = []
    chronic_conditions: List[str] = []
    updated_at: datetime

class PatientEnvelope(CamelModel):
    message: Optional[str] = None
    patient: PatientProfileResponse

class PatientProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    address: Optional[AddressSchema] = None
    emergency_contact: Optional[EmergencyContactSchema] = None
    blood_group: Optional[str] = Field(None, max_length=5)
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None

class PatientStats(CamelModel):
    total_appointments: int
    upcoming_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    total_doctors: int
    unread_messages: int

class PatientStatsEnvelope(CamelModel):
    stats: PatientStats

class AppointmentDoctor(CamelModel):
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    specialization: Optional[str] = None
    consultation_fee: Optional[float] = None

class PatientAppointment(CamelModel):
    id: str
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus
    reason_for_visit: str
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    doctor: AppointmentDoctor

class PatientAppointmentList(CamelModel):
    appointments: List[PatientAppointment]
    pagination: Pagination

class PatientInfo(CamelModel):
    name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None

class MedicalHistory(CamelModel):
    patient_info: PatientInfo
    allergies: List[str] = []
    chronic_conditions: List[str] = []
    appointment_history: List[PatientAppointment] = []

class MedicalHistoryEnvelope(CamelModel):
    medical_history: MedicalHistory
