from concurrent.futures import ThreadPoolExecutor
from datetime import date
import threading

import pytest

from carebook.core.errors import ConflictError
from carebook.schemas.appointment import AppointmentCreate
from carebook.services.booking_service import BookingService

from .conftest import TODAY, login

BOOKING = {
    "doctorId": "1",
    "appointmentDate": "2024-01-16",
    "appointmentTime": "09:00",
    "reasonForVisit": "Annual heart check-up"
}

def book(client, headers, **overrides):
    return client.post("/api/v1/appointments", headers=headers, json=dict(BOOKING, **overrides))

class TestBooking:

    def test_book_then_same_slot_conflicts(self, client, patient_headers):
        response = book(client, patient_headers)
        assert response.status_code == 201

        data = response.json()
        assert data["message"] == "Appointment booked successfully"
        appointment = data["appointment"]
        assert appointment["status"] == "scheduled"
        assert appointment["patientId"] == "3"
        assert appointment["doctorName"] == "Dr. Sarah Johnson"
        assert appointment["doctorSpecialization"] == "Cardiology"

        response = book(client, patient_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"

    def test_numeric_doctor_id_is_accepted(self, client, patient_headers):
        response = book(client, patient_headers, doctorId=1)
        assert response.status_code == 201
        assert response.json()["appointment"]["doctorId"] == "1"

    def test_unknown_doctor(self, client, patient_headers):
        response = book(client, patient_headers, doctorId="999")
        assert response.status_code == 404

    def test_missing_fields(self, client, patient_headers):
        response = client.post("/api/v1/appointments", headers=patient_headers, json={"doctorId": "1"})
        assert response.status_code == 400
        message = response.json()["message"]
        assert "appointmentDate" in message
        assert "appointmentTime" in message

    def test_malformed_time(self, client, patient_headers):
        response = book(client, patient_headers, appointmentTime="9am")
        assert response.status_code == 400

    def test_short_reason(self, client, patient_headers):
        response = book(client, patient_headers, reasonForVisit="pain")
        assert response.status_code == 400

    def test_off_grid_time(self, client, patient_headers):
        response = book(client, patient_headers, appointmentTime="09:15")
        assert response.status_code == 400
        details = response.json()["details"]
        assert details["validTimeSlots"][0] == "09:00"
        assert "09:15" not in details["validTimeSlots"]

    def test_time_after_working_hours(self, client, patient_headers):
        response = book(client, patient_headers, appointmentTime="17:00")
        assert response.status_code == 400

    def test_day_off(self, client, patient_headers):
        response = book(client, patient_headers, appointmentDate="2024-01-20")
        assert response.status_code == 400
        assert response.json()["message"] == "Doctor is not available on this day"

    def test_past_date(self, client, patient_headers):
        response = book(client, patient_headers, appointmentDate="2024-01-12")
        assert response.status_code == 400
        assert "past" in response.json()["message"]

    def test_beyond_booking_window(self, client, patient_headers):
        response = book(client, patient_headers, appointmentDate="2024-03-01")
        assert response.status_code == 400
        assert "30 days" in response.json()["message"]

    def test_today_is_bookable(self, client, patient_headers):
        response = book(client, patient_headers, appointmentDate=TODAY.isoformat())
        assert response.status_code == 201

    def test_unavailable_doctor(self, client, store, patient_headers):
        store.get_doctor("1").is_available = False
        response = book(client, patient_headers)
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        response = client.post("/api/v1/appointments", json=BOOKING)
        assert response.status_code == 401

    def test_doctors_cannot_book(self, client, doctor_headers):
        response = book(client, doctor_headers)
        assert response.status_code == 403

    def test_booked_slot_disappears_from_availability(self, client, patient_headers):
        book(client, patient_headers)

        response = client.get("/api/v1/doctors/1/availability", params={"date": "2024-01-16"})
        times = [s["time"] for s in response.json()["availableSlots"]]
        assert "09:00" not in times

    def test_other_doctor_same_time(self, client, patient_headers):
        assert book(client, patient_headers).status_code == 201
        assert book(client, patient_headers, doctorId="2").status_code == 201

class TestConcurrentBooking:

    def test_one_writer_wins(self, store):
        patient = store.get_user("3")
        booking = AppointmentCreate(
            doctor_id="1",
            appointment_date=date(2024, 1, 16),
            appointment_time="10:00",
            reason_for_visit="Concurrent booking attempt"
        )
        workers = 8
        barrier = threading.Barrier(workers)

        def attempt():
            service = BookingService(store, today=TODAY)
            barrier.wait()
            try:
                service.book(patient, booking)
                return "booked"
            except ConflictError:
                return "conflict"

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: attempt(), range(workers)))

        assert results.count("booked") == 1
        assert results.count("conflict") == workers - 1
        assert len(store.appointments_for_doctor_on("1", date(2024, 1, 16))) == 1

class TestManagingAppointments:

    @pytest.fixture
    def appointment_id(self, client, patient_headers):
        return book(client, patient_headers).json()["appointment"]["id"]

    def test_list_for_patient_and_doctor(self, client, patient_headers, doctor_headers, appointment_id):
        for headers in (patient_headers, doctor_headers):
            response = client.get("/api/v1/appointments", headers=headers)
            assert response.status_code == 200
            data = response.json()
            assert [a["id"] for a in data["appointments"]] == [appointment_id]
            assert data["pagination"]["total"] == 1

    def test_list_filters(self, client, patient_headers, appointment_id):
        book(client, patient_headers, appointmentTime="11:00")

        response = client.get("/api/v1/appointments", headers=patient_headers, params={"status": "cancelled"})
        assert response.json()["appointments"] == []

        response = client.get("/api/v1/appointments", headers=patient_headers, params={"date": "2024-01-16"})
        assert [a["appointmentTime"] for a in response.json()["appointments"]] == ["09:00", "11:00"]

        response = client.get("/api/v1/appointments", headers=patient_headers, params={"limit": 1, "offset": 1})
        data = response.json()
        assert [a["appointmentTime"] for a in data["appointments"]] == ["11:00"]
        assert data["pagination"]["total"] == 2

    def test_get_detailed(self, client, patient_headers, appointment_id):
        response = client.get(f"/api/v1/appointments/{appointment_id}", headers=patient_headers)
        assert response.status_code == 200
        appointment = response.json()["appointment"]
        assert appointment["doctorFee"] == 200
        assert appointment["patientEmail"] == "patient@demo.com"

    def test_get_unknown(self, client, patient_headers):
        response = client.get("/api/v1/appointments/missing", headers=patient_headers)
        assert response.status_code == 404

    def test_get_by_outsider(self, client, other_doctor_headers, appointment_id):
        response = client.get(f"/api/v1/appointments/{appointment_id}", headers=other_doctor_headers)
        assert response.status_code == 403

    def test_doctor_confirms(self, client, doctor_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=doctor_headers,
            json={"status": "confirmed"}
        )
        assert response.status_code == 200
        assert response.json()["appointment"]["status"] == "confirmed"

    def test_patient_may_only_cancel(self, client, patient_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"status": "completed"}
        )
        assert response.status_code == 403

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"status": "cancelled", "cancellationReason": "Feeling better"}
        )
        assert response.status_code == 200
        assert response.json()["appointment"]["cancellationReason"] == "Feeling better"

    def test_reschedule(self, client, patient_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"appointmentTime": "14:00"}
        )
        assert response.status_code == 200
        assert response.json()["appointment"]["appointmentTime"] == "14:00"

        # The old slot is free again
        assert book(client, patient_headers).status_code == 201

    def test_reschedule_to_same_slot(self, client, patient_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"appointmentTime": "09:00"}
        )
        assert response.status_code == 200

    def test_reschedule_onto_booked_slot(self, client, patient_headers, appointment_id):
        book(client, patient_headers, appointmentTime="10:00")

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"appointmentTime": "10:00"}
        )
        assert response.status_code == 409

    def test_reschedule_off_grid(self, client, patient_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"appointmentTime": "10:10"}
        )
        assert response.status_code == 400

    def test_cancel_frees_slot(self, client, patient_headers, appointment_id):
        response = client.request(
            "DELETE",
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"cancellationReason": "Schedule conflict"}
        )
        assert response.status_code == 200
        appointment = response.json()["appointment"]
        assert appointment["status"] == "cancelled"
        assert appointment["cancellationReason"] == "Schedule conflict"

        assert book(client, patient_headers).status_code == 201

    def test_cancel_without_body(self, client, doctor_headers, appointment_id):
        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=doctor_headers)
        assert response.status_code == 200

    def test_cancelled_is_final(self, client, patient_headers, doctor_headers, appointment_id):
        client.delete(f"/api/v1/appointments/{appointment_id}", headers=patient_headers)

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=doctor_headers,
            json={"status": "confirmed"}
        )
        assert response.status_code == 400

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=patient_headers)
        assert response.status_code == 400

    def test_outsider_cannot_cancel(self, client, other_doctor_headers, appointment_id):
        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=other_doctor_headers)
        assert response.status_code == 403

    def test_registered_patient_books(self, client):
        client.post("/api/v1/auth/register", json={
            "email": "jane@example.com",
            "password": "JanePassword1",
            "firstName": "Jane",
            "lastName": "Roe"
        })
        headers = login(client, "jane@example.com", "JanePassword1")

        response = book(client, headers, doctorId="2", appointmentTime="15:30")
        assert response.status_code == 201
        assert response.json()["appointment"]["patientName"] == "Jane Roe"

    def test_cancel_ignores_new_date_and_time(self, client, patient_headers, appointment_id):
        response = client.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers=patient_headers,
            json={"status": "cancelled", "appointmentDate": "2020-01-01", "appointmentTime": "03:07"}
        )
        assert response.status_code == 200

        appointment = response.json()["appointment"]
        assert appointment["status"] == "cancelled"
        assert appointment["appointmentDate"] == "2024-01-16"
        assert appointment["appointmentTime"] == "09:00"

class TestSlotLocks:

    def test_rejected_requests_leave_no_locks(self, client, store, patient_headers):
        for time in ("00:00", "03:07", "09:15", "17:00", "23:59"):
            assert book(client, patient_headers, appointmentTime=time).status_code == 400
        assert book(client, patient_headers).status_code == 201
        assert book(client, patient_headers).status_code == 409

        assert store._slot_locks == {}

    def test_lock_is_kept_while_held(self, store):
        key = ("1", date(2024, 1, 16), "09:00")
        with store.slot_lock(key):
            with store.slot_lock(("1", date(2024, 1, 16), "09:30")):
                assert len(store._slot_locks) == 2
            assert list(store._slot_locks) == [key]
        assert store._slot_locks == {}
