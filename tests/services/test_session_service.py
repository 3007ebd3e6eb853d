"""
Tests for the session lifecycle engine: booking, cancellation, status
progression, check-in linkage and join details.
"""
import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from mindflow.models import (
    CancelledBy,
    CheckIn,
    PrimaryConcern,
    Session,
    SessionMode,
    SessionStatus,
    SessionType,
)
from mindflow.services import (
    DoctorNotApproved,
    DoctorNotFound,
    InvalidTransition,
    JOINABLE,
    NOT_STARTED,
    NotOwner,
    PatientProfileMissing,
    SessionNotFound,
    SlotUnavailable,
    TRANSITIONS,
    room_id_for_session,
    video_room_id,
)


class TestCreate:
    """Booking a session."""

    def test_video_booking_defaults(self, book, doctor, patient, now):
        session = book(patient, doctor)

        epoch_ms = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)
        assert session.session_id == f'S-{epoch_ms}-1'
        assert session.status == SessionStatus.SCHEDULED
        assert session.type == SessionType.FOLLOW_UP
        assert session.duration == 50
        assert session.video_room_id == video_room_id(session.session_id)
        assert session.video_room_id == 'mindflow-' + session.session_id.lower()
        assert session.video_room_url == session.video_room_id
        assert session.link_expires_at == now + timedelta(minutes=15)

    def test_non_video_booking_has_no_room(self, book, doctor, patient):
        session = book(patient, doctor, mode=SessionMode.IN_PERSON)
        assert session.video_room_id is None
        assert session.link_expires_at is None

    def test_explicit_duration_kept(self, book, doctor, patient):
        assert book(patient, doctor, duration=90).duration == 90

    def test_session_ids_are_distinct(self, book, doctor, patient):
        first = book(patient, doctor)
        second = book(patient, doctor, offset=timedelta(days=2))
        assert first.session_id != second.session_id

    def test_doctor_resolved_by_human_id(self, services, doctor, patient, now):
        session = services.engine.create(patient.user_id, doctor.doctor_id, now + timedelta(days=1), SessionMode.PHONE, now=now)
        assert session.doctor_id == doctor.id

    def test_unknown_doctor(self, services, patient, now):
        with pytest.raises(DoctorNotFound):
            services.engine.create(patient.user_id, 9999, now + timedelta(days=1), SessionMode.VIDEO, now=now)

    def test_unapproved_doctor(self, services, make_doctor, patient, now):
        pending = make_doctor(approved=False)
        with pytest.raises(DoctorNotApproved):
            services.engine.create(patient.user_id, pending.id, now + timedelta(days=1), SessionMode.VIDEO, now=now)
        assert services.session_repository.count() == 0

    def test_caller_without_patient_profile(self, services, make_doctor, doctor, now):
        other = make_doctor(first_name='Lee')
        with pytest.raises(PatientProfileMissing):
            services.engine.create(other.user_id, doctor.id, now + timedelta(days=1), SessionMode.VIDEO, now=now)

    def test_first_booking_assigns_doctor(self, book, make_doctor, doctor, patient):
        book(patient, doctor)
        assert patient.assigned_doctor_id == doctor.id

        other = make_doctor(first_name='Lee')
        book(patient, other, offset=timedelta(days=3))
        assert patient.assigned_doctor_id == doctor.id

    def test_existing_assignment_untouched(self, book, make_doctor, make_patient):
        first, second = make_doctor(), make_doctor(first_name='Lee')
        patient = make_patient(assigned_doctor=first)
        book(patient, second)
        assert patient.assigned_doctor_id == first.id

    def test_taken_session_id_is_regenerated(self, services, book, db, make_doctor, doctor, patient, now):
        first = book(patient, doctor)
        epoch_ms = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)
        assert first.session_id == f'S-{epoch_ms}-1'
        # another booking in the same millisecond already holds the next id
        services.session_repository.create(
            session_id=f'S-{epoch_ms}-3', patient_id=patient.id, doctor_id=doctor.id,
            scheduled_date=now + timedelta(days=5), duration=50, type=SessionType.FOLLOW_UP,
            mode=SessionMode.PHONE, status=SessionStatus.CANCELLED,
        )
        db.session.commit()

        other = make_doctor(first_name='Lee')
        session = book(patient, other, offset=timedelta(days=2))
        assert session.session_id == f'S-{epoch_ms}-4'
        assert session.video_room_id == 'mindflow-' + session.session_id.lower()
        assert services.session_repository.count() == 3


class TestDoubleBooking:
    """Slot conflicts at booking time and at the database."""

    def test_same_doctor_same_instant_rejected(self, book, make_patient, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(SlotUnavailable):
            book(make_patient(first_name='Kim'), doctor, at=session.scheduled_date)

    def test_same_instant_other_doctor_allowed(self, book, make_doctor, doctor, patient):
        session = book(patient, doctor)
        other = book(patient, make_doctor(first_name='Lee'), at=session.scheduled_date)
        assert other.status == SessionStatus.SCHEDULED

    def test_cancelled_slot_can_be_rebooked(self, services, book, make_patient, doctor, patient, now):
        session = book(patient, doctor)
        services.engine.cancel(session.session_id, patient.user_id, now=now)
        rebooked = book(make_patient(first_name='Kim'), doctor, at=session.scheduled_date)
        assert rebooked.status == SessionStatus.SCHEDULED

    def test_partial_unique_index_rejects_second_active_row(self, services, book, doctor, patient, db):
        session = book(patient, doctor)
        with pytest.raises(IntegrityError):
            services.session_repository.create(
                session_id='S-manual-1',
                patient_id=patient.id,
                doctor_id=doctor.id,
                scheduled_date=session.scheduled_date,
                duration=50,
                mode=SessionMode.PHONE,
                status=SessionStatus.CONFIRMED,
            )
        db.session.rollback()

    def test_partial_unique_index_ignores_inactive_rows(self, services, book, doctor, patient, db):
        session = book(patient, doctor)
        services.session_repository.create(
            session_id='S-manual-2',
            patient_id=patient.id,
            doctor_id=doctor.id,
            scheduled_date=session.scheduled_date,
            duration=50,
            mode=SessionMode.PHONE,
            status=SessionStatus.CANCELLED,
        )
        db.session.commit()
        assert services.session_repository.count() == 2

    def test_lost_race_surfaces_as_slot_unavailable(self, services, book, make_patient, doctor, patient, monkeypatch):
        session = book(patient, doctor)
        # Simulate a concurrent request that passed the pre-check
        monkeypatch.setattr(services.engine.slot_checker, 'ensure_available', lambda *args: None)

        with pytest.raises(SlotUnavailable):
            book(make_patient(first_name='Kim'), doctor, at=session.scheduled_date)
        assert services.session_repository.count() == 1


class TestCancel:

    def test_patient_cancels(self, services, book, doctor, patient, now):
        session = book(patient, doctor)
        cancelled = services.engine.cancel(session.session_id, patient.user_id, reason='Feeling better', now=now)

        assert cancelled.status == SessionStatus.CANCELLED
        assert cancelled.cancelled_by == CancelledBy.PATIENT
        assert cancelled.cancellation_reason == 'Feeling better'
        assert cancelled.cancelled_at == now

    def test_doctor_cancels(self, services, book, doctor, patient):
        session = book(patient, doctor)
        cancelled = services.engine.cancel(session.session_id, doctor.user_id)
        assert cancelled.cancelled_by == CancelledBy.DOCTOR

    def test_cancel_by_internal_key(self, services, book, doctor, patient):
        session = book(patient, doctor)
        assert services.engine.cancel(str(session.id), patient.user_id).status == SessionStatus.CANCELLED

    def test_system_cancel(self, services, book, doctor, patient):
        session = book(patient, doctor)
        assert services.engine.cancel_by_system(session, reason='Doctor unavailable').cancelled_by == CancelledBy.SYSTEM

    def test_outsider_cannot_cancel(self, services, book, make_patient, doctor, patient):
        session = book(patient, doctor)
        stranger = make_patient(first_name='Kim')
        with pytest.raises(NotOwner):
            services.engine.cancel(session.session_id, stranger.user_id)
        assert services.engine.get_session(session.session_id).status == SessionStatus.SCHEDULED

    def test_unknown_session(self, services, patient):
        with pytest.raises(SessionNotFound):
            services.engine.cancel('S-0-0', patient.user_id)

    def test_cancel_twice_names_current_status(self, services, book, doctor, patient):
        session = book(patient, doctor)
        services.engine.cancel(session.session_id, patient.user_id)
        with pytest.raises(InvalidTransition) as exc:
            services.engine.cancel(session.session_id, patient.user_id)
        assert exc.value.message == 'Cannot cancel cancelled appointment'

    def test_completed_session_cannot_be_cancelled(self, services, book, doctor, patient, now):
        session = book(patient, doctor)
        services.engine.advance_status(session.session_id, SessionStatus.IN_PROGRESS, now=now)
        services.engine.advance_status(session.session_id, SessionStatus.COMPLETED, now=now)
        with pytest.raises(InvalidTransition) as exc:
            services.engine.cancel(session.session_id, patient.user_id)
        assert 'completed' in exc.value.message

    def test_in_progress_session_can_be_cancelled(self, services, book, doctor, patient, now):
        session = book(patient, doctor)
        services.engine.advance_status(session.session_id, SessionStatus.IN_PROGRESS, now=now)
        assert services.engine.cancel(session.session_id, doctor.user_id).status == SessionStatus.CANCELLED


class TestStatusProgression:

    def test_terminal_states_have_no_exits(self):
        for status in (SessionStatus.COMPLETED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW):
            assert not TRANSITIONS[status]

    def test_start_and_complete_stamp_runtime(self, services, book, doctor, patient, now):
        session = book(patient, doctor)
        started_at = session.scheduled_date + timedelta(minutes=2)
        services.engine.advance_status(session.session_id, SessionStatus.CONFIRMED, user_id=doctor.user_id, now=now)
        services.engine.advance_status(session.session_id, SessionStatus.IN_PROGRESS, user_id=doctor.user_id, now=started_at)
        done = services.engine.advance_status(
            session.session_id, SessionStatus.COMPLETED, user_id=doctor.user_id, now=started_at + timedelta(minutes=47),
        )

        assert done.status == SessionStatus.COMPLETED
        assert done.actual_start_time == started_at
        assert done.actual_end_time == started_at + timedelta(minutes=47)
        assert done.actual_duration == 47

    def test_illegal_transition_rejected(self, services, book, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(InvalidTransition) as exc:
            services.engine.advance_status(session.session_id, SessionStatus.COMPLETED)
        assert exc.value.message == 'Cannot move session from scheduled to completed'

    def test_patient_cannot_advance(self, services, book, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(NotOwner):
            services.engine.advance_status(session.session_id, SessionStatus.CONFIRMED, user_id=patient.user_id)

    def test_cancelled_is_not_a_status_update(self, services, book, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(InvalidTransition) as exc:
            services.engine.advance_status(session.session_id, SessionStatus.CANCELLED, user_id=doctor.user_id)
        assert not exc.value.message.startswith('Cannot cancel')
        assert exc.value.target == 'cancelled'
        assert services.engine.get_session(session.session_id).status == SessionStatus.SCHEDULED

    def test_can_transition(self, services):
        assert services.engine.can_transition(SessionStatus.SCHEDULED, SessionStatus.NO_SHOW)
        assert not services.engine.can_transition(SessionStatus.NO_SHOW, SessionStatus.SCHEDULED)


class TestListing:

    def test_patient_and_doctor_views(self, services, book, make_patient, doctor, patient):
        mine = book(patient, doctor)
        book(make_patient(first_name='Kim'), doctor, offset=timedelta(days=2))

        assert [s.session_id for s in services.engine.list_for_user(patient.user_id)] == [mine.session_id]
        assert len(services.engine.list_for_user(doctor.user_id)) == 2

    def test_upcoming_excludes_cancelled_and_past(self, services, book, doctor, patient, now):
        later = book(patient, doctor, offset=timedelta(days=2))
        sooner = book(patient, doctor, offset=timedelta(days=1))
        cancelled = book(patient, doctor, offset=timedelta(days=3))
        book(patient, doctor, offset=timedelta(days=-1))
        services.engine.cancel(cancelled.session_id, patient.user_id)

        upcoming = services.engine.list_for_user(patient.user_id, upcoming=True, now=now)
        assert [s.session_id for s in upcoming] == [sooner.session_id, later.session_id]

    def test_status_filter(self, services, book, doctor, patient):
        kept = book(patient, doctor)
        dropped = book(patient, doctor, offset=timedelta(days=2))
        services.engine.cancel(dropped.session_id, patient.user_id)

        result = services.engine.list_for_user(doctor.user_id, status=SessionStatus.SCHEDULED)
        assert [s.session_id for s in result] == [kept.session_id]


class TestCheckInLinkage:

    def _check_in(self, db, patient, session):
        check_in = CheckIn(patient_id=patient.id, session_id=session.id, mood=5,
                           primary_concern=PrimaryConcern.STRESS, severity=2, specific_concerns=[])
        db.session.add(check_in)
        db.session.flush()
        return check_in

    def test_link_sets_flags(self, services, book, doctor, patient, db):
        session = book(patient, doctor)
        check_in = self._check_in(db, patient, session)
        services.engine.link_check_in(session, check_in)
        db.session.commit()

        assert session.check_in_id == check_in.id
        assert session.check_in_completed is True

    def test_relink_is_last_write_wins_and_warns(self, services, book, doctor, patient, db, caplog):
        session = book(patient, doctor)
        first = self._check_in(db, patient, session)
        second = self._check_in(db, patient, session)
        services.engine.link_check_in(session, first)

        with caplog.at_level(logging.WARNING, logger='mindflow.services.session_service'):
            services.engine.link_check_in(session, second)

        assert session.check_in_id == second.id
        assert 'relinking' in caplog.text


class TestJoinDetails:

    def test_both_parties_derive_the_same_room(self, services, book, doctor, patient, now):
        session = book(patient, doctor)
        as_patient = services.engine.join_details(session.session_id, patient.user_id, now=now)
        as_doctor = services.engine.join_details(session.session_id, doctor.user_id, now=now)

        assert as_patient['video_room_id'] == as_doctor['video_room_id'] == room_id_for_session(session)
        assert as_patient['role'] == 'patient'
        assert as_doctor['role'] == 'doctor'
        assert as_patient['join_window']['state'] == NOT_STARTED
        assert as_patient['can_join'] is False

    def test_cancelled_session_cannot_be_joined(self, services, book, doctor, patient):
        session = book(patient, doctor)
        services.engine.cancel(session.session_id, patient.user_id)
        details = services.engine.join_details(session.session_id, patient.user_id, now=session.scheduled_date)
        assert details['join_window']['state'] == JOINABLE
        assert details['can_join'] is False

    def test_outsider_gets_not_owner(self, services, book, make_patient, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(NotOwner):
            services.engine.join_details(session.session_id, make_patient(first_name='Kim').user_id)


class TestEndToEnd:

    def test_book_conflict_then_join(self, services, make_patient, doctor, patient):
        booked_at = datetime(2025, 6, 1, 9, 0, 0)
        start = datetime(2025, 6, 1, 14, 0, 0)

        session = services.engine.create(patient.user_id, doctor.id, start, SessionMode.VIDEO, duration=50, now=booked_at)
        assert session.status == SessionStatus.SCHEDULED
        assert session.video_room_id.startswith('mindflow-s-')
        assert session.link_expires_at == booked_at + timedelta(minutes=15)

        with pytest.raises(SlotUnavailable):
            services.engine.create(make_patient(first_name='Kim').user_id, doctor.id, start, SessionMode.VIDEO, now=booked_at)

        at = datetime(2025, 6, 1, 13, 46, 0)
        as_patient = services.engine.join_details(session.session_id, patient.user_id, now=at)
        as_doctor = services.engine.join_details(session.session_id, doctor.user_id, now=at)
        assert as_patient['video_room_id'] == as_doctor['video_room_id']
        assert as_patient['can_join'] and as_doctor['can_join']
        assert services.session_repository.count() == 1
        assert isinstance(services.engine.get_session(session.session_id), Session)
