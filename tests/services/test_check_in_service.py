"""
Tests for check-in creation and its linkage to sessions.
"""
import pytest

from mindflow.models import PrimaryConcern
from mindflow.services import NotOwner, PatientProfileMissing, SessionNotFound


def _create(services, patient, **overrides):
    fields = dict(mood=6, primary_concern=PrimaryConcern.ANXIETY, severity=3)
    fields.update(overrides)
    return services.check_ins.create_check_in(patient.user_id, **fields)


class TestCreateCheckIn:

    def test_standalone_check_in(self, services, patient):
        check_in = _create(services, patient, specific_concerns=['panic'], note='Rough week')

        assert check_in.session_id is None
        assert check_in.specific_concerns == ['panic']
        assert check_in.reviewed_by_doctor is False
        assert check_in.to_dict()['note'] == 'Rough week'

    def test_linked_check_in_marks_session(self, services, book, doctor, patient):
        session = book(patient, doctor)
        check_in = _create(services, patient, session_ref=session.session_id)

        assert session.check_in_id == check_in.id
        assert session.check_in_completed is True
        assert check_in.to_dict()['session_id'] == session.session_id

    def test_second_check_in_replaces_link(self, services, book, doctor, patient):
        session = book(patient, doctor)
        _create(services, patient, session_ref=session.session_id)
        second = _create(services, patient, session_ref=session.session_id, mood=8)
        assert session.check_in_id == second.id

    def test_unknown_session_creates_nothing(self, services, patient):
        with pytest.raises(SessionNotFound):
            _create(services, patient, session_ref='S-404-1')
        assert services.check_ins.list_check_ins(patient.user_id) == []

    def test_other_patients_session(self, services, book, make_patient, doctor, patient):
        session = book(patient, doctor)
        with pytest.raises(NotOwner):
            _create(services, make_patient(first_name='Kim'), session_ref=session.session_id)
        assert services.engine.get_session(session.session_id).check_in_completed is False

    def test_doctor_has_no_patient_profile(self, services, doctor):
        with pytest.raises(PatientProfileMissing):
            services.check_ins.create_check_in(doctor.user_id, mood=5, primary_concern=PrimaryConcern.OTHER, severity=1)


class TestListCheckIns:

    def test_filtered_by_session(self, services, book, doctor, patient):
        session = book(patient, doctor)
        linked = _create(services, patient, session_ref=session.session_id)
        _create(services, patient)

        assert len(services.check_ins.list_check_ins(patient.user_id)) == 2
        assert [c.id for c in services.check_ins.list_check_ins(patient.user_id, session.session_id)] == [linked.id]
