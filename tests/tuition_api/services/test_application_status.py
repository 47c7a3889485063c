import pytest

from tuition_api.core.errors import BadInput, Conflict, Forbidden, NotFound
from tuition_api.models.application import Application
from tuition_api.services import application_status


def test_tutor_applies_with_identity_from_caller(db, people, make_tuition) -> None:
    tuition = make_tuition(people['student'], status='approved')

    application = application_status.apply_to_tuition(
        db,
        people['tutor_a'],
        tuition.id,
        {'qualifications': 'BSc Physics', 'tutor_email': 'spoof@example.com'},
    )

    assert application.status == 'applied'
    assert application.tutor_email == 'tutor.a@example.com'
    assert application.student_email == 'student@example.com'
    assert application.qualifications == 'BSc Physics'
    assert application.accepted_at is None


def test_new_application_has_explicit_applied_status_before_flush() -> None:
    application = Application(tuition_id='a' * 32, tutor_email='t@example.com', student_email='s@example.com')

    assert application.status == 'applied'


def test_students_cannot_apply(db, people, make_tuition) -> None:
    tuition = make_tuition(people['student'], status='approved')

    with pytest.raises(Forbidden):
        application_status.apply_to_tuition(db, people['other_student'], tuition.id, {})


@pytest.mark.parametrize('tuition_state', ['pending', 'rejected', 'confirmed'])
def test_cannot_apply_to_tuition_that_is_not_open(db, people, make_tuition, tuition_state: str) -> None:
    tuition = make_tuition(people['student'], status=tuition_state)

    with pytest.raises(Conflict):
        application_status.apply_to_tuition(db, people['tutor_a'], tuition.id, {})


def test_duplicate_application_is_a_conflict(db, people, make_tuition) -> None:
    tuition = make_tuition(people['student'], status='approved')
    application_status.apply_to_tuition(db, people['tutor_a'], tuition.id, {})

    with pytest.raises(Conflict):
        application_status.apply_to_tuition(db, people['tutor_a'], tuition.id, {})


def test_apply_with_malformed_tuition_id_is_bad_input(db, people) -> None:
    with pytest.raises(BadInput):
        application_status.apply_to_tuition(db, people['tutor_a'], 'not-an-object-id', {})


@pytest.mark.parametrize('starting_status', ['applied', 'accepted', 'rejected'])
def test_tutor_can_reject_own_application_from_any_state(
    db, people, make_tuition, make_application, starting_status: str
) -> None:
    tuition = make_tuition(people['student'], status='approved')
    application = make_application(tuition, people['tutor_a'], status=starting_status)

    rejected = application_status.reject_own_application(db, people['tutor_a'], application.id)

    assert rejected.status == 'rejected'


def test_rejecting_another_tutors_application_reports_not_found(db, people, make_tuition, make_application) -> None:
    tuition = make_tuition(people['student'], status='approved')
    application = make_application(tuition, people['tutor_a'])

    with pytest.raises(NotFound) as exception_info:
        application_status.reject_own_application(db, people['tutor_b'], application.id)

    assert exception_info.value.status_code == 404
    db.expire_all()
    assert db.get(Application, application.id).status == 'applied'


def test_list_tutor_applications_only_returns_callers(db, people, make_tuition, make_application) -> None:
    tuition = make_tuition(people['student'], status='approved')
    mine = make_application(tuition, people['tutor_a'])
    make_application(tuition, people['tutor_b'])

    applications = application_status.list_tutor_applications(db, people['tutor_a'])

    assert [application.id for application in applications] == [mine.id]


def test_only_creator_or_admin_sees_tuition_applications(db, people, make_tuition, make_application) -> None:
    tuition = make_tuition(people['student'], status='approved')
    make_application(tuition, people['tutor_a'])
    make_application(tuition, people['tutor_b'])

    assert len(application_status.list_tuition_applications(db, people['student'], tuition.id)) == 2
    assert len(application_status.list_tuition_applications(db, people['admin'], tuition.id)) == 2
    with pytest.raises(Forbidden):
        application_status.list_tuition_applications(db, people['tutor_a'], tuition.id)
