from datetime import datetime

import pytest

from tuition_api.core.errors import BadInput, Forbidden, NotFound
from tuition_api.models.user import User
from tuition_api.services import users


def test_register_normalizes_email_and_sets_initial_status(db) -> None:
    student, created = users.register_user(db, ' Student@Example.COM ', 'student', {'name': 'Sam'})
    tutor, _ = users.register_user(db, 'tutor@example.com', 'tutor', {})

    assert created is True
    assert student.email == 'student@example.com'
    assert student.status == 'active'
    assert student.name == 'Sam'
    assert tutor.status == 'pending'


def test_register_twice_is_idempotent(db) -> None:
    first, first_created = users.register_user(db, 'student@example.com', 'student', {'name': 'Sam'})
    second, second_created = users.register_user(db, 'STUDENT@example.com', 'tutor', {'name': 'Other'})

    assert first_created is True
    assert second_created is False
    assert second.id == first.id
    assert second.role == 'student'
    assert db.query(User).count() == 1


@pytest.mark.parametrize('role', ['admin', 'superuser'])
def test_register_rejects_non_self_service_roles(db, role: str) -> None:
    with pytest.raises(BadInput):
        users.register_user(db, 'x@example.com', role, {})


def test_profile_update_only_touches_profile_fields(db, people) -> None:
    student = people['student']
    created_at = student.created_at

    updated = users.update_profile(
        db,
        student,
        {'name': 'New Name', 'phone': '123', 'email': 'new@example.com', 'role': 'admin', 'created_at': datetime(2000, 1, 1)},
    )

    assert updated.name == 'New Name'
    assert updated.phone == '123'
    assert updated.email == 'student@example.com'
    assert updated.role == 'student'
    assert updated.created_at == created_at


def test_admin_updates_role_and_status(db, people) -> None:
    updated = users.update_user_access(db, people['admin'], people['tutor_b'].id, role='admin', status='active')

    assert updated.role == 'admin'
    assert updated.status == 'active'
    assert updated.email == 'tutor.b@example.com'


def test_non_admin_cannot_update_access(db, people) -> None:
    with pytest.raises(Forbidden):
        users.update_user_access(db, people['student'], people['tutor_b'].id, status='active')


@pytest.mark.parametrize(('role', 'status'), [(None, None), ('wizard', None), (None, 'banned')])
def test_update_access_validates_values(db, people, role, status) -> None:
    with pytest.raises(BadInput):
        users.update_user_access(db, people['admin'], people['tutor_b'].id, role=role, status=status)


def test_update_access_for_unknown_user(db, people) -> None:
    with pytest.raises(NotFound):
        users.update_user_access(db, people['admin'], 'b' * 32, status='active')


def test_list_users_filters_by_role(db, people) -> None:
    items, total = users.list_users(db, people['admin'], role='tutor')

    assert total == 2
    assert {item.email for item in items} == {'tutor.a@example.com', 'tutor.b@example.com'}
    with pytest.raises(Forbidden):
        users.list_users(db, people['student'])
