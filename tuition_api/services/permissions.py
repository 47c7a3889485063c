"""Authorization predicates shared by every mutating operation.

Each entity gets one ``can_*`` function answering whether ``actor`` may
perform ``action`` on ``resource``. Callers decide which error to raise.
"""

from tuition_api.models.application import Application
from tuition_api.models.tuition import Tuition
from tuition_api.models.user import User, UserRole

TUITION_ACTIONS = frozenset({'create', 'update_content', 'moderate', 'delete', 'view', 'view_applications', 'pay'})
APPLICATION_ACTIONS = frozenset({'create', 'reject'})
USER_ACTIONS = frozenset({'manage'})


def is_admin(actor: User | None) -> bool:
    return actor is not None and actor.role == UserRole.ADMIN.value


def is_creator(actor: User | None, tuition: Tuition) -> bool:
    return actor is not None and tuition.email == actor.email


def can_tuition(actor: User | None, action: str, tuition: Tuition | None = None) -> bool:
    if action not in TUITION_ACTIONS:
        raise ValueError(f'Unknown tuition action: {action}')
    if actor is None:
        return False
    if action == 'create':
        return actor.role in {UserRole.STUDENT.value, UserRole.TUTOR.value}
    if action == 'moderate':
        return is_admin(actor)
    if action == 'update_content':
        return is_creator(actor, tuition)
    if action == 'pay':
        return is_creator(actor, tuition)
    # delete, view, view_applications
    return is_admin(actor) or is_creator(actor, tuition)


def can_application(actor: User | None, action: str, application: Application | None = None) -> bool:
    if action not in APPLICATION_ACTIONS:
        raise ValueError(f'Unknown application action: {action}')
    if actor is None or actor.role != UserRole.TUTOR.value:
        return False
    if action == 'create':
        return True
    return application is not None and application.tutor_email == actor.email


def can_user(actor: User | None, action: str, target: User | None = None) -> bool:
    if action not in USER_ACTIONS:
        raise ValueError(f'Unknown user action: {action}')
    return is_admin(actor)


def can(actor: User | None, action: str, resource) -> bool:
    """Dispatch to the predicate for ``resource``'s entity type."""
    if isinstance(resource, Tuition) or resource is Tuition:
        return can_tuition(actor, action, resource if isinstance(resource, Tuition) else None)
    if isinstance(resource, Application) or resource is Application:
        return can_application(actor, action, resource if isinstance(resource, Application) else None)
    if isinstance(resource, User) or resource is User:
        return can_user(actor, action, resource if isinstance(resource, User) else None)
    raise TypeError(f'No permission rules for {resource!r}')
