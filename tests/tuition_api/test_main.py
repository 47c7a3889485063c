import asyncio
import json
from types import SimpleNamespace

from tuition_api import main
from tuition_api.core.errors import Forbidden, NotFound, UpstreamFailure


def _request(path: str = '/tuitions/abc') -> SimpleNamespace:
    return SimpleNamespace(method='PATCH', url=SimpleNamespace(path=path))


def test_service_errors_become_json_responses() -> None:
    response = asyncio.run(main.handle_service_error(_request(), NotFound('Tuition not found.')))

    assert response.status_code == 404
    assert json.loads(response.body) == {'detail': 'Tuition not found.'}


def test_default_details_are_used_when_none_given() -> None:
    forbidden = asyncio.run(main.handle_service_error(_request(), Forbidden()))
    upstream = asyncio.run(main.handle_service_error(_request(), UpstreamFailure()))

    assert forbidden.status_code == 403
    assert json.loads(forbidden.body) == {'detail': 'Forbidden access.'}
    assert upstream.status_code == 503


def test_routers_are_mounted() -> None:
    paths = set(main.app.openapi()['paths'])

    assert {'/', '/users', '/tuitions', '/tuitions/{tuition_id}', '/applications', '/payments', '/payments/intent'} <= paths
