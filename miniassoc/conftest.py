import pytest

from miniassoc.orm_types import Number, Text
from miniassoc.registry import Registry


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def people(registry):
    return registry.define("Person", {"id": Number(pk=True), "name": Text()})


@pytest.fixture
def user_project(registry):
    user = registry.define("User", {"id": Number(pk=True), "email": Text()})
    project = registry.define("Project", {"id": Number(pk=True), "title": Text()})
    return user, project
