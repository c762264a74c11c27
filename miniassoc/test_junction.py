import pytest

from miniassoc.errors import ConflictError, MissingThroughError, UnknownEntityError
from miniassoc.junction import JunctionManager, JunctionSpec
from miniassoc.orm_types import CASCADE, ForeignKey, Number, Text
from miniassoc.registry import Registry


def test_two_declarations_share_one_junction(registry, user_project):
    user, project = user_project

    forward = user.belongs_to_many(project, through="Membership")
    backward = project.belongs_to_many(user, through="Membership")

    junction = registry["Membership"]
    assert forward.through is junction
    assert backward.through is junction
    assert junction.is_junction
    assert set(junction.foreign_keys) == {"UserId", "ProjectId"}
    assert junction.columns["UserId"].references == ("User", "id")
    assert junction.columns["ProjectId"].references == ("Project", "id")
    for fk in junction.foreign_keys.values():
        assert fk.on_update == CASCADE
        assert fk.on_delete == CASCADE
    assert (forward.foreign_key, forward.other_key) == ("UserId", "ProjectId")
    assert (backward.foreign_key, backward.other_key) == ("ProjectId", "UserId")


def test_auto_created_junction_has_composite_identity(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership")

    junction = registry["Membership"]
    assert list(junction.columns) == ["UserId", "ProjectId"]
    assert junction.primary_keys == ["UserId", "ProjectId"]
    assert not junction.has_surrogate_key
    assert junction.unique_keys == [("UserId", "ProjectId")]
    assert junction.auto_created


def test_mismatched_key_names_conflict(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership", foreign_key="member_id")

    with pytest.raises(ConflictError) as exc:
        project.belongs_to_many(user, through="Membership")

    assert "Membership" in str(exc.value)
    assert set(registry["Membership"].columns) == {"member_id", "ProjectId"}
    assert project.associations == {}


def test_matching_explicit_key_names_converge(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership", foreign_key="member_id")
    project.belongs_to_many(user, through="Membership", other_key="member_id")

    assert set(registry["Membership"].foreign_keys) == {"member_id", "ProjectId"}


def test_missing_through(user_project):
    user, project = user_project

    with pytest.raises(MissingThroughError) as exc:
        user.belongs_to_many(project)

    assert exc.value.source == "User"
    assert exc.value.target == "Project"


def test_predefined_junction_with_explicit_key_is_preserved(registry, user_project):
    user, project = user_project
    membership = registry.define("Membership", {
        "membershipId": Number(pk=True),
        "role": Text(default="member"),
    })

    association = user.belongs_to_many(project, through=membership)

    assert association.through is membership
    assert membership.pk == "membershipId"
    assert membership.has_surrogate_key
    assert membership.unique_keys == []
    assert not membership.columns["UserId"].pk
    assert membership.columns["role"].default == "member"
    assert membership.columns["UserId"].on_delete == CASCADE


def test_predefined_junction_without_key_drops_generated_id(registry, user_project):
    user, project = user_project
    membership = registry.define("Membership", {"role": Text()})
    assert membership.pk == "id"

    user.belongs_to_many(project, through="Membership")

    assert "id" not in membership
    assert membership.primary_keys == ["UserId", "ProjectId"]
    assert membership.unique_keys == [("UserId", "ProjectId")]
    assert "role" in membership


def test_predefined_junction_key_columns_are_upgraded(registry, user_project):
    user, project = user_project
    membership = registry.define("Membership", {"UserId": Number(), "ProjectId": Number(), "since": Text()})

    user.belongs_to_many(project, through=membership)

    assert isinstance(membership.columns["UserId"], ForeignKey)
    assert isinstance(membership.columns["ProjectId"], ForeignKey)
    assert membership.primary_keys == ["UserId", "ProjectId"]


def test_predefined_junction_keyed_by_its_link_columns(registry, user_project):
    user, project = user_project
    membership = registry.define("Membership", {
        "UserId": Number(pk=True),
        "ProjectId": Number(pk=True),
        "role": Text(),
    })

    user.belongs_to_many(project, through=membership)
    project.belongs_to_many(user, through=membership)

    assert "id" not in membership
    assert membership.primary_keys == ["UserId", "ProjectId"]
    assert membership.unique_keys == [("UserId", "ProjectId")]
    assert isinstance(membership.columns["UserId"], ForeignKey)
    assert not membership.columns["ProjectId"].nullable


def test_predefined_junction_keeps_partial_declared_key(registry, user_project):
    user, project = user_project
    membership = registry.define("Membership", {"UserId": Number(pk=True), "role": Text()})

    user.belongs_to_many(project, through=membership)
    project.belongs_to_many(user, through="Membership")

    assert membership.primary_keys == ["UserId"]
    assert membership.unique_keys == []
    assert isinstance(membership.columns["UserId"], ForeignKey)
    assert not membership.columns["ProjectId"].pk


def test_later_definition_applies_entity_options(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership")

    junction = registry.define("Membership", {"role": Text()}, underscored=True)

    assert junction.underscored
    assert junction.table_name == "memberships"
    assert set(junction.foreign_keys) == {"UserId", "ProjectId"}


def test_later_definition_rejects_unknown_options(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership")

    with pytest.raises(ValueError):
        registry.define("Membership", {"role": Text()}, bogus_option=True)

    junction = registry["Membership"]
    assert "role" not in junction
    assert junction.auto_created


def test_later_definition_adds_surrogate_key(registry, user_project):
    user, project = user_project
    association = user.belongs_to_many(project, through="Membership")
    assert not association.accessors["addProject"].through_attributes

    junction = registry.define("Membership", {"id": Number(pk=True), "role": Text()})

    assert junction is registry["Membership"]
    assert junction.pk == "id"
    assert junction.has_surrogate_key
    assert junction.unique_keys == []
    assert not junction.columns["UserId"].pk
    assert isinstance(junction.columns["UserId"], ForeignKey)
    assert not junction.auto_created
    refreshed = user.get_association("Projects")
    assert refreshed.accessors["addProject"].through_attributes == ("role",)


def test_later_definition_without_key_keeps_composite(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership")

    junction = registry.define("Membership", {"role": Text()})

    assert junction.primary_keys == ["UserId", "ProjectId"]
    assert junction.unique_keys == [("UserId", "ProjectId")]
    assert "role" in junction


def test_later_definition_cannot_retype_a_junction_key(registry, user_project):
    user, project = user_project
    user.belongs_to_many(project, through="Membership")

    with pytest.raises(ConflictError):
        registry.define("Membership", {"UserId": Text()})


def test_junction_follows_source_naming_convention():
    registry = Registry()
    user = registry.define("User", {"id": Number(pk=True)}, underscored=True)
    group = registry.define("Group", {"id": Number(pk=True)})

    user.belongs_to_many(group, through="user_groups")

    assert set(registry["user_groups"].foreign_keys) == {"user_id", "group_id"}


def test_self_referential_junction_uses_alias_for_other_key(registry, people):
    association = people.belongs_to_many(people, through="Friendship", alias="Friends")

    junction = registry["Friendship"]
    assert set(junction.foreign_keys) == {"PersonId", "FriendId"}
    assert association.other_key == "FriendId"
    assert association.singular == "Friend"


def test_same_key_for_both_sides_conflicts(user_project):
    user, project = user_project

    with pytest.raises(ConflictError):
        user.belongs_to_many(project, through="Membership", foreign_key="ref", other_key="ref")


def test_junction_cannot_be_a_participant(user_project):
    user, project = user_project

    with pytest.raises(ConflictError):
        user.belongs_to_many(project, through="Project")


def test_manager_rejects_foreign_junction(registry, user_project):
    user, project = user_project
    stranger = Registry().define("Membership", {"role": Text()})
    manager = JunctionManager(registry)

    with pytest.raises(UnknownEntityError):
        manager.resolve_junction(JunctionSpec(source=user, target=project, through=stranger))


def test_manager_plan_does_not_touch_the_registry(registry, user_project):
    user, project = user_project
    plan = JunctionManager(registry).plan(JunctionSpec(source=user, target=project, through="Membership"))

    assert plan.created
    assert "Membership" not in registry
    assert (plan.foreign_key, plan.other_key) == ("UserId", "ProjectId")
    assert plan.apply() is registry["Membership"]
