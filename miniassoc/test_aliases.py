import pytest

from miniassoc.aliases import AliasResolver
from miniassoc.errors import AmbiguousSelfReferenceError, ConflictError
from miniassoc.options import AliasName
from miniassoc.orm_types import AssociationKind, Number, Text


@pytest.fixture
def team_game(registry):
    team = registry.define("Team", {"id": Number(pk=True), "name": Text()})
    game = registry.define("Game", {"id": Number(pk=True)})
    return team, game


def test_self_reference_with_alias(people):
    association = people.has_one(people, alias="Father")

    fk = people.columns["FatherId"]
    assert fk.references == ("Person", "id")
    assert association.is_self_referential
    assert association.as_name == "Father"
    assert set(association.accessors) == {"getFather", "setFather", "createFather"}


def test_self_reference_without_alias_fails(people):
    with pytest.raises(AmbiguousSelfReferenceError) as exc:
        people.has_one(people)

    assert exc.value.source == "Person"
    assert exc.value.target == "Person"
    assert list(people.columns) == ["id", "name"]


@pytest.mark.parametrize("kind", list(AssociationKind))
def test_every_kind_needs_alias_on_self_reference(people, kind):
    options = {"through": "PersonLinks"} if kind is AssociationKind.BELONGS_TO_MANY else {}

    with pytest.raises(AmbiguousSelfReferenceError):
        people.registry.associate(people, people, kind, options)


def test_two_self_roles_coexist(people):
    father = people.has_one(people, alias="Father")
    mother = people.has_one(people, alias="Mother")

    assert {"FatherId", "MotherId"} <= set(people.columns)
    assert father.foreign_key != mother.foreign_key


def test_home_and_away_roles_coexist(team_game):
    team, game = team_game

    home = team.has_one(game, {"as": "HomeTeam", "foreignKey": "homeTeamId"})
    away = team.has_one(game, {"as": "AwayTeam", "foreignKey": "awayTeamId"})

    assert game.columns["homeTeamId"].references == ("Team", "id")
    assert game.columns["awayTeamId"].references == ("Team", "id")
    assert set(home.accessors) == {"getHomeTeam", "setHomeTeam", "createHomeTeam"}
    assert set(away.accessors) == {"getAwayTeam", "setAwayTeam", "createAwayTeam"}
    assert set(team.associations) == {"HomeTeam", "AwayTeam"}


def test_same_alias_twice_on_a_source_conflicts(team_game):
    team, game = team_game
    team.has_one(game, alias="HomeTeam", foreign_key="homeTeamId")

    with pytest.raises(ConflictError) as exc:
        team.has_one(game, alias="HomeTeam", foreign_key="hostId")

    assert exc.value.alias == "HomeTeam"
    assert "hostId" not in game


def test_identical_redeclaration_returns_existing(team_game):
    team, game = team_game
    first = team.has_one(game, alias="HomeTeam", foreign_key="homeTeamId")
    second = team.has_one(game, {"as": "HomeTeam", "foreignKey": "homeTeamId"})

    assert second is first
    assert len(team.registry.associations) == 1


def test_default_names_conflict_between_kinds(team_game):
    team, game = team_game
    team.has_one(game)

    with pytest.raises(ConflictError):
        team.belongs_to(game)


def test_alias_colliding_with_attribute_conflicts(team_game):
    team, game = team_game

    with pytest.raises(ConflictError):
        game.belongs_to(team, alias="id")


def test_resolver_names_for_plural_kinds(team_game):
    team, game = team_game
    resolver = AliasResolver()

    name = resolver.resolve(team, game, AssociationKind.HAS_MANY)
    assert (name.as_name, name.singular, name.plural, name.alias) == ("Games", "Game", "Games", None)

    name = resolver.resolve(team, game, "hasMany", "Fixtures")
    assert (name.as_name, name.singular, name.plural) == ("Fixtures", "Fixture", "Fixtures")

    name = resolver.resolve(team, game, "belongsTo", "Opponent")
    assert (name.as_name, name.singular, name.plural) == ("Opponent", "Opponent", "Opponents")


def test_resolver_accepts_explicit_singular_and_plural(team_game):
    team, game = team_game

    name = AliasResolver().resolve(team, game, "hasMany", AliasName(singular="Match", plural="Matchen"))

    assert name.as_name == "Matchen"
    assert name.singular == "Match"
    assert name.alias == "Match"
