from miniassoc.orm_types import Boolean, Number, Text
from miniassoc.registry import Registry


def build_example_registry():
    registry = Registry()

    @registry.entity
    class Person:
        class Meta:
            table_name = "people"

        id = Number(pk=True)
        name = Text()

    @registry.entity
    class Team:
        id = Number(pk=True)
        name = Text()

    @registry.entity
    class Game:
        id = Number(pk=True)
        played_on = Text()

    @registry.entity
    class User:
        class Meta:
            underscored = True

        id = Number(pk=True)
        email = Text(nullable=False, unique=True)

    @registry.entity
    class Project:
        id = Number(pk=True)
        title = Text()

    @registry.entity
    class Task:
        id = Number(pk=True)
        title = Text()
        done = Boolean(default=False)

    # Self references
    registry.has_one(Person, Person, alias="Father")
    registry.has_one(Person, Person, alias="Mother")
    registry.has_many(Person, Person, alias="Children", foreign_key="parentId")

    # Two roles between the same pair
    registry.has_one(Team, Game, alias="HomeTeam", foreign_key="homeTeamId")
    registry.has_one(Team, Game, alias="AwayTeam", foreign_key="awayTeamId")
    registry.belongs_to(Game, Team, alias="HomeTeam", foreign_key="homeTeamId")

    # One-to-many with its inverse
    registry.has_many(Project, Task)
    registry.belongs_to(Task, Project)
    registry.belongs_to(Task, User, {"as": "Assignee", "onDelete": "cascade"})

    # Many-to-many with payload on the junction
    registry.define("UserProjects", {"role": Text(default="member")})
    registry.belongs_to_many(User, Project, through="UserProjects")
    registry.belongs_to_many(Project, User, through="UserProjects", alias="Members", other_key="UserId")

    return registry
