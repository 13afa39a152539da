"""Types imported by name in the command line tests."""

from dataclasses import dataclass, field


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Person:
    """Someone with a home address."""

    name: str
    home: Address
    work: Address | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class Node:
    value: int
    children: list["Node"]


class _Internal:
    pass


def make_person(name: str) -> Person:
    return Person(name, Address("", ""))
