"""Immutable value objects used by orders and drivers."""

from __future__ import annotations

from dataclasses import dataclass

from .structural import ValueType


@dataclass(frozen=True, eq=False, repr=False)
class PersonName(ValueType):
    first_name: str
    last_name: str

    def format(self, template: str = "{first} {last}") -> str:
        """Fill ``{first}`` and ``{last}`` in *template*."""
        return template.format_map(
            {"first": self.first_name, "last": self.last_name}
        )


@dataclass(frozen=True, eq=False, repr=False)
class Address(ValueType):
    street: str
    building: str

    def format(self, template: str = "{street} {building}") -> str:
        return template.format_map(
            {"street": self.street, "building": self.building}
        )


@dataclass(frozen=True, eq=False, repr=False)
class Car(ValueType):
    color: str
    model: str
    plate_number: str

    def format(self, template: str = "{color} {model} {plate}") -> str:
        return template.format_map(
            {"color": self.color, "model": self.model, "plate": self.plate_number}
        )

    def __str__(self) -> str:
        return (
            f"Color: {self.color} CarModel: {self.model} "
            f"PlateNumber: {self.plate_number}"
        )
