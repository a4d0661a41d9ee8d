"""
Structured list filters for the compute API.

Predicates render in the API's `eq` form, where the value is a regular
expression. Exact matches are escaped so names with special characters
never widen the match.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict


class Predicate(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    op: str = "eq"
    value: str

    def render(self) -> str:
        value = self.value.replace('"', '\\"')
        return f'({self.field} {self.op} "{value}")'


class Filter(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicates: tuple[Predicate, ...] = ()

    @classmethod
    def equals(cls, field: str, value: str) -> Filter:
        return cls(predicates=(Predicate(field=field, value=re.escape(value)),))

    @classmethod
    def regexp(cls, field: str, pattern: str) -> Filter:
        return cls(predicates=(Predicate(field=field, value=pattern),))

    def __and__(self, other: Filter) -> Filter:
        return Filter(predicates=self.predicates + other.predicates)

    def __str__(self) -> str:
        return " ".join(p.render() for p in self.predicates)
