from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_API_VERSION = "31.0"
DEFAULT_NAMESPACE = "http://soap.sforce.com/2006/04/metadata"


@dataclass(frozen=True)
class TypeGroup:
    type_name: str
    members: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Manifest:
    groups: Tuple[TypeGroup, ...] = field(default_factory=tuple)
    api_version: str = DEFAULT_API_VERSION
    xml_namespace: str = DEFAULT_NAMESPACE

    def type_names(self) -> Tuple[str, ...]:
        return tuple(g.type_name for g in self.groups)

    def member_count(self) -> int:
        return sum(len(g.members) for g in self.groups)
