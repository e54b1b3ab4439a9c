from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


FOLDER_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "aura": "AuraDefinitionBundle",
        "classes": "ApexClass",
        "components": "ApexComponent",
        "pages": "ApexPage",
        "triggers": "ApexTrigger",
        "staticresources": "StaticResource",
        "objects": "CustomObject",
        "profiles": "Profile",
    }
)


def lookup(folder_name: str) -> Optional[str]:
    """Return the metadata type for a folder, or None when it is not mapped."""
    return FOLDER_TYPES.get(folder_name)


class FolderTypeRegistry:
    def __init__(self, table: Mapping[str, str] = FOLDER_TYPES) -> None:
        self._table = table

    def lookup(self, folder_name: str) -> Optional[str]:
        return self._table.get(folder_name)

    def is_mapped(self, folder_name: str) -> bool:
        return folder_name in self._table

    def type_for(self, folder_name: str) -> str:
        type_name = self.lookup(folder_name)
        if type_name is None:
            # Unmapped folders are emitted under their own name.
            logger.warning("No metadata type for folder %r, using folder name", folder_name)
            return folder_name
        return type_name
