from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from sfmanifest.model.manifest import DEFAULT_API_VERSION, DEFAULT_NAMESPACE, Manifest, TypeGroup
from sfmanifest.registry.folder_types import FolderTypeRegistry
from sfmanifest.scan.scanner import MANIFEST_EXCLUDES, DirectoryScanner

logger = logging.getLogger(__name__)


class ManifestBuilder:
    """Assemble a Manifest with one TypeGroup per immediate subfolder of a root.

    Folder and member order follow the scanner; scan errors propagate and
    abort the build.
    """

    def __init__(
        self,
        registry: Optional[FolderTypeRegistry] = None,
        scanner: Optional[DirectoryScanner] = None,
        api_version: str = DEFAULT_API_VERSION,
        xml_namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.registry = registry or FolderTypeRegistry()
        self.scanner = scanner or DirectoryScanner()
        self.api_version = api_version
        self.xml_namespace = xml_namespace

    def build(self, root: str | Path) -> Manifest:
        groups: List[TypeGroup] = []
        for folder in self.scanner.list_subfolders(root):
            members = self.scanner.list_files(folder, MANIFEST_EXCLUDES, recursive=False)
            groups.append(TypeGroup(type_name=self.registry.type_for(folder.name), members=tuple(members)))

        manifest = Manifest(groups=tuple(groups), api_version=self.api_version, xml_namespace=self.xml_namespace)
        logger.info("Built manifest: %d types, %d members", len(manifest.groups), manifest.member_count())
        return manifest
