from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from sfmanifest.errors import ManifestError, NotFoundError, WriteError
from sfmanifest.io.writer import ManifestWriter
from sfmanifest.model.builder import ManifestBuilder
from sfmanifest.registry.folder_types import FolderTypeRegistry
from sfmanifest.scan.scanner import MEMBER_LIST_EXCLUDES, DirectoryScanner
from sfmanifest.utils.config import AppConfig, ManifestSettings, deep_merge

logger = logging.getLogger(__name__)

_CLI_SETTINGS = ("root", "dir", "api_version", "package_name", "xmlns_source")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a Salesforce package.xml from a project tree")
    parser.add_argument("--config", action="append", default=[], help="YAML settings file (repeatable)")
    parser.add_argument("--root", required=False)
    parser.add_argument("--dir", required=False)
    parser.add_argument("--api_version", required=False)
    parser.add_argument("--package_name", required=False)
    parser.add_argument("--xmlns_source", required=False)
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> ManifestSettings:
    cfg = AppConfig.from_files(*args.config)
    cli = {name: getattr(args, name) for name in _CLI_SETTINGS if getattr(args, name) is not None}
    return ManifestSettings.from_raw(deep_merge(cfg.raw, {"manifest": cli}))


def list_members(settings: ManifestSettings, stream: TextIO) -> int:
    if Path(settings.dir).is_absolute():
        raise NotFoundError(f"Member directory must be relative to the root: {settings.dir}")
    scanner = DirectoryScanner(sort=settings.sort_entries)
    names = scanner.list_files(Path(settings.root) / settings.dir, MEMBER_LIST_EXCLUDES, recursive=True)
    try:
        for name in names:
            stream.write(f"<members>{name}</members>\r\n")
        stream.flush()
    except UnicodeEncodeError as exc:
        raise WriteError(f"Member name is not encodable for output: {exc}") from exc
    return len(names)


def write_manifest(settings: ManifestSettings) -> Path:
    builder = ManifestBuilder(
        registry=FolderTypeRegistry(),
        scanner=DirectoryScanner(sort=settings.sort_entries),
        api_version=settings.api_version,
        xml_namespace=settings.xmlns_source,
    )
    manifest = builder.build(settings.root)
    return ManifestWriter().write(manifest, Path(settings.root) / settings.package_name)


def run(settings: ManifestSettings, stream: Optional[TextIO] = None) -> int:
    try:
        if settings.dir:
            count = list_members(settings, stream or sys.stdout)
            logger.info("Listed %d members of %s", count, settings.dir)
        else:
            write_manifest(settings)
    except ManifestError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = resolve_settings(args)
    except ManifestError as exc:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
        logger.error("%s", exc)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
