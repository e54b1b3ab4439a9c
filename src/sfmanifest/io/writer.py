from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

from sfmanifest.errors import WriteError
from sfmanifest.model.manifest import Manifest

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0"?>'
INDENT = "\t"
NEWLINE = "\r\n"

# Characters outside the XML 1.0 Char production.
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _check_text(kind: str, value: str) -> None:
    match = _XML_ILLEGAL.search(value)
    if match is not None:
        raise WriteError(f"{kind} {value!r} contains character {match.group()!r} not allowed in XML")


def _target_mode(destination: Path) -> int:
    try:
        return stat.S_IMODE(os.stat(destination).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class ManifestWriter:
    def render(self, manifest: Manifest) -> bytes:
        root = ET.Element("Package", {"xmlns": manifest.xml_namespace})
        for group in manifest.groups:
            types = ET.SubElement(root, "types")
            for member in group.members:
                _check_text("Member", member)
                ET.SubElement(types, "members").text = member
            _check_text("Type name", group.type_name)
            ET.SubElement(types, "name").text = group.type_name
        _check_text("API version", manifest.api_version)
        ET.SubElement(root, "version").text = manifest.api_version

        ET.indent(root, space=INDENT)
        body = ET.tostring(root, encoding="unicode", short_empty_elements=True)
        try:
            return (XML_DECLARATION + NEWLINE + body.replace("\n", NEWLINE)).encode("utf-8")
        except UnicodeEncodeError as exc:
            raise WriteError(f"Manifest text is not encodable as UTF-8: {exc}") from exc

    def write(self, manifest: Manifest, destination: str | Path) -> Path:
        destination = Path(destination)
        payload = self.render(manifest)

        try:
            mode = _target_mode(destination)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
        except OSError as exc:
            raise WriteError(f"Cannot create {destination}: {exc}") from exc

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, destination)
        except OSError as exc:
            raise WriteError(f"Cannot write {destination}: {exc}") from exc
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)

        logger.info("Wrote %s (%d bytes)", destination, len(payload))
        return destination
