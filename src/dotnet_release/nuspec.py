# src/dotnet_release/nuspec.py
# =============================================================================
# Loading, saving and versioning .nuspec package manifests.
#
# ElementTree rewrites namespaces as ns0:, ns1:, ... unless the prefixes seen in
# the input are registered before parsing, so load_manifest() does that.
# =============================================================================

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Tuple

from .errors import ReleaseToolError
from .versioning import IncrementFlags, bump_version_string
from .xmlpath import XmlPath, get_element_text, set_element_text

log = logging.getLogger(__name__)

VERSION_PATH = XmlPath.parse("package.metadata.version")
ID_PATH = XmlPath.parse("package.metadata.id")


def _register_namespaces(path: Path) -> None:
    for _event, (prefix, uri) in ET.iterparse(str(path), events=("start-ns",)):
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            # reserved prefixes such as ns0
            log.debug("cannot keep namespace prefix %r for %s", prefix, uri)


def _parser() -> ET.XMLParser:
    # Keep comments and processing instructions so a save only changes what was set.
    return ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))


def load_manifest(path: Path) -> ET.ElementTree:
    path = Path(path)
    try:
        _register_namespaces(path)
        return ET.parse(str(path), parser=_parser())
    except ET.ParseError as exc:
        raise ReleaseToolError(f"{path}: not a valid XML document ({exc})") from exc
    except OSError as exc:
        raise ReleaseToolError(f"cannot read {path}: {exc.strerror or exc}") from exc


def save_manifest(tree: ET.ElementTree, path: Path) -> None:
    try:
        tree.write(str(path), encoding="utf-8", xml_declaration=True)
    except OSError as exc:
        raise ReleaseToolError(f"cannot write {path}: {exc.strerror or exc}") from exc


def read_manifest_version(path: Path) -> Optional[str]:
    return get_element_text(load_manifest(path), VERSION_PATH)


def read_package_id(path: Path) -> Optional[str]:
    return get_element_text(load_manifest(path), ID_PATH)


def set_manifest_version(path: Path, version: str, *, dry_run: bool = False) -> Tuple[Optional[str], str]:
    """Write ``version`` into the manifest, creating <version> under <metadata> if needed."""
    tree = load_manifest(path)
    old = get_element_text(tree, VERSION_PATH)
    set_element_text(tree, VERSION_PATH, version)
    log.info("%s: version %s -> %s", path, old if old is not None else "(not set)", version)
    if not dry_run:
        save_manifest(tree, path)
    return old, version


def bump_manifest_version(path: Path, flags: IncrementFlags, *, dry_run: bool = False) -> Tuple[str, str]:
    tree = load_manifest(path)
    old = get_element_text(tree, VERSION_PATH)
    if old is None:
        raise ReleaseToolError(f"{path}: no {VERSION_PATH} element, set one explicitly with --set")
    new = bump_version_string(old, flags)
    set_element_text(tree, VERSION_PATH, new)
    log.info("%s: version %s -> %s", path, old, new)
    if not dry_run:
        save_manifest(tree, path)
    return old, new
