"""Render read groups as an XML object set for import into the building-automation tool."""

import logging
import xml.etree.ElementTree as ET
from typing import Iterable

from .types import Group

logger = logging.getLogger(__name__)

# Literal values expected by the importing tool; keep verbatim.
RUNTIME_VERSION = "4.0.3.176"
SOURCE_VERSION = "4.0.3.176"
EXPORT_MODE = "Standard"
SEMANTICS_FILTER = "None"
GROUP_OBJECT_TYPE = "modbus.point.ModbusRegisterGroup"

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def group_object_name(group: Group) -> str:
    """Display name of the exported group object, e.g. "Modbus Register Group FC3 0 - 2"."""
    return f"Modbus Register Group FC{group.function_code} {group.start_address} - {group.end_address}"


def _property(parent: ET.Element, name: str, value: str) -> ET.Element:
    return ET.SubElement(parent, "PI", {"Name": name, "Value": value})


def _group_object(parent: ET.Element, group: Group) -> ET.Element:
    obj = ET.SubElement(parent, "OI", {"NAME": group_object_name(group), "TYPE": GROUP_OBJECT_TYPE})
    _property(obj, "FunctionCode", str(group.function_code))
    _property(obj, "Polled", "1")
    return obj


def build_object_set(groups: Iterable[Group]) -> ET.Element:
    """Build the ObjectSet root element: metadata block plus one OI per group."""
    root = ET.Element(
        "ObjectSet",
        {
            "ExportMode": EXPORT_MODE,
            "Note": "TypesFirst",
            "SemanticsFilter": "Standard",
            "Version": RUNTIME_VERSION,
        },
    )
    meta = ET.SubElement(root, "MetaInformation")
    ET.SubElement(meta, "ExportMode", {"Value": EXPORT_MODE})
    ET.SubElement(meta, "SemanticsFilter", {"Value": SEMANTICS_FILTER})
    ET.SubElement(meta, "RuntimeVersion", {"Value": RUNTIME_VERSION})
    ET.SubElement(meta, "SourceVersion", {"Value": SOURCE_VERSION})

    exported = ET.SubElement(root, "ExportedObjects")
    for g in groups:
        _group_object(exported, g)
    return root


def export_document(groups: Iterable[Group]) -> str:
    """Return the XML document (with UTF-8 declaration) describing the groups."""
    root = build_object_set(groups)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    logger.debug("Exported %d group objects", len(root.find("ExportedObjects")))
    return f"{XML_DECLARATION}\n{body}\n"


def export_bytes(groups: Iterable[Group]) -> bytes:
    """UTF-8 encoded export_document(), ready to write to a file."""
    return export_document(groups).encode("utf-8")
