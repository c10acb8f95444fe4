"""Render records as text, JSON, XML, CSV, or YAML and write them to a file or stdout."""

import csv
import io
import sys
from json import dumps as json_dumps
from os import path
from xml.etree import ElementTree

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import get_lexer_by_name, load_lexer_from_file
from tabulate import tabulate
from yaml import dump as yaml_dumps

from .models import (Device, DeviceWithNetwork, License, LicenseWithNetwork, Organization, Record, Route,
                     RouteWithNetwork)
from .utility import FORMATS, plural

RECORD_TYPES = {
    'route-tables': (Route, RouteWithNetwork),
    'licenses': (License, LicenseWithNetwork),
    'down': (Device, DeviceWithNetwork),
    'alerting': (Device, DeviceWithNetwork),
    'access': (Organization, Organization),
}


def record_type(command: str, consolidate: bool = False):
    """Return the record class a command produces."""
    single, consolidated = RECORD_TYPES[command]
    return consolidated if consolidate else single


def as_dicts(records: list):
    """Convert records to dicts, dicts are passed through."""
    return [r.to_dict() if isinstance(r, Record) else r for r in records]


def scalar(value):
    """Format a value for a table cell, CSV cell, or XML element."""
    if value is None:
        return ''
    elif isinstance(value, bool):
        return 'true' if value else 'false'
    elif isinstance(value, (list, dict)):
        return json_dumps(value)
    return str(value)


def render(records: list, fmt: str, kind: type = Record):
    """
    Serialize records in a format.

    An empty list still renders as a valid document.

    :param records: a list of records or dicts
    :param fmt: one of text, json, xml, csv, yaml
    :param kind: the record class, names the document and the columns when there are no records
    :returns: the document as UTF-8 bytes
    """
    if fmt not in FORMATS:
        raise ValueError(f"unknown output format '{fmt}', expected one of {', '.join(FORMATS)}")
    rows = as_dicts(records)
    if rows:
        headers = list(rows[0].keys())
    else:
        headers = list(kind().to_dict().keys())

    if fmt == 'text':
        title = f"{plural(kind.kind).title()} ({len(rows)})"
        if rows:
            table = tabulate(
                tabular_data=[[scalar(row.get(h)) for h in headers] for row in rows],
                headers=headers,
                tablefmt="presto")
            document = f"{title}\n{table}\n"
        else:
            document = f"{title}\n"
    elif fmt == 'json':
        document = json_dumps(rows, indent=4) + "\n"
    elif fmt == 'yaml':
        document = yaml_dumps(rows, indent=4, default_flow_style=False, sort_keys=False)
    elif fmt == 'xml':
        root = ElementTree.Element(plural(kind.kind))
        for row in rows:
            element = ElementTree.SubElement(root, kind.kind)
            for key, value in row.items():
                ElementTree.SubElement(element, key).text = scalar(value)
        ElementTree.indent(root, space="    ")
        document = '<?xml version="1.0" encoding="UTF-8"?>\n' + ElementTree.tostring(root, encoding='unicode') + "\n"
    elif fmt == 'csv':
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        for row in rows:
            writer.writerow([scalar(row.get(h)) for h in headers])
        document = buffer.getvalue()
    return document.encode('utf-8')


def access_records(pairs: list):
    """Flatten (organization, networks) pairs to dicts for the structured formats."""
    records = list()
    for organization, networks in pairs:
        record = organization.to_dict()
        record['networks'] = None if networks is None else as_dicts(networks)
        records.append(record)
    return records


def access_report(pairs: list):
    """Describe each accessible organization and its networks as text tables.

    :param pairs: a list of (organization, networks) where networks is None if they could not be listed
    """
    if not pairs:
        return "no organizations are accessible with this API key\n"
    sections = list()
    for organization, networks in pairs:
        summary_table = [
            ['ID', organization.id],
            ['Name', organization.name],
            ['API Enabled', scalar(organization.api_enabled)],
            ['Licensing Model', organization.licensing_model],
            ['Region', f"{organization.region} ({organization.region_host})" if organization.region_host else organization.region],
            ['Dashboard', organization.dashboard_url],
        ]
        section = f"Organization {organization.name}\n"
        section += tabulate(tabular_data=summary_table, headers=['Property', 'Value'], tablefmt="presto") + "\n"
        if networks is None:
            section += "Networks could not be listed\n"
        elif not networks:
            section += "Networks (0)\n"
        else:
            section += f"Networks ({len(networks)})\n"
            section += tabulate(
                tabular_data=[[n.name, n.id, ', '.join(n.product_types), n.time_zone] for n in networks],
                headers=['name', 'id', 'productTypes', 'timeZone'],
                tablefmt="presto") + "\n"
        sections.append(section)
    return "\n".join(sections)


def highlight(document: str, fmt: str, style: str = 'material'):
    """Colorize a rendered document for a terminal, formats without a lexer are returned as-is."""
    if fmt == 'text':
        lexer = text_lexer
    elif fmt in ('json', 'yaml', 'xml'):
        lexer = get_lexer_by_name(fmt, stripall=True)
    else:
        return document
    return pygments_highlight(document, lexer, Terminal256Formatter(style=style))


def write(data: bytes, destination: str = '-'):
    """Write a document to a file, created or truncated, or to stdout if destination is '-' or empty."""
    if not destination or destination == '-':
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    else:
        with open(destination, 'wb') as f:
            f.write(data)


cwd = path.dirname(__file__)
text_lexer_filename = path.join(cwd, "table_lexer.py")
text_lexer = load_lexer_from_file(text_lexer_filename, "MerakiTableLexer", stripall=True)
