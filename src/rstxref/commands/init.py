"""
rstxref.commands.init - Create a default .rstxref.toml.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import tomlkit

from rstxref.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG

SECTION_COMMENTS = {
    "corpus": "Where the sources live and which documents are entry points",
    "roles": "Role vocabulary: object roles resolve against object descriptions",
    "anchors": "Set prefix_document = true to scope section anchors per document",
    "directives": "Directives whose content is never scanned",
    "rules": "Optional checks",
    "run": "Worker threads (0 = one per CPU)",
}


def build_document(root: str | None = None) -> tomlkit.TOMLDocument:
    """Default configuration as a commented TOML document."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("rstxref configuration"))
    for section, values in DEFAULT_CONFIG.items():
        table = tomlkit.table()
        if section in SECTION_COMMENTS:
            table.comment(SECTION_COMMENTS[section])
        for key, value in values.items():
            if isinstance(value, list):
                array = tomlkit.array()
                for item in value:
                    array.append(item)
                if len(value) > 4:
                    array.multiline(True)
                table.add(key, array)
            else:
                table.add(key, value)
        doc.add(section, table)
    if root is not None:
        doc["corpus"]["root"] = root
    return doc


def run(args: argparse.Namespace) -> int:
    """Write a default config file to the current directory."""
    config_path = Path.cwd() / CONFIG_FILE_NAME
    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1

    config_path.write_text(tomlkit.dumps(build_document(args.root)), encoding="utf-8")
    print(f"Created {config_path}")
    return 0
