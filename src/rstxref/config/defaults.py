"""
rstxref.config.defaults - Default configuration values.
"""

CONFIG_FILE_NAME = ".rstxref.toml"

ENV_PREFIX = "RSTXREF_"

DEFAULT_CONFIG = {
    "corpus": {
        "root": "source",
        "suffixes": [".txt", ".rst"],
        "skip_dirs": ["build", "_build", ".git"],
        # Empty disables the reachability check
        "entry_points": [],
    },
    "roles": {
        "objects": [
            "command",
            "dbcommand",
            "function",
            "method",
            "operator",
            "query",
            "update",
            "expression",
            "pipeline",
            "projection",
            "data",
            "setting",
            "parameter",
            "option",
        ],
        "external": ["issue", "program", "manual", "binary", "pep", "rfc"],
        "text": [
            "abbr",
            "dfn",
            "emphasis",
            "file",
            "guilabel",
            "kbd",
            "literal",
            "math",
            "menuselection",
            "mimetype",
            "samp",
            "strong",
            "sub",
            "sup",
        ],
    },
    "anchors": {
        "prefix_document": False,
    },
    "directives": {
        "literal": ["code-block", "code", "sourcecode", "literalinclude", "parsed-literal"],
        "admonitions": [
            "admonition",
            "attention",
            "caution",
            "danger",
            "error",
            "example",
            "hint",
            "important",
            "note",
            "optional",
            "seealso",
            "tip",
            "warning",
        ],
    },
    "rules": {
        "report_unreferenced_anchors": False,
        # Also list section titles nothing links to
        "report_unreferenced_sections": False,
        "suggestions": 3,
    },
    "run": {
        # 0 means one worker per CPU
        "jobs": 0,
    },
}
