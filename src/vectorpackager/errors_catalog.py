"""Actionable error catalog for vectorpackager."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "missing_tag": {
        "what": "No extension tag was given.",
        "next": "Pass `--tag` (for example `--tag 0.1.0`) or set `tag` in the config file.",
    },
    "invalid_pg_version": {
        "what": "Invalid PostgreSQL {label}: `{value}`.",
        "next": "Use a plain number such as `15` for `--pg` and `4` for `--pg-min`.",
    },
    "tool_not_found": {
        "what": "Required command not found: {tool}.",
        "next": "Install it ({hint}) and try again.",
    },
    "insecure_http": {
        "what": "{label} uses insecure HTTP.",
        "next": "Point `--postgres-mirror` at an HTTPS mirror.",
    },
    "ref_not_found": {
        "what": "Could not fetch `{ref}` from {repository}.",
        "next": "Check that the tag exists upstream and is spelled exactly as published.",
    },
    "pg_version_mismatch": {
        "what": "pg_config reports `{reported}` but PostgreSQL {expected} was requested.",
        "next": "Remove `{install_dir}` and run the packager again.",
    },
    "packaging_script_not_found": {
        "what": "Packaging script not found: {path}",
        "next": "Run from the packager checkout or set `package_script` in the config file.",
    },
    "no_packages_built": {
        "what": "No files matching `{pattern}` were produced in {directory}.",
        "next": "Inspect the `make package` and packaging script output above.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
