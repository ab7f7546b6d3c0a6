"""Helpers for safe file exports."""
import re

# Leading characters a spreadsheet treats as the start of a formula.
FORMULA_PREFIXES = ("=", "+", "-", "@")


def sanitise_cell(value):
    """Neutralise text that a spreadsheet would evaluate as a formula.

    Numbers, dates and booleans pass through untouched.
    """
    if isinstance(value, str) and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def sanitise_row(values):
    return [sanitise_cell(value) for value in values]


def sanitise_filename(name):
    """Keep letters, digits, dots, dashes and underscores; collapse the rest."""
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", str(name)).strip("._")
    return cleaned or "export"
