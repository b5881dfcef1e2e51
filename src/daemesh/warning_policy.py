"""Coded import diagnostics and the policy that routes them.

Each code names one way the importer can lose geometry without failing:

* ``W01``: a ``<polylist>`` was read but not imported.
* ``W02``: a ``<mesh>`` had more than one ``<triangles>`` set; only the
  first was welded.
* ``W03``: normals or texcoords were present in some primitive sets but
  not others, so that attribute was dropped from the aggregate mesh.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from daemesh.errors import ValidationError

WARNING_CODES: dict[str, str] = {
    "W01": "polylist not imported (polylist triangulation disabled)",
    "W02": "extra <triangles> sets in a mesh ignored",
    "W03": "normals or texcoords dropped: presence differs across primitive sets",
}

KNOWN_CODES: frozenset[str] = frozenset(WARNING_CODES)


class DaeMeshWarning(UserWarning):
    """Import diagnostic tagged with one of ``WARNING_CODES``."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.description = WARNING_CODES[code]
        super().__init__(f"[{code}] {message}")


@dataclass(frozen=True)
class WarningPolicy:
    """Per-code routing: drop, raise, or fall through to ``warnings``."""

    warn_as_error: frozenset[str] = frozenset()
    suppress: frozenset[str] = frozenset()


def emit_warning(code: str, message: str, *, policy: WarningPolicy | None = None) -> None:
    """Report an import diagnostic, respecting the active policy.

    Suppression wins over ``warn_as_error``; an escalated code raises
    ``ValidationError`` so the import aborts with no partial mesh.

    Raises:
        KeyError: If ``code`` is not one of ``WARNING_CODES``.
    """
    if code not in WARNING_CODES:
        raise KeyError(f"Unregistered warning code {code!r}")
    if policy is not None:
        if code in policy.suppress:
            return
        if code in policy.warn_as_error:
            raise ValidationError(f"[{code}] {message}")

    warnings.warn(DaeMeshWarning(code, message), stacklevel=2)


def describe_codes() -> str:
    """One ``CODE: description`` line per known code, for help output."""
    return "\n".join(f"{code}: {text}" for code, text in sorted(WARNING_CODES.items()))


def parse_code_list(raw: str) -> frozenset[str]:
    """Parse a comma-separated list of W-codes such as ``"W01, W03"``.

    Raises ``ValueError`` naming the unknown code and listing the valid ones.
    """
    codes: set[str] = set()
    for token in raw.split(","):
        token = token.strip().upper()
        if not token:
            continue
        if token not in WARNING_CODES:
            raise ValueError(f"Unknown warning code: {token!r}\n{describe_codes()}")
        codes.add(token)
    return frozenset(codes)
