"""Frontmatter helpers — YAML metadata at the top of ``.typ`` template files.

Format (a Typst block comment, so the file still compiles on its own):

    /*---
    id: tpl_nda
    title: Non-Disclosure Agreement
    price: 2999
    published: true
    variables:
      - name: disclosingParty
        type: text
        label: Disclosing Party Name
        required: true
    ---*/
    #set document(title: "Non-Disclosure Agreement")
    ...
"""

from __future__ import annotations

import re
from typing import Any

import yaml

_FRONTMATTER_RE = re.compile(r"^\s*/\*---\s*\n(.*?)\n\s*---\*/[ \t]*\n?(.*)", re.DOTALL)


def parse_typst_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split a ``.typ`` file into (metadata_dict, typst_body).

    Files without a frontmatter block return ``({}, content)``. Malformed
    YAML raises ``yaml.YAMLError``, so a broken template is reported rather
    than silently imported with no metadata.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    meta = yaml.safe_load(match.group(1)) or {}
    if not isinstance(meta, dict):
        raise yaml.YAMLError("frontmatter must be a mapping")
    return meta, match.group(2)
