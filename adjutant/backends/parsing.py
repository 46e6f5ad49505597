"""Cleanup of raw model output.

Models wrap answers in Markdown fences and prose no matter how firmly the
prompt says not to.  ``strip_code_fences`` handles generated source files;
``strip_codeblock`` + ``parse_blueprint`` handle the JSON blueprint.
"""

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from adjutant.errors import ParseError
from adjutant.models.blueprint import ProjectBlueprint

logger = logging.getLogger(__name__)

_CODEBLOCK_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_OPEN_FENCE_RE = re.compile(r"^```[\w.+-]*[ \t]*\n")
_CLOSE_FENCE_RE = re.compile(r"\n?```[ \t]*$")


def strip_code_fences(text: str) -> str:
    """Remove one surrounding ```lang ... ``` pair from generated code.

    Only a fence at the very start and one at the very end are removed --
    fences inside the file body (e.g. in a README) are left alone.
    """
    stripped = text.strip()
    if not stripped.startswith("```"):
        return text
    body = _OPEN_FENCE_RE.sub("", stripped, count=1)
    if body == stripped:
        # Fence without a newline, e.g. "```const x = 1```"
        body = stripped[3:]
    return _CLOSE_FENCE_RE.sub("", body, count=1)


def strip_codeblock(text: str) -> str:
    """Remove optional ```json ... ``` wrapper, surrounding prose, and whitespace.

    After stripping markdown fences we fall back to extracting the first
    balanced ``{...}`` object (a blueprint is never a bare array) so a
    response like::

        Here is your blueprint.
        {"meta": {...}}

    still parses correctly.
    """
    text = text.strip()
    m = _CODEBLOCK_RE.match(text)
    if m:
        return m.group(1).strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
    if text.endswith("```"):
        text = text[:-3]
    text = text.strip()

    if text.startswith("{") or text.startswith("["):
        return text

    extracted = _extract_json_bracket(text)
    return extracted if extracted is not None else text


def _extract_json_bracket(text: str) -> str | None:
    """Extract the first balanced JSON object using bracket counting.

    String literals are tracked so braces inside values don't confuse the
    depth count.
    """
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def parse_blueprint(raw: str) -> ProjectBlueprint:
    """Parse raw backend output into a validated ``ProjectBlueprint``.

    Raises ``ParseError`` when the text is not JSON or does not match the
    blueprint schema.
    """
    cleaned = strip_codeblock(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Blueprint output is not JSON (%d chars): %s", len(raw), exc)
        raise ParseError(f"Blueprint is not valid JSON: {exc.msg}", raw_output=raw) from exc

    try:
        return ProjectBlueprint.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("Blueprint failed schema validation: %d error(s)", exc.error_count())
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ParseError(
            f"Blueprint does not match schema ({exc.error_count()} error(s)); "
            f"first at '{where}': {first.get('msg', 'invalid')}",
            raw_output=raw,
        ) from exc
