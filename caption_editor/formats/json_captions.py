"""Native JSON caption codec with schema validation.

WHY: The text subtitle formats drop speaker labels, confidence, and most
styling. The JSON format is the lossless interchange form of the caption
IR, so it is what the host UI saves and reloads, and what other tools
consume.

HOW: format() serialises each Caption via to_dict() into a pretty-printed
array. parse() decodes JSON, validates it against
schemas/captions.schema.json with jsonschema, and rebuilds Caption objects.
The generated output is validated too before it is returned.

RULES:
- Schema violations and malformed JSON on import raise ParseFailure; an
  invalid collection on export raises ValidationFailure. Never jsonschema
  or json exceptions
- validate_style() is what the store uses to reject bad styles up front
- ids in the file are ignored on import (the store assigns fresh ones)
- Missing style keys fall back to the default style
- Media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

import jsonschema

from caption_editor.core.errors import CaptionEditorError, ParseFailure, ValidationFailure
from caption_editor.core.ir import Caption, CaptionStyle
from caption_editor.formats.base import BaseCodec, provisional_id

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "captions.schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_schema() -> Dict[str, Any]:
    """Load the caption list JSON schema, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _location(exc: jsonschema.ValidationError) -> str:
    return "/".join(str(p) for p in exc.absolute_path) or "<root>"


def _validate(data: Any, error: Type[CaptionEditorError] = ParseFailure) -> None:
    try:
        jsonschema.validate(instance=data, schema=get_schema())
    except jsonschema.ValidationError as exc:
        location = _location(exc)
        message = "Caption JSON does not match schema at {}: {}".format(location, exc.message)
        if error is ParseFailure:
            raise ParseFailure(message, field=location) from exc
        raise error(message) from exc


def validate_style(style: CaptionStyle) -> None:
    """Check a style against the schema's style definition.

    Raises:
        ValidationFailure: If a field is out of range or badly formed
            (for example a color that is not ``#RRGGBB`` or ``#RRGGBBAA``).
    """
    schema = get_schema()
    style_schema = dict(schema["$defs"]["style"])
    style_schema["$schema"] = schema["$schema"]
    style_schema["$defs"] = schema["$defs"]
    try:
        jsonschema.validate(instance=style.to_dict(), schema=style_schema)
    except jsonschema.ValidationError as exc:
        raise ValidationFailure(
            "Invalid caption style at {}: {}".format(_location(exc), exc.message)
        ) from exc


class JSONCodec(BaseCodec):
    """Codec for the lossless caption JSON format."""

    extension = ".json"
    media_type = "application/json"

    @property
    def name(self) -> str:
        return "Caption JSON"

    def parse(self, text: str) -> List[Caption]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseFailure("Invalid JSON: {}".format(exc)) from exc

        _validate(data)

        captions: List[Caption] = []
        for record in data:
            caption = Caption.from_dict(record)
            caption.id = provisional_id(len(captions))
            captions.append(caption)
        return captions

    def format(self, captions: Sequence[Caption]) -> str:
        output = [caption.to_dict() for caption in captions]
        _validate(output, error=ValidationFailure)
        return json.dumps(output, indent=2, ensure_ascii=False)
