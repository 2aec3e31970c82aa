"""Structured configuration carried by directive comments.

Two directives exist:

`@codeblock-config`
: Document-level configuration. Optional keys are `outDir`, `prefix`, and
  `postfix`.

`@codeblock`
: Per-block annotation. The body is either a bare filename token, shorthand
  for `file: <token>`, or a mapping with optional keys `file`, `prefix`,
  `postfix`, `skip`, `replace`, and `additionalFiles`.

Bodies are decoded with PyYAML so block scalars (`prefix: |`) keep their
embedded newlines and their indentation relative to themselves. The decoded
mapping is validated against a closed set of fields: unknown keys, wrong value
types, and non-mapping bodies raise :class:`DirectiveDecodeError`.

`replace` entries accept three shapes, applied in declared order as literal,
every-occurrence substitutions:

```yaml
replace:
  - ["PLACEHOLDER", "42"]
  - find: "console.log"
    with: "log"
  - "// removed"
```
"""

from __future__ import annotations

from collections.abc import Mapping
import textwrap
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
import yaml

from .exceptions import DirectiveDecodeError


__all__ = [
    "AdditionalFile",
    "Annotation",
    "CodeblockConfig",
    "ReplaceRule",
    "decode_annotation",
    "decode_config",
]


def _scalar_text(value: Any) -> Any:
    """Render YAML scalars that were not written as strings back to text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ReplaceRule(BaseModel):
    """Literal substitution applied to a block's code."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    find: str
    replacement: str = Field(default="", alias="with")

    @model_validator(mode="before")
    @classmethod
    def _coerce_shape(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"find": value}
        if isinstance(value, (list, tuple)):
            if len(value) == 1:
                return {"find": value[0]}
            if len(value) == 2:
                return {"find": value[0], "with": value[1]}
            raise ValueError("replace pairs must contain exactly two entries")
        return value

    @field_validator("find", "replacement", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return _scalar_text(value)

    @field_validator("find")
    @classmethod
    def _require_find(cls, value: str) -> str:
        if not value:
            raise ValueError("replace 'find' must not be empty")
        return value

    def apply(self, text: str) -> str:
        return text.replace(self.find, self.replacement)


class AdditionalFile(BaseModel):
    """Literal sibling file declared by a block annotation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    suffix: str
    content: str = ""

    @field_validator("suffix", "content", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _scalar_text(value)

    @field_validator("suffix")
    @classmethod
    def _require_suffix(cls, value: str) -> str:
        if not value:
            raise ValueError("additionalFiles entry requires a non-empty 'suffix'")
        return value


class Annotation(BaseModel):
    """Per-block settings decoded from an ``@codeblock`` directive."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    file: str | None = None
    prefix: str | None = None
    postfix: str | None = None
    skip: bool = False
    replace: tuple[ReplaceRule, ...] = ()
    additional_files: tuple[AdditionalFile, ...] = Field(default=(), alias="additionalFiles")

    @field_validator("file", mode="before")
    @classmethod
    def _coerce_file(cls, value: Any) -> Any:
        value = _scalar_text(value)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("'file' must not be empty")
        return value

    @field_validator("prefix", "postfix", mode="before")
    @classmethod
    def _coerce_wrapper(cls, value: Any) -> Any:
        return _scalar_text(value)

    @field_validator("replace", "additional_files", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    def apply_replacements(self, code: str) -> str:
        """Run every replace rule over ``code`` in declared order."""
        for rule in self.replace:
            code = rule.apply(code)
        return code


class CodeblockConfig(BaseModel):
    """Document-level settings decoded from an ``@codeblock-config`` directive."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    out_dir: str | None = Field(default=None, alias="outDir")
    prefix: str | None = None
    postfix: str | None = None

    @field_validator("out_dir", "prefix", "postfix", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _scalar_text(value)


def _is_bare_token(text: str) -> bool:
    stripped = text.strip()
    return bool(stripped) and not any(ch.isspace() for ch in stripped)


def _load_mapping(body: str, *, shorthand_key: str | None = None) -> dict[str, Any]:
    """Decode a directive body into a mapping, honouring the bare-token shorthand."""
    text = textwrap.dedent(body).strip("\n")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        if shorthand_key is not None and _is_bare_token(text):
            return {shorthand_key: text.strip()}
        problem = getattr(exc, "problem", None) or str(exc).splitlines()[0]
        raise DirectiveDecodeError(f"Invalid directive body: {problem}") from exc
    if isinstance(loaded, Mapping):
        return dict(loaded)
    if shorthand_key is not None and _is_bare_token(text):
        return {shorthand_key: text.strip()}
    if loaded is None:
        return {}
    raise DirectiveDecodeError("Directive body must be a filename or a key/value mapping.")


def _describe_validation_error(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        if error.get("type") == "extra_forbidden":
            problems.append(f"unknown key '{location}'")
            continue
        message = str(error.get("msg", "invalid value"))
        message = message.removeprefix("Value error, ")
        problems.append(f"{location}: {message}" if location else message)
    return "; ".join(problems)


def decode_annotation(body: str) -> Annotation:
    """Decode an ``@codeblock`` body into an :class:`Annotation`."""
    payload = _load_mapping(body, shorthand_key="file")
    try:
        return Annotation.model_validate(payload)
    except ValidationError as exc:
        raise DirectiveDecodeError(
            f"Invalid @codeblock annotation: {_describe_validation_error(exc)}"
        ) from exc


def decode_config(body: str) -> CodeblockConfig:
    """Decode an ``@codeblock-config`` body into a :class:`CodeblockConfig`."""
    payload = _load_mapping(body)
    try:
        return CodeblockConfig.model_validate(payload)
    except ValidationError as exc:
        raise DirectiveDecodeError(
            f"Invalid @codeblock-config: {_describe_validation_error(exc)}"
        ) from exc
