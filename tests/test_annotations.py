from __future__ import annotations

import textwrap

import pytest

from codeblock_extractor.core.annotations import (
    AdditionalFile,
    Annotation,
    CodeblockConfig,
    ReplaceRule,
    decode_annotation,
    decode_config,
)
from codeblock_extractor.core.exceptions import DirectiveDecodeError


def test_bare_token_is_file_shorthand() -> None:
    annotation = decode_annotation(" counter.tsx ")

    assert annotation.file == "counter.tsx"
    assert annotation.skip is False
    assert annotation.replace == ()


def test_inline_mapping_body() -> None:
    annotation = decode_annotation(" file: test.tsx ")

    assert annotation.file == "test.tsx"


def test_empty_body_is_a_continuation() -> None:
    assert decode_annotation("  ") == Annotation()


def test_block_scalars_keep_relative_indentation() -> None:
    body = textwrap.dedent(
        """\
        file: component.tsx
        prefix: |
          import React from 'react';
          function wrap() {
            return 1;
          }
        postfix: |
          export default App;
        """
    )

    annotation = decode_annotation(body)

    assert annotation.prefix == (
        "import React from 'react';\nfunction wrap() {\n  return 1;\n}\n"
    )
    assert annotation.postfix == "export default App;\n"


def test_body_indented_as_a_whole_is_dedented() -> None:
    body = "  file: a.ts\n  skip: true\n"

    annotation = decode_annotation(body)

    assert annotation.file == "a.ts"
    assert annotation.skip is True


def test_replace_accepts_pairs_mappings_and_bare_strings() -> None:
    body = textwrap.dedent(
        """\
        file: example.tsx
        replace:
          - ["PLACEHOLDER", "42"]
          - find: "console.log"
            with: "log"
          - "// strip me"
        """
    )

    annotation = decode_annotation(body)

    assert annotation.replace == (
        ReplaceRule(find="PLACEHOLDER", replacement="42"),
        ReplaceRule(find="console.log", replacement="log"),
        ReplaceRule(find="// strip me", replacement=""),
    )


def test_replace_coerces_numeric_scalars() -> None:
    annotation = decode_annotation("replace:\n  - [PLACEHOLDER, 42]\n")

    assert annotation.replace[0].replacement == "42"


def test_replacements_apply_in_order_to_every_occurrence() -> None:
    annotation = Annotation(
        replace=(
            ReplaceRule(find="A", replacement="B"),
            ReplaceRule(find="B", replacement="C"),
        )
    )

    assert annotation.apply_replacements("A A B") == "C C C"


def test_additional_files_are_decoded() -> None:
    body = textwrap.dedent(
        """\
        file: counter.tsx
        additionalFiles:
          - suffix: .spec.tsx
            content: |
              import { test } from '@playwright/test';
              test('works', () => {});
        """
    )

    annotation = decode_annotation(body)

    assert annotation.additional_files == (
        AdditionalFile(
            suffix=".spec.tsx",
            content="import { test } from '@playwright/test';\ntest('works', () => {});\n",
        ),
    )


@pytest.mark.parametrize(
    ("body", "fragment"),
    [
        ("file: a.ts\ncolour: red\n", "unknown key 'colour'"),
        ("skip: [1, 2]\n", "skip"),
        ("additionalFiles:\n  - content: x\n", "suffix"),
        ("additionalFiles:\n  - suffix: ''\n    content: x\n", "non-empty 'suffix'"),
        ("replace:\n  - [a, b, c]\n", "exactly two entries"),
        ("replace:\n  - ''\n", "must not be empty"),
        ("file: ''\n", "must not be empty"),
    ],
)
def test_invalid_annotation_bodies(body: str, fragment: str) -> None:
    with pytest.raises(DirectiveDecodeError) as excinfo:
        decode_annotation(body)

    assert fragment in str(excinfo.value)


def test_multiple_words_are_not_a_filename() -> None:
    with pytest.raises(DirectiveDecodeError):
        decode_annotation(" two words ")


def test_yaml_syntax_error_is_reported() -> None:
    with pytest.raises(DirectiveDecodeError) as excinfo:
        decode_annotation("file: [unclosed\nskip: true\n")

    assert "Invalid directive body" in str(excinfo.value)


def test_config_uses_camel_case_keys() -> None:
    config = decode_config("outDir: custom-out\nprefix: |\n  // header\n")

    assert config == CodeblockConfig(out_dir="custom-out", prefix="// header\n")


def test_config_rejects_bare_tokens_and_unknown_keys() -> None:
    with pytest.raises(DirectiveDecodeError):
        decode_config(" .examples ")
    with pytest.raises(DirectiveDecodeError) as excinfo:
        decode_config("file: a.ts\n")

    assert "unknown key 'file'" in str(excinfo.value)


@pytest.mark.parametrize("token", ["null", "~", "true", "42"])
def test_bare_tokens_yaml_would_read_as_scalars_are_file_names(token: str) -> None:
    assert decode_annotation(f" {token} ").file == token


def test_null_config_body_is_empty() -> None:
    assert decode_config(" null ") == CodeblockConfig()
