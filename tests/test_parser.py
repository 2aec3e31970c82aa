from __future__ import annotations

import textwrap

from codeblock_extractor.core.diagnostics import DiagnosticKind, Severity
from codeblock_extractor.core.documents import (
    CodeBlockNode,
    ConfigNode,
    TextNode,
    get_annotated_code_blocks,
    print_document,
)
from codeblock_extractor.core.parser import parse
from codeblock_extractor.core.positions import Position, Range


def test_parses_config_directive() -> None:
    markdown = textwrap.dedent(
        """
        <!-- @codeblock-config
        outDir: custom-out
        -->

        # Example

        <!-- @codeblock file: test.tsx -->
        ```tsx
        const x = 1;
        ```
        """
    )

    result = parse(markdown, "/test/README.md")

    assert result.errors == []
    assert result.document.config is not None
    assert result.document.config.out_dir == "custom-out"
    annotated = get_annotated_code_blocks(result.document)
    assert len(annotated) == 1
    assert annotated[0].annotation is not None
    assert annotated[0].annotation.file == "test.tsx"
    assert annotated[0].language == "tsx"
    assert annotated[0].code == "const x = 1;"


def test_tracks_block_ranges() -> None:
    markdown = "# Title\n\n<!-- @codeblock test.tsx -->\n```tsx\nconst x = 1;\n```\n"

    document = parse(markdown, "/test/README.md").document
    (block,) = get_annotated_code_blocks(document)

    assert block.range == Range(Position(3, 1), Position(6, 4))
    assert block.annotation_range == Range(Position(3, 1), Position(3, 29))
    assert block.code_range == Range(Position(5, 1), Position(5, 13))
    assert block.code_line_count == 1


def test_nodes_partition_the_document() -> None:
    markdown = textwrap.dedent(
        """\
        # Title

        <!-- @codeblock-config
        outDir: out
        -->

        ```sh
        echo plain
        ```

        <!-- @codeblock a.ts -->

        ```ts
        const a = 1;
        ```
        trailing text
        """
    )

    document = parse(markdown, "doc.md").document

    assert [type(node) for node in document.nodes] == [
        TextNode,
        ConfigNode,
        TextNode,
        CodeBlockNode,
        TextNode,
        CodeBlockNode,
        TextNode,
    ]
    lines = [(node.range.start.line, node.range.end.line) for node in document.nodes]
    assert lines == [(1, 2), (3, 5), (6, 6), (7, 9), (10, 10), (11, 15), (16, 17)]
    unannotated = document.nodes[3]
    assert isinstance(unannotated, CodeBlockNode)
    assert unannotated.annotation is None
    assert unannotated.annotation_range is None
    assert print_document(document) == markdown


def test_print_document_round_trips_malformed_input() -> None:
    markdown = "<!-- @codeblock\nfile: [oops\n-->\n```ts\nx\n```\n<!-- @codeblock dangling.ts -->\ntext"

    result = parse(markdown, "doc.md")

    assert print_document(result.document) == markdown
    assert print_document(parse("", "empty.md").document) == ""


def test_malformed_directive_degrades_to_text() -> None:
    markdown = textwrap.dedent(
        """\
        <!-- @codeblock
        file: a.ts
        colour: red
        -->
        ```ts
        const a = 1;
        ```
        """
    )

    result = parse(markdown, "doc.md")

    (error,) = result.errors
    assert error.kind is DiagnosticKind.MALFORMED_DIRECTIVE
    assert error.severity is Severity.ERROR
    assert "colour" in error.message
    assert error.range.start.line == 1
    assert error.range.end.line == 4
    assert isinstance(result.document.nodes[0], TextNode)
    assert result.document.nodes[0].text.startswith("<!-- @codeblock")
    assert get_annotated_code_blocks(result.document) == []
    assert len(result.document.code_blocks) == 1


def test_directive_without_fence_is_dangling() -> None:
    markdown = "<!-- @codeblock a.ts -->\nSome prose.\n\n```ts\nconst a = 1;\n```\n"

    result = parse(markdown, "doc.md")

    (error,) = result.errors
    assert error.kind is DiagnosticKind.DANGLING_ANNOTATION
    assert error.range.start.line == 1
    assert get_annotated_code_blocks(result.document) == []


def test_blank_lines_between_directive_and_fence_are_allowed() -> None:
    markdown = "<!-- @codeblock a.ts -->\n\n\n```ts\nconst a = 1;\n```"

    result = parse(markdown, "doc.md")

    assert result.errors == []
    (block,) = get_annotated_code_blocks(result.document)
    assert block.range.start.line == 1
    assert block.code_range.start.line == 5


def test_directive_at_end_of_document_is_dangling() -> None:
    result = parse("text\n<!-- @codeblock a.ts -->", "doc.md")

    assert [error.kind for error in result.errors] == [DiagnosticKind.DANGLING_ANNOTATION]


def test_only_first_config_is_effective() -> None:
    markdown = textwrap.dedent(
        """\
        <!-- @codeblock-config
        outDir: first
        -->
        <!-- @codeblock-config
        outDir: second
        -->
        <!-- @codeblock-config outDir: third -->
        """
    )

    result = parse(markdown, "doc.md")

    assert result.document.config is not None
    assert result.document.config.out_dir == "first"
    assert len(result.document.config_nodes) == 3
    assert [error.kind for error in result.errors] == [
        DiagnosticKind.DUPLICATE_CONFIG,
        DiagnosticKind.DUPLICATE_CONFIG,
    ]
    assert all(error.severity is Severity.WARNING for error in result.errors)
    assert [error.range.start.line for error in result.errors] == [4, 7]


def test_directives_inside_fences_are_code() -> None:
    markdown = textwrap.dedent(
        """\
        <!-- @codeblock example.md -->
        ````md
        <!-- @codeblock-config
        outDir: nested
        -->
        ````
        """
    )

    result = parse(markdown, "doc.md")

    assert result.errors == []
    assert result.document.config is None
    (block,) = get_annotated_code_blocks(result.document)
    assert block.code == "<!-- @codeblock-config\noutDir: nested\n-->"


def test_skip_and_prefix_annotations() -> None:
    markdown = textwrap.dedent(
        """\
        <!-- @codeblock
        file: component.tsx
        prefix: |
          import React from 'react';
        postfix: |
          export default App;
        -->
        ```tsx
        function App() { return <div />; }
        ```

        <!-- @codeblock
        skip: true
        -->
        ```tsx
        // This is just for documentation
        ```
        """
    )

    document = parse(markdown, "/test/README.md").document
    first, second = get_annotated_code_blocks(document)

    assert first.annotation is not None
    assert first.annotation.prefix == "import React from 'react';\n"
    assert first.annotation.postfix == "export default App;\n"
    assert second.is_skipped


def test_empty_code_block_has_no_code_lines() -> None:
    document = parse("<!-- @codeblock a.ts -->\n```ts\n```\n", "doc.md").document

    (block,) = document.code_blocks
    assert block.code == ""
    assert block.code_line_count == 0
    assert not block.contains_code(Position(3, 1))
