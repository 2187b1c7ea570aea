"""
tests/test_adf_flattener.py
Unit tests for adf/nodes.py and adf/flattener.py.
"""

import pytest

from adf import (
    ContainerNode,
    MalformedDocument,
    TextNode,
    UnknownNode,
    flatten,
    parse_node,
)
from helpers import doc, paragraph, text


def _nested(depth, leaf='deep'):
    node = text(leaf)
    for _ in range(depth):
        node = {'type': 'paragraph', 'content': [node]}
    return node


def test_parse_node_classifies_text_container_and_unknown():
    node = parse_node(paragraph(text('a'), {'type': 'hardBreak'}, {'content': [text('x')]}))

    assert isinstance(node, ContainerNode)
    assert node.type == 'paragraph'
    assert node.children == [TextNode('a'), UnknownNode('hardBreak'), UnknownNode()]


def test_parse_node_text_without_string_payload_is_empty_leaf():
    assert parse_node({'type': 'text'}) == TextNode(None)
    assert parse_node({'type': 'text', 'text': 42}) == TextNode(None)


def test_flatten_empty_inputs_yield_empty_string():
    assert flatten(None) == ''
    assert flatten({}) == ''
    assert flatten({'type': 'doc'}) == ''
    assert flatten(doc()) == ''
    assert flatten([]) == ''


def test_flatten_nodes_without_text_or_content_yield_empty_string():
    assert flatten({'type': 'rule'}) == ''
    assert flatten([{'type': 'rule'}, {'type': 'hardBreak'}]) == '\n'


def test_flatten_single_text_leaf_is_unmodified():
    assert flatten(text('  padded value  ')) == '  padded value  '
    assert flatten(TextNode('plain')) == 'plain'


def test_flatten_joins_top_level_items_with_newline_and_concatenates_nested():
    nodes = [text('A'), paragraph(text('B'), text('C'))]

    assert flatten(nodes) == 'A\nBC'
    assert flatten(doc(*nodes)) == 'A\nBC'


def test_flatten_preserves_document_order_across_nesting():
    document = doc(
        paragraph(text('one '), {'type': 'strong', 'content': [text('two ')]}, text('three')),
        {'type': 'bulletList', 'content': [
            {'type': 'listItem', 'content': [paragraph(text('x'))]},
            {'type': 'listItem', 'content': [paragraph(text('y'))]},
        ]},
    )

    assert flatten(document) == 'one two three\nxy'


def test_flatten_recurses_into_unknown_container_types():
    document = doc({'type': 'someFutureNode', 'content': [text('kept')]})

    assert flatten(document) == 'kept'


def test_flatten_skips_text_nodes_without_text():
    assert flatten(doc(paragraph(text('a'), {'type': 'text'}, text('b')))) == 'ab'


def test_flatten_returns_plain_string_descriptions_unchanged():
    assert flatten('Business value\nplain\nCustomer value') == 'Business value\nplain\nCustomer value'


def test_flatten_is_idempotent_and_does_not_mutate_input():
    document = doc(paragraph(text('A')), paragraph(text('B'), text('C')))
    snapshot = repr(document)

    first = flatten(document)
    second = flatten(document)

    assert first == second == 'A\nBC'
    assert repr(document) == snapshot


def test_flatten_accepts_typed_nodes():
    nodes = [TextNode('A'), ContainerNode('paragraph', [TextNode('B'), UnknownNode(), TextNode('C')])]

    assert flatten(nodes) == 'A\nBC'


def test_flatten_within_depth_limit():
    assert flatten(doc(_nested(10)), max_depth=10) == 'deep'


def test_flatten_beyond_depth_limit_raises_malformed_document():
    with pytest.raises(MalformedDocument):
        flatten(doc(_nested(11)), max_depth=10)


def test_flatten_very_deep_tree_raises_instead_of_overflowing():
    with pytest.raises(MalformedDocument) as exc_info:
        flatten(doc(_nested(5000)))

    assert 'maximum depth of 1000' in str(exc_info.value)


def test_flatten_cyclic_tree_raises_malformed_document():
    node = {'type': 'paragraph', 'content': []}
    node['content'].append(node)

    with pytest.raises(MalformedDocument):
        flatten(doc(node))


def test_flatten_typed_tree_beyond_depth_limit_raises():
    node = TextNode('x')
    for _ in range(6):
        node = ContainerNode('paragraph', [node])

    with pytest.raises(MalformedDocument):
        flatten(node, max_depth=5)


def test_malformed_document_is_a_value_error_with_message():
    error = MalformedDocument('too deep')

    assert isinstance(error, ValueError)
    assert error.message == 'Malformed document: too deep'
