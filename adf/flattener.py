##########################################################################################
#
# Module: adf/flattener.py
#
# Description: Plain-text flattening of Atlassian Document Format (ADF) trees.
#
# Author: Cornelis Networks
#
##########################################################################################

import logging
import os
import sys
from typing import Any, Iterator, List

from adf.nodes import (
    DEFAULT_MAX_DEPTH,
    ContainerNode,
    MalformedDocument,
    TextNode,
    UnknownNode,
    RichNode,
    parse_node,
    parse_nodes,
)

# Logging config - follows jira_business_value.py pattern
log = logging.getLogger(os.path.basename(sys.argv[0]))

BLOCK_SEPARATOR = '\n'

_NODE_TYPES = (TextNode, ContainerNode, UnknownNode)


def iter_text(node: RichNode, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[str]:
    '''
    Yield the text payloads of a node tree in document (pre-order) order.

    Input:
        node: Root RichNode.
        max_depth: Deepest container nesting accepted; the root is depth 0.

    Output:
        Iterator of text fragments.

    Raises:
        MalformedDocument: If containers nest deeper than max_depth.
    '''
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()

        if isinstance(current, TextNode):
            if current.text is not None:
                yield current.text
        elif isinstance(current, ContainerNode):
            if depth >= max_depth:
                raise MalformedDocument(f'nesting exceeds maximum depth of {max_depth}')
            # Reversed so the first child is popped first
            for child in reversed(current.children):
                stack.append((child, depth + 1))


def flatten_node(node: RichNode, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    '''Concatenate every text fragment below a node with no separator.'''
    return ''.join(iter_text(node, max_depth=max_depth))


def _top_level_nodes(document: Any, max_depth: int) -> List[RichNode]:
    '''
    Normalise the accepted input shapes into a list of top-level nodes.
    '''
    if document is None:
        return []

    if isinstance(document, _NODE_TYPES):
        return [document]

    if isinstance(document, list):
        return [item if isinstance(item, _NODE_TYPES) else parse_node(item, max_depth=max_depth)
                for item in document]

    if isinstance(document, dict):
        # A document root ("type": "doc") contributes its content array as
        # the top level. Any other node dict is flattened as a single item.
        if document.get('type') == 'doc' or 'type' not in document:
            return parse_nodes(document.get('content'), max_depth=max_depth)
        return [parse_node(document, max_depth=max_depth)]

    log.debug(f'Unsupported document value of type {type(document).__name__}; treating as empty')
    return []


def flatten(document: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    '''
    Flatten an ADF description into plain text.

    Each top-level item is flattened by concatenating its text fragments
    directly, then the per-item strings are joined with a newline. Nested
    containers are not separated, so inline runs keep their original spacing.

    Input:
        document: One of
            - ADF document dict ({"type": "doc", "content": [...]})
            - list of sibling nodes (raw dicts or RichNode values)
            - a single node (raw dict or RichNode)
            - a plain string (returned unchanged)
            - None
        max_depth: Deepest container nesting accepted.

    Output:
        Flattened text. Empty input yields ''.

    Raises:
        MalformedDocument: If the tree nests deeper than max_depth.
    '''
    if isinstance(document, str):
        return document

    items = _top_level_nodes(document, max_depth)
    return BLOCK_SEPARATOR.join(flatten_node(item, max_depth=max_depth) for item in items)
