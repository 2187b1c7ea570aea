##########################################################################################
#
# Module: adf/nodes.py
#
# Description: Typed node model for Atlassian Document Format (ADF) trees.
#              Raw JSON descriptions from the Jira REST API are converted into
#              TextNode / ContainerNode / UnknownNode values before traversal.
#
# Author: Cornelis Networks
#
##########################################################################################

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

DEFAULT_MAX_DEPTH = 1000


class MalformedDocument(ValueError):
    '''
    Exception raised when a document tree is nested deeper than the allowed
    bound (or contains a cycle).
    '''
    def __init__(self, message):
        self.message = f'Malformed document: {message}'
        super().__init__(self.message)


@dataclass
class TextNode:
    '''Leaf node carrying a text payload.'''
    text: Optional[str] = None
    type: str = 'text'


@dataclass
class ContainerNode:
    '''Any non-text node that carries an ordered list of children.'''
    type: str
    children: List['RichNode'] = field(default_factory=list)


@dataclass
class UnknownNode:
    '''Node without a usable type or children. Contributes no text.'''
    type: Optional[str] = None


RichNode = Union[TextNode, ContainerNode, UnknownNode]


def _classify(raw: Any) -> RichNode:
    '''
    Build a node for a single raw JSON value without touching its children.

    Input:
        raw: Value taken from an ADF "content" array (normally a dict).

    Output:
        TextNode, ContainerNode (with empty children) or UnknownNode.
    '''
    if not isinstance(raw, dict):
        return UnknownNode()

    node_type = raw.get('type')
    if not isinstance(node_type, str):
        return UnknownNode()

    if node_type == 'text':
        text = raw.get('text')
        return TextNode(text=text if isinstance(text, str) else None)

    if isinstance(raw.get('content'), list):
        return ContainerNode(type=node_type)

    return UnknownNode(type=node_type)


def parse_node(raw: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> RichNode:
    '''
    Convert a raw ADF node (nested dicts/lists from the JSON response) into
    the typed node model.

    Conversion walks the tree with an explicit stack so that a very deep or
    cyclic input fails with MalformedDocument rather than exhausting the
    interpreter stack.

    Input:
        raw: Raw node dict. Values of other types become UnknownNode.
        max_depth: Deepest nesting level accepted; the root is depth 0.

    Output:
        Root RichNode.

    Raises:
        MalformedDocument: If the tree nests deeper than max_depth.
    '''
    root = _classify(raw)
    stack = [(raw, root, 0)]

    while stack:
        raw_node, node, depth = stack.pop()
        if not isinstance(node, ContainerNode):
            continue

        if depth >= max_depth:
            raise MalformedDocument(f'nesting exceeds maximum depth of {max_depth}')

        for raw_child in raw_node['content']:
            child = _classify(raw_child)
            node.children.append(child)
            stack.append((raw_child, child, depth + 1))

    return root


def parse_nodes(raw_list: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> List[RichNode]:
    '''
    Convert a list of sibling raw nodes (e.g. a document's "content" array).

    A value that is not a list yields an empty list.
    '''
    if not isinstance(raw_list, list):
        return []
    return [parse_node(item, max_depth=max_depth) for item in raw_list]
