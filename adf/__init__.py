##########################################################################################
#
# Module: adf
#
# Description: Atlassian Document Format (ADF) helpers: typed node model and
#              plain-text flattening of ticket descriptions.
#
# Author: Cornelis Networks
#
##########################################################################################

from adf.nodes import (
    DEFAULT_MAX_DEPTH,
    ContainerNode,
    MalformedDocument,
    RichNode,
    TextNode,
    UnknownNode,
    parse_node,
    parse_nodes,
)
from adf.flattener import flatten, flatten_node, iter_text

__all__ = [
    'DEFAULT_MAX_DEPTH',
    'ContainerNode',
    'MalformedDocument',
    'RichNode',
    'TextNode',
    'UnknownNode',
    'parse_node',
    'parse_nodes',
    'flatten',
    'flatten_node',
    'iter_text',
]
