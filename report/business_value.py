##########################################################################################
#
# Module: report/business_value.py
#
# Description: Extraction of the "Business value" section from flattened
#              ticket description text.
#
#              The extraction is a text heuristic: it does not know which
#              document element held the label, so a stray "Business value" or
#              "Customer value" in earlier prose can produce a wrong result.
#
# Author: Cornelis Networks
#
##########################################################################################

import re
from dataclasses import dataclass
from typing import Union

NO_CONTENT = 'No content found'
PLACEHOLDER = '<>'

BUSINESS_VALUE_PATTERN = re.compile(r'Business value\s*(.*?)\s*Customer value', re.DOTALL)


@dataclass(frozen=True)
class Found:
    '''Business value text that was present and filled in.'''
    content: str

    def __str__(self):
        return self.content


class _NotFound:
    '''Sentinel for a missing, empty or placeholder business value.'''
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'NOT_FOUND'

    def __str__(self):
        return NO_CONTENT

    def __bool__(self):
        return False


NOT_FOUND = _NotFound()

BusinessValueResult = Union[Found, _NotFound]


def extract_business_value(flattened_text: str) -> BusinessValueResult:
    '''
    Isolate the text between the first "Business value" label and the
    following "Customer value" label.

    Input:
        flattened_text: Plain text produced by adf.flatten().

    Output:
        Found(content) with surrounding whitespace trimmed, or NOT_FOUND when
        the labels are missing, the section is empty, or it still contains the
        "<>" template placeholder.
    '''
    if not flattened_text:
        return NOT_FOUND

    match = BUSINESS_VALUE_PATTERN.search(flattened_text)
    if not match:
        return NOT_FOUND

    content = match.group(1).strip()
    if not content or PLACEHOLDER in content:
        return NOT_FOUND

    return Found(content)
