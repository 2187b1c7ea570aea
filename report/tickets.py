##########################################################################################
#
# Module: report/tickets.py
#
# Description: Ticket assembly from Jira search results and grouping of
#              tickets by business value.
#
# Author: Cornelis Networks
#
##########################################################################################

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from adf import DEFAULT_MAX_DEPTH, MalformedDocument, flatten
from report.business_value import NOT_FOUND, BusinessValueResult, Found, extract_business_value

# Logging config - follows jira_business_value.py pattern
log = logging.getLogger(os.path.basename(sys.argv[0]))

ERROR_PREFIX = 'Error: '


@dataclass
class Ticket:
    '''
    One row of the detailed ticket table.
    '''
    key: str
    title: str
    business_value: BusinessValueResult = NOT_FOUND
    error: Optional[str] = None

    @property
    def business_value_cell(self) -> str:
        '''Text shown in the "Business Value" column.'''
        if self.error:
            return f'{ERROR_PREFIX}{self.error}'
        return str(self.business_value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'title': self.title,
            'business_value': self.business_value_cell,
            'found': isinstance(self.business_value, Found),
            'error': self.error,
        }


@dataclass
class BusinessValueGroup:
    '''One row of the grouped business value table.'''
    business_value: str
    keys: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'business_value': self.business_value, 'keys': list(self.keys)}


def ticket_from_issue(issue: Dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> Ticket:
    '''
    Build a Ticket from one entry of the search response "issues" array.

    A description that cannot be flattened does not raise; the ticket is
    returned with its error set so the rest of the batch is unaffected.

    Input:
        issue: Issue dict from the Jira REST API.
        max_depth: Maximum ADF nesting accepted for the description.

    Output:
        Ticket.
    '''
    key = issue.get('key') or ''
    fields = issue.get('fields') or {}
    title = fields.get('summary') or ''

    try:
        description = flatten(fields.get('description'), max_depth=max_depth)
    except MalformedDocument as e:
        log.warning(f'{key}: could not read description: {e.message}')
        return Ticket(key=key, title=title, error='malformed description')

    business_value = extract_business_value(description)
    log.debug(f'{key}: business value {business_value!r}')
    return Ticket(key=key, title=title, business_value=business_value)


def tickets_from_issues(issues: List[Dict[str, Any]], max_depth: int = DEFAULT_MAX_DEPTH) -> List[Ticket]:
    '''
    Build Tickets for every issue, in response order.
    '''
    log.debug(f'Entering tickets_from_issues(issues_count={len(issues)}, max_depth={max_depth})')
    tickets = [ticket_from_issue(issue, max_depth=max_depth) for issue in issues]

    failed = sum(1 for t in tickets if t.error)
    found = sum(1 for t in tickets if isinstance(t.business_value, Found))
    log.info(f'Processed {len(tickets)} tickets: {found} with business value, {failed} failed')
    return tickets


def group_by_business_value(tickets: List[Ticket]) -> List[BusinessValueGroup]:
    '''
    Group ticket keys by identical business value text.

    Tickets without a business value, and tickets whose extraction failed,
    are left out. Groups and the keys inside them keep first-seen order.
    '''
    groups: Dict[str, BusinessValueGroup] = {}
    for ticket in tickets:
        if ticket.error or not isinstance(ticket.business_value, Found):
            continue
        text = ticket.business_value.content
        groups.setdefault(text, BusinessValueGroup(business_value=text)).keys.append(ticket.key)
    return list(groups.values())
