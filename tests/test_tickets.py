"""
tests/test_tickets.py
Unit tests for report/tickets.py ticket assembly and grouping.
"""

from report.business_value import NOT_FOUND, Found
from report.tickets import (
    BusinessValueGroup,
    Ticket,
    group_by_business_value,
    ticket_from_issue,
    tickets_from_issues,
)
from helpers import business_value_doc, doc, issue, paragraph, text


def _deep_description(depth):
    node = text('x')
    for _ in range(depth):
        node = paragraph(node)
    return doc(node)


def test_ticket_from_issue_extracts_business_value():
    ticket = ticket_from_issue(issue('PROJ-1', 'Login page', business_value_doc('Fewer lockouts')))

    assert ticket == Ticket('PROJ-1', 'Login page', Found('Fewer lockouts'))
    assert ticket.business_value_cell == 'Fewer lockouts'


def test_ticket_from_issue_handles_missing_fields():
    assert ticket_from_issue({}) == Ticket('', '', NOT_FOUND)
    assert ticket_from_issue({'key': 'PROJ-2', 'fields': {'summary': 'No description', 'description': None}}) \
        == Ticket('PROJ-2', 'No description', NOT_FOUND)


def test_ticket_without_business_value_shows_sentinel():
    ticket = ticket_from_issue(issue('PROJ-3', 'Placeholder', business_value_doc('<>')))

    assert ticket.business_value is NOT_FOUND
    assert ticket.business_value_cell == 'No content found'


def test_malformed_description_sets_error_marker():
    ticket = ticket_from_issue(issue('PROJ-4', 'Deep', _deep_description(20)), max_depth=5)

    assert ticket.error == 'malformed description'
    assert ticket.business_value is NOT_FOUND
    assert ticket.business_value_cell == 'Error: malformed description'
    assert ticket.business_value_cell != 'No content found'


def test_malformed_ticket_does_not_stop_the_batch():
    issues = [
        issue('PROJ-1', 'First', business_value_doc('Value A')),
        issue('PROJ-2', 'Broken', _deep_description(20)),
        issue('PROJ-3', 'Third', business_value_doc('Value B')),
    ]

    tickets = tickets_from_issues(issues, max_depth=5)

    assert [t.key for t in tickets] == ['PROJ-1', 'PROJ-2', 'PROJ-3']
    assert tickets[0].business_value == Found('Value A')
    assert tickets[1].error == 'malformed description'
    assert tickets[2].business_value == Found('Value B')


def test_group_by_business_value_keeps_first_seen_order():
    tickets = [
        Ticket('PROJ-1', 'a', Found('Speed')),
        Ticket('PROJ-2', 'b', Found('Cost')),
        Ticket('PROJ-3', 'c', Found('Speed')),
    ]

    assert group_by_business_value(tickets) == [
        BusinessValueGroup('Speed', ['PROJ-1', 'PROJ-3']),
        BusinessValueGroup('Cost', ['PROJ-2']),
    ]


def test_group_by_business_value_skips_not_found_and_errors():
    tickets = [
        Ticket('PROJ-1', 'a', NOT_FOUND),
        Ticket('PROJ-2', 'b', error='malformed description'),
        Ticket('PROJ-3', 'c', Found('Speed')),
    ]

    assert group_by_business_value(tickets) == [BusinessValueGroup('Speed', ['PROJ-3'])]


def test_to_dict_reports_cell_text_and_status():
    assert Ticket('PROJ-1', 'a', Found('Speed')).to_dict() == {
        'key': 'PROJ-1',
        'title': 'a',
        'business_value': 'Speed',
        'found': True,
        'error': None,
    }
    assert BusinessValueGroup('Speed', ['PROJ-1']).to_dict() == {
        'business_value': 'Speed',
        'keys': ['PROJ-1'],
    }
