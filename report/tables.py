##########################################################################################
#
# Module: report/tables.py
#
# Description: Terminal tables for the business value report, rendered with rich.
#
# Author: Cornelis Networks
#
##########################################################################################

from typing import List

from rich import box
from rich.console import Console
from rich.table import Table

from report.tickets import BusinessValueGroup, Ticket

DEFAULT_TABLE_WIDTH = 100

TICKET_TABLE_TITLE = 'Detailed Ticket Information:'
GROUP_TABLE_TITLE = 'Grouped Business Value Information:'


def build_ticket_table(tickets: List[Ticket], width: int = DEFAULT_TABLE_WIDTH) -> Table:
    '''
    Build the per-ticket table: Issue Number, Title, Business Value.
    '''
    table = Table(box=box.ROUNDED, show_lines=True, width=width)
    table.add_column('Issue Number', no_wrap=True)
    table.add_column('Title', ratio=1)
    table.add_column('Business Value', ratio=2)

    for ticket in tickets:
        table.add_row(ticket.key, ticket.title, ticket.business_value_cell)
    return table


def build_group_table(groups: List[BusinessValueGroup], width: int = DEFAULT_TABLE_WIDTH) -> Table:
    '''
    Build the grouped table: Business Value, Ticket Numbers.
    '''
    table = Table(box=box.ROUNDED, show_lines=True, width=width)
    table.add_column('Business Value', ratio=2)
    table.add_column('Ticket Numbers', ratio=1)

    for group in groups:
        table.add_row(group.business_value, ', '.join(group.keys))
    return table


def render_table(table: Table, width: int = DEFAULT_TABLE_WIDTH) -> str:
    '''
    Render a table to a string so it can go through the normal output path.

    Markup, emoji codes and highlighting are disabled: cell text comes
    straight from ticket descriptions and must be printed verbatim.
    '''
    console = Console(width=width, color_system=None, highlight=False, markup=False, emoji=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get().rstrip('\n')
