##########################################################################################
#
# Module: report
#
# Description: Business value report: extraction, ticket assembly, tables
#              and file export.
#
# Author: Cornelis Networks
#
##########################################################################################

from report.business_value import (
    NO_CONTENT,
    NOT_FOUND,
    BusinessValueResult,
    Found,
    extract_business_value,
)
from report.tickets import (
    BusinessValueGroup,
    Ticket,
    group_by_business_value,
    ticket_from_issue,
    tickets_from_issues,
)
from report.tables import build_group_table, build_ticket_table, render_table
from report.export import DUMP_FORMATS, dump_report

__all__ = [
    'NO_CONTENT',
    'NOT_FOUND',
    'BusinessValueResult',
    'Found',
    'extract_business_value',
    'BusinessValueGroup',
    'Ticket',
    'group_by_business_value',
    'ticket_from_issue',
    'tickets_from_issues',
    'build_group_table',
    'build_ticket_table',
    'render_table',
    'DUMP_FORMATS',
    'dump_report',
]
