##########################################################################################
#
# Module: report/export.py
#
# Description: Dump the business value report to CSV, JSON or Excel.
#
# Author: Cornelis Networks
#
##########################################################################################

import csv
import json
import logging
import os
import sys
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from report.tickets import BusinessValueGroup, Ticket

# Logging config - follows jira_business_value.py pattern
log = logging.getLogger(os.path.basename(sys.argv[0]))

DUMP_FORMATS = ('csv', 'json', 'excel')

TICKET_FIELDS = ['key', 'title', 'business_value']


def output_path_for(dump_file: str, dump_format: str) -> str:
    '''
    Append the extension for the dump format unless already present.
    Excel uses .xlsx rather than .excel.
    '''
    ext = 'xlsx' if dump_format == 'excel' else dump_format
    if dump_file.endswith(f'.{ext}'):
        return dump_file
    return f'{dump_file}.{ext}'


def _write_csv(tickets: List[Ticket], output_path: str) -> None:
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=TICKET_FIELDS)
        writer.writeheader()
        for ticket in tickets:
            writer.writerow({
                'key': ticket.key,
                'title': ticket.title,
                'business_value': ticket.business_value_cell,
            })


def _write_json(tickets: List[Ticket], groups: List[BusinessValueGroup], output_path: str) -> None:
    data = {
        'tickets': [t.to_dict() for t in tickets],
        'groups': [g.to_dict() for g in groups],
    }
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _write_excel(tickets: List[Ticket], groups: List[BusinessValueGroup], output_path: str,
                 jira_url: Optional[str] = None) -> None:
    '''
    Write both report tables to an Excel workbook using openpyxl.

    Ticket key cells are rendered as clickable Jira hyperlinks when a base URL
    is known (display text is the ticket key, the browse URL behind it).
    '''
    wb = Workbook()
    ws = wb.active
    ws.title = 'Tickets'

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    link_font = Font(color='0563C1', underline='single')
    wrap = Alignment(wrap_text=True, vertical='top')
    base_url = jira_url.rstrip('/') if jira_url else None

    # ---------------------------------------------------------------
    # Sheet 1: one row per ticket
    # ---------------------------------------------------------------
    ws.append(['Issue Number', 'Title', 'Business Value'])
    for ticket in tickets:
        ws.append([ticket.key, ticket.title, ticket.business_value_cell])
        if base_url and ticket.key:
            cell = ws.cell(row=ws.max_row, column=1)
            cell.hyperlink = f'{base_url}/browse/{ticket.key}'
            cell.font = link_font

    # ---------------------------------------------------------------
    # Sheet 2: grouped by business value
    # ---------------------------------------------------------------
    ws_groups = wb.create_sheet('Business Value')
    ws_groups.append(['Business Value', 'Ticket Numbers'])
    for group in groups:
        ws_groups.append([group.business_value, ', '.join(group.keys)])

    for sheet, widths in ((ws, (18, 50, 80)), (ws_groups, (80, 40))):
        for cell in sheet[1]:
            cell.font = header_font
            cell.fill = header_fill
        for row in sheet.iter_rows(min_row=2):
            for cell in row:
                cell.alignment = wrap
        for index, width in enumerate(widths):
            sheet.column_dimensions[chr(ord('A') + index)].width = width
        sheet.freeze_panes = 'A2'

    wb.save(output_path)


def dump_report(tickets: List[Ticket], groups: List[BusinessValueGroup], dump_file: str,
                dump_format: str = 'csv', jira_url: Optional[str] = None) -> str:
    '''
    Write the report to a file in the specified format.

    Input:
        tickets: Tickets in display order.
        groups: Business value groups in display order.
        dump_file: Output filename (extension optional).
        dump_format: 'csv', 'json' or 'excel'.
        jira_url: Base URL used for Excel hyperlinks.

    Output:
        Path of the written file.

    Raises:
        ValueError: If dump_format is not supported.
    '''
    log.debug(f'Entering dump_report(tickets_count={len(tickets)}, groups_count={len(groups)}, dump_file={dump_file}, dump_format={dump_format})')
    if dump_format not in DUMP_FORMATS:
        raise ValueError(f'Unsupported dump format: {dump_format}. Use one of: {", ".join(DUMP_FORMATS)}')

    output_path = output_path_for(dump_file, dump_format)

    if dump_format == 'csv':
        _write_csv(tickets, output_path)
    elif dump_format == 'json':
        _write_json(tickets, groups, output_path)
    else:
        _write_excel(tickets, groups, output_path, jira_url)

    log.info(f'Wrote {len(tickets)} tickets to: {output_path}')
    return output_path
