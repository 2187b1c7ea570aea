##########################################################################################
#
# Script name: jira_business_value.py
#
# Description: Business value report for Jira tickets. Fetches the tickets of a
#              sprint, or the tickets of a project moved to Done within a date
#              range, extracts the "Business value" section from each ticket
#              description and prints a per-ticket table and a table grouped by
#              business value.
#
# Author: John Macdonald
#
# Credentials:
#   This script uses Jira API tokens for authentication. On first run, if the
#   .env file does not exist and the variables are not already exported, you
#   are prompted for:
#      JIRA_BASE_URL   e.g. https://yourcompany.atlassian.net
#      JIRA_EMAIL      your Atlassian account email
#      JIRA_API_TOKEN  generated at https://id.atlassian.com/manage-profile/security/api-tokens
#   and the answers are written to .env.
#
#   NEVER commit credentials to version control.
#
##########################################################################################

import argparse
import logging
import sys
import os
from datetime import date, datetime

import requests

from config.settings import (
    DEFAULT_ENV_FILE,
    configure_logging,
    get_settings,
    load_env_file,
    needs_onboarding,
    onboard,
)
from report import (
    DUMP_FORMATS,
    build_group_table,
    build_ticket_table,
    dump_report,
    group_by_business_value,
    render_table,
    tickets_from_issues,
)
from report.tables import GROUP_TABLE_TITLE, TICKET_TABLE_TITLE

# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************
# Set global variables here and log.debug them below

SEARCH_ENDPOINT = '/rest/api/3/search/jql'
SEARCH_FIELDS = ['summary', 'description']
DATE_RANGE_FORMAT = '%Y/%m/%d'

MENU_OPTIONS = [
    'Select tickets based on sprint',
    'Select tickets based on date range',
    'Exit',
]

# Logging config
log = logging.getLogger(os.path.basename(sys.argv[0]))

# Output control - set by handle_args()
_quiet_mode = False
_show_jql = False
_file_handler = None


def output(message=''):
    '''
    Print user-facing output, respecting quiet mode.
    Always logs to file regardless of quiet mode.

    For tables and user-facing output:
    - stdout: Clean output without logger prefix (via print)
    - log file: Full logger format with timestamps (written directly to file handler)

    Input:
        message: String to output (default empty for blank line).

    Output:
        None; prints to stdout unless in quiet mode.
    '''
    # Log to file only (bypass stdout handler by writing directly to file handler)
    if message and _file_handler is not None:
        record = logging.LogRecord(
            name=log.name,
            level=logging.INFO,
            pathname=__file__,
            lineno=0,
            msg=f'OUTPUT: {message}',
            args=(),
            exc_info=None,
            func='output'
        )
        _file_handler.emit(record)

    # Only print to stdout if not in quiet mode (clean output)
    if not _quiet_mode:
        print(message)


# Store the last JQL query for display at end of operation
_last_jql = None

def show_jql(jql):
    '''
    Store the JQL query for display at end of operation if --show-jql flag is set.
    '''
    global _last_jql
    if _show_jql:
        _last_jql = jql
        log.debug(f'Stored JQL for end-of-operation display: {jql}')


def display_jql():
    '''
    Display the stored JQL query at end of operation.
    '''
    if _show_jql and _last_jql:
        output('')
        output('=' * 80)
        output('Equivalent JQL Query:')
        output('=' * 80)
        output(_last_jql)
        output('=' * 80)
        output('')


# ****************************************************************************************
# Exceptions
# ****************************************************************************************

class Error(Exception):
    '''
    Base class for exceptions in this module.
    '''
    pass

class JiraCredentialsError(Error):
    '''
    Exception raised when Jira credentials are missing or invalid.
    '''
    def __init__(self, message):
        self.message = f'Jira credentials error: {message}'
        super().__init__(self.message)

class JiraSearchError(Error):
    '''
    Exception raised when the Jira search request fails.
    '''
    def __init__(self, message):
        self.message = f'Jira search failed: {message}'
        super().__init__(self.message)


# ****************************************************************************************
# Functions
# ****************************************************************************************

def get_jira_credentials(settings=None):
    '''
    Retrieve Jira connection details from settings (environment / .env).

    Output:
        Tuple of (base_url, email, api_token) strings.

    Raises:
        JiraCredentialsError: If any value is missing.
    '''
    log.debug('Entering get_jira_credentials()')
    settings = settings or get_settings()

    if not settings.jira_base_url:
        raise JiraCredentialsError('JIRA_BASE_URL environment variable not set')
    if not settings.jira_email:
        raise JiraCredentialsError('JIRA_EMAIL environment variable not set')
    if not settings.jira_api_token:
        raise JiraCredentialsError('JIRA_API_TOKEN environment variable not set')

    log.debug(f'Retrieved credentials for: {settings.jira_email}')
    return settings.jira_base_url, settings.jira_email, settings.jira_api_token


def build_sprint_jql(sprint_id, sprint_field='cf[10010]'):
    '''
    Build the JQL for all tickets in a sprint, newest first.

    Raises:
        ValueError: If sprint_id is empty.
    '''
    sprint_id = (sprint_id or '').strip()
    if not sprint_id:
        raise ValueError('Sprint ID is required')
    return f'"{sprint_field}"={sprint_id} ORDER BY created DESC'


def parse_date_range(date_range):
    '''
    Parse a 'YYYY/MM/DD,YYYY/MM/DD' date range.

    Input:
        date_range: Start and end date separated by a comma.

    Output:
        Tuple of (start, end) strings, stripped, in the original format.

    Raises:
        ValueError: If the range does not have two valid dates.
    '''
    log.debug(f'Entering parse_date_range(date_range={date_range})')
    parts = (date_range or '').split(',')
    if len(parts) != 2:
        raise ValueError(f'Invalid date range: {date_range}. Usage: --date "YYYY/MM/DD,YYYY/MM/DD"')

    start_str, end_str = (p.strip() for p in parts)
    try:
        start_date = datetime.strptime(start_str, DATE_RANGE_FORMAT)
        end_date = datetime.strptime(end_str, DATE_RANGE_FORMAT)
    except ValueError as e:
        raise ValueError(f'Invalid date range: {date_range}. Expected YYYY/MM/DD,YYYY/MM/DD. Error: {e}')

    if end_date < start_date:
        raise ValueError(f'Invalid date range: {date_range}. End date is before start date')

    return start_str, end_str


def build_date_range_jql(date_range, project_key):
    '''
    Build the JQL for tickets of a project moved to Done within a date range.

    Raises:
        ValueError: If the project key is empty or the date range is invalid.
    '''
    project_key = (project_key or '').strip()
    if not project_key:
        raise ValueError('Project key is required')

    start, end = parse_date_range(date_range)
    return (f'project = "{project_key}" AND status CHANGED TO "Done" '
            f'DURING ("{start}", "{end}") ORDER BY created DESC')


def build_jql(sprint=None, date_range=None, project=None, sprint_field='cf[10010]'):
    '''
    Choose the query for the given options: sprint, or date range plus project.

    Raises:
        ValueError: If neither a sprint nor a date range with project is given.
    '''
    if sprint is not None:
        return build_sprint_jql(sprint, sprint_field)
    if date_range is not None and project is not None:
        return build_date_range_jql(date_range, project)
    raise ValueError('Invalid options provided. Use a sprint ID, or a date range with a project key')


def search_issues(jql, settings=None, limit=None):
    '''
    Run a JQL search and return the raw issues (single page).

    Input:
        jql: JQL query string.
        settings: Settings instance (uses global if not provided).
        limit: Maximum number of issues to request; defaults to settings.max_results.

    Output:
        List of issue dicts from the Jira API.

    Raises:
        JiraCredentialsError: If credentials are missing.
        JiraSearchError: If the request fails or the response is not usable.
    '''
    log.debug(f'Entering search_issues(jql={jql}, limit={limit})')
    settings = settings or get_settings()
    base_url, email, api_token = get_jira_credentials(settings)
    show_jql(jql)

    payload = {
        'jql': jql,
        'maxResults': limit or settings.max_results,
        'fields': SEARCH_FIELDS,
    }

    try:
        response = requests.post(
            f'{base_url}{SEARCH_ENDPOINT}',
            auth=(email, api_token),
            headers={
                'Content-Type': 'application/json',
                'Accept': 'application/json'
            },
            json=payload,
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        raise JiraSearchError(str(e))

    if response.status_code != 200:
        log.error(f'API request failed: {response.status_code} - {response.text}')
        raise JiraSearchError(f'{response.status_code} - {response.text}')

    try:
        data = response.json()
    except ValueError as e:
        raise JiraSearchError(f'response is not valid JSON: {e}')

    issues = data.get('issues') if isinstance(data, dict) else None
    if not isinstance(issues, list):
        raise JiraSearchError('response does not contain an "issues" list')

    if data.get('nextPageToken'):
        log.info(f'More results are available; only the first {len(issues)} are shown')

    log.debug(f'Retrieved {len(issues)} issues')
    return issues


def print_report(tickets, groups, width=100):
    '''
    Print the detailed ticket table and the grouped business value table.
    '''
    output(TICKET_TABLE_TITLE)
    output(render_table(build_ticket_table(tickets, width), width))
    output(GROUP_TABLE_TITLE)
    output(render_table(build_group_table(groups, width), width))


def fetch_and_display_tickets(sprint=None, date_range=None, project=None, settings=None,
                              limit=None, dump_file=None, dump_format='csv'):
    '''
    Fetch tickets for a sprint or a date range, and print the two report tables.

    Input:
        sprint: Sprint ID, or None.
        date_range: 'YYYY/MM/DD,YYYY/MM/DD', used with project when sprint is None.
        project: Project key for the date range query.
        settings: Settings instance (uses global if not provided).
        limit: Maximum number of tickets to request.
        dump_file: Output filename for the report, or None to skip.
        dump_format: 'csv', 'json' or 'excel'.

    Output:
        List of Ticket objects, in the order returned by Jira.

    Raises:
        ValueError: If the query options are invalid.
        JiraCredentialsError, JiraSearchError: If the search fails.
    '''
    log.debug(f'Entering fetch_and_display_tickets(sprint={sprint}, date_range={date_range}, project={project}, limit={limit}, dump_file={dump_file}, dump_format={dump_format})')
    settings = settings or get_settings()

    jql = build_jql(sprint, date_range, project, settings.sprint_field)
    log.info(f'Searching: {jql}')

    issues = search_issues(jql, settings, limit)
    tickets = tickets_from_issues(issues, max_depth=settings.max_depth)
    groups = group_by_business_value(tickets)

    print_report(tickets, groups, settings.table_width)

    if dump_file:
        dump_report(tickets, groups, dump_file, dump_format, jira_url=settings.jira_base_url)

    return tickets


# ****************************************************************************************
# Interactive menu
# ****************************************************************************************

def _prompt(prompt, message):
    return prompt(f'{message}: ').strip()


def select_tickets_based_on_sprint(settings=None, prompt=input, **kwargs):
    '''Ask for a sprint ID and show its tickets.'''
    sprint_id = _prompt(prompt, 'Enter Sprint ID')
    return fetch_and_display_tickets(sprint=sprint_id, settings=settings, **kwargs)


def select_tickets_based_on_date_range(settings=None, prompt=input, **kwargs):
    '''Ask for a date range and project key and show the matching tickets.'''
    date_range = _prompt(prompt, "Enter date range in the format 'YYYY/MM/DD,YYYY/MM/DD'")
    project_key = _prompt(prompt, 'Enter project key')
    return fetch_and_display_tickets(date_range=date_range, project=project_key,
                                     settings=settings, **kwargs)


def run_menu(settings=None, prompt=input, **kwargs):
    '''
    Loop over the action menu until Exit is chosen or input ends.

    An error for one query is reported and the menu continues.

    Input:
        settings: Settings instance (uses global if not provided).
        prompt: Function used to read user input.
        kwargs: limit / dump_file / dump_format passed to each query.
    '''
    log.debug('Entering run_menu()')
    actions = {
        '1': select_tickets_based_on_sprint,
        '2': select_tickets_based_on_date_range,
    }

    while True:
        output('')
        output('Please select an action')
        for index, option in enumerate(MENU_OPTIONS, start=1):
            output(f'  {index}. {option}')

        try:
            choice = _prompt(prompt, f'Choice [1-{len(MENU_OPTIONS)}] (default 1)') or '1'
        except EOFError:
            output('')
            break

        if choice == str(len(MENU_OPTIONS)):
            break

        action = actions.get(choice)
        if action is None:
            output(f'Invalid choice: {choice}')
            continue

        try:
            action(settings=settings, prompt=prompt, **kwargs)
        except EOFError:
            output('')
            break
        except (Error, ValueError) as e:
            message = getattr(e, 'message', str(e))
            log.error(message)
            output('ERROR: ' + message)


# ****************************************************************************************
# Argument handling
# ****************************************************************************************

def handle_args(argv=None):
    '''
    Parse CLI arguments and configure logging handlers.

    Input:
        argv: Argument list; defaults to sys.argv[1:].

    Output:
        argparse.Namespace containing parsed arguments.

    Side Effects:
        Loads the selected dotenv file and attaches file and stdout handlers
        to the module logger.
    '''
    parser = argparse.ArgumentParser(
        description='Fetch Jira tickets and report their business value',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Credentials Setup:
  On first run you are prompted for your Jira base URL, email and API token,
  which are saved to .env. You can also set them yourself:
    JIRA_BASE_URL="https://yourcompany.atlassian.net"
    JIRA_EMAIL="your.email@example.com"
    JIRA_API_TOKEN="your_api_token_here"

  Generate an API token at:
    https://id.atlassian.com/manage-profile/security/api-tokens

Examples:
  %(prog)s                                     Interactive menu
  %(prog)s --sprint 123                        Tickets in sprint 123
  %(prog)s --date "2024/01/01,2024/03/31" --project PROJ
                                               PROJ tickets moved to Done in Q1 2024
  %(prog)s --sprint 123 --dump-file sprint123 --dump-format excel
                                               Also write the report to sprint123.xlsx
  %(prog)s --sprint 123 --show-jql             Print the JQL used
        ''')
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        help='Enable verbose output to stdout.')
    parser.add_argument(
        '-q',
        '--quiet',
        action='store_true',
        help='Minimal stdout.')
    parser.add_argument(
        '--env',
        type=str,
        default=DEFAULT_ENV_FILE,
        metavar='FILE',
        help='Path to dotenv file to load (default: .env). Created by onboarding if missing.')
    parser.add_argument(
        '--sprint',
        type=str,
        metavar='ID',
        help='Sprint ID.')
    parser.add_argument(
        '--date',
        type=str,
        metavar='RANGE',
        help="Date range in the format 'YYYY/MM/DD,YYYY/MM/DD'.")
    parser.add_argument(
        '--project',
        type=str,
        metavar='KEY',
        help='Project key (used with --date).')
    parser.add_argument(
        '--limit',
        type=int,
        metavar='N',
        help='Maximum number of tickets to retrieve (default: JIRA_MAX_RESULTS or 100).')
    parser.add_argument(
        '--dump-file',
        type=str,
        metavar='FILE',
        dest='dump_file',
        help='Also write the report to FILE (extension added from --dump-format).')
    parser.add_argument(
        '--dump-format',
        type=str,
        choices=DUMP_FORMATS,
        default=None,
        dest='dump_format',
        help='Format for --dump-file: csv (default), json or excel.')
    parser.add_argument(
        '--show-jql',
        action='store_true',
        dest='show_jql',
        help='Print the JQL query used at the end of the run.')

    args = parser.parse_args(argv)

    # Validate argument combinations
    if args.sprint is not None and args.date is not None:
        parser.error('--sprint and --date cannot be used together')
    if args.date is not None and not args.project:
        parser.error('--date requires --project')
    if args.project and args.date is None:
        parser.error('--project requires --date')
    if args.limit is not None and args.limit < 1:
        parser.error('--limit must be a positive integer')
    if args.dump_format and not args.dump_file:
        parser.error('--dump-format requires --dump-file')
    args.dump_format = args.dump_format or 'csv'
    args.interactive = args.sprint is None and args.date is None

    # Selected env file overrides the default .env loaded at import
    load_env_file(args.env)
    try:
        settings = get_settings()
        settings.validate_limits()
    except ValueError as e:
        parser.exit(1, f'ERROR: {e}\n')

    global _file_handler
    _file_handler = configure_logging(settings, verbose=args.verbose, quiet=args.quiet)

    # Set quiet mode for output function
    global _quiet_mode
    _quiet_mode = args.quiet

    # Set show_jql mode
    global _show_jql
    _show_jql = args.show_jql

    log.info('++++++++++++++++++++++++++++++++++++++++++++++')
    log.info(f'+  {os.path.basename(sys.argv[0])}')
    log.info(f'+  Python Version: {sys.version.split()[0]}')
    log.info(f'+  Today is: {date.today()}')
    log.info(f'+  Jira URL: {settings.jira_base_url}')
    log.info('++++++++++++++++++++++++++++++++++++++++++++++')
    log.debug(f'Settings: {settings.to_dict()}')

    return args


# ****************************************************************************************
# Main
# ****************************************************************************************
def main(argv=None):
    '''
    Entrypoint that wires together dependencies and launches the CLI.

    Sequence:
        1. Parse command line arguments
        2. Run onboarding if no credential file exists and the environment
           does not already carry the credentials
        3. Run the requested query, or the interactive menu

    Output:
        Exit code 0 on success, 1 on failure.
    '''
    args = handle_args(argv)
    log.debug('Entering main()')

    options = {
        'limit': args.limit,
        'dump_file': args.dump_file,
        'dump_format': args.dump_format,
    }

    try:
        settings = get_settings()
        if needs_onboarding(args.env) and not all(
                [settings.jira_base_url, settings.jira_email, settings.jira_api_token]):
            settings = onboard(args.env)
            output(f'{args.env} file created successfully.')

        if args.interactive:
            run_menu(settings, **options)
        else:
            fetch_and_display_tickets(args.sprint, args.date, args.project, settings, **options)

    except JiraCredentialsError as e:
        log.error(e.message)
        output('')
        output('ERROR: ' + e.message)
        output('')
        output(f'Please set the required values in {args.env}:')
        output('  JIRA_BASE_URL="https://yourcompany.atlassian.net"')
        output('  JIRA_EMAIL="your.email@example.com"')
        output('  JIRA_API_TOKEN="your_api_token_here"')
        output('')
        return 1
    except JiraSearchError as e:
        log.error(e.message)
        output('')
        output('ERROR: ' + e.message)
        output('')
        return 1
    except ValueError as e:
        log.error(str(e))
        output(f'ERROR: {e}')
        return 1
    except (KeyboardInterrupt, EOFError):
        output('')
        log.info('Interrupted.')
        return 1

    # Display JQL if --show-jql was specified
    display_jql()

    log.info('Operation complete.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
