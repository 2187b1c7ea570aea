##########################################################################################
#
# Module: config/settings.py
#
# Description: Application settings, credential onboarding and logging setup.
#
# Author: Cornelis Networks
#
##########################################################################################

import getpass
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from dotenv import load_dotenv, set_key

# Load environment variables from the default .env if present.
#
# CLI users can point at another file with --env; see load_env_file().
# override=False so real process environment variables still take precedence.
load_dotenv(override=False)

# Logging config - follows jira_business_value.py pattern
log = logging.getLogger(os.path.basename(sys.argv[0]))

DEFAULT_ENV_FILE = '.env'
LOG_FORMAT = '%(asctime)-15s [%(funcName)25s:%(lineno)-5s] %(levelname)-8s %(message)s'

# (env var, prompt) pairs written by onboarding, in file order
CREDENTIAL_PROMPTS = (
    ('JIRA_BASE_URL', 'Enter your Jira base URL'),
    ('JIRA_EMAIL', 'Enter your Jira email'),
    ('JIRA_API_TOKEN', 'Enter your Jira API token'),
)


def _int_env(name: str, default: int) -> int:
    '''
    Read an integer environment variable.

    Raises:
        ValueError: If the variable is set to something that is not an integer.
    '''
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {value!r}')


@dataclass
class Settings:
    '''
    Application settings loaded from environment variables.
    '''
    # Jira settings
    jira_base_url: Optional[str] = None
    jira_email: Optional[str] = None
    jira_api_token: Optional[str] = None
    sprint_field: str = 'cf[10010]'
    max_results: int = 100
    request_timeout: int = 30

    # Report settings
    max_depth: int = 1000
    table_width: int = 100

    # Logging
    log_file: str = 'jira_business_value.log'
    log_level: str = 'DEBUG'

    @classmethod
    def from_env(cls) -> 'Settings':
        '''
        Create settings from environment variables.

        Output:
            Settings instance populated from environment.
        '''
        base_url = os.getenv('JIRA_BASE_URL')
        return cls(
            # Jira
            jira_base_url=base_url.rstrip('/') if base_url else None,
            jira_email=os.getenv('JIRA_EMAIL'),
            jira_api_token=os.getenv('JIRA_API_TOKEN'),
            sprint_field=os.getenv('JIRA_SPRINT_FIELD', 'cf[10010]'),
            max_results=_int_env('JIRA_MAX_RESULTS', 100),
            request_timeout=_int_env('JIRA_TIMEOUT', 30),

            # Report
            max_depth=_int_env('ADF_MAX_DEPTH', 1000),
            table_width=_int_env('TABLE_WIDTH', 100),

            # Logging
            log_file=os.getenv('LOG_FILE', 'jira_business_value.log'),
            log_level=os.getenv('LOG_LEVEL', 'DEBUG'),
        )

    def validate(self) -> bool:
        '''
        Validate that required settings are present.

        Output:
            True if all required settings are valid.

        Raises:
            ValueError: If required settings are missing.
        '''
        errors = []

        if not self.jira_base_url:
            errors.append('JIRA_BASE_URL is required')
        if not self.jira_email:
            errors.append('JIRA_EMAIL is required')
        if not self.jira_api_token:
            errors.append('JIRA_API_TOKEN is required')
        errors.extend(self.limit_errors())

        if errors:
            for error in errors:
                log.error(f'Configuration error: {error}')
            raise ValueError(f'Configuration errors: {", ".join(errors)}')

        return True

    def limit_errors(self) -> List[str]:
        '''List the numeric settings that are out of range.'''
        errors = []
        for name, value in (('JIRA_MAX_RESULTS', self.max_results),
                            ('JIRA_TIMEOUT', self.request_timeout),
                            ('ADF_MAX_DEPTH', self.max_depth),
                            ('TABLE_WIDTH', self.table_width)):
            if value < 1:
                errors.append(f'{name} must be a positive integer')
        return errors

    def validate_limits(self) -> bool:
        '''
        Validate the numeric settings. Credentials are not checked, so this
        can run before onboarding.

        Raises:
            ValueError: If any numeric setting is out of range.
        '''
        errors = self.limit_errors()
        if errors:
            raise ValueError(f'Configuration errors: {", ".join(errors)}')
        return True

    def to_dict(self) -> Dict[str, Any]:
        '''Convert settings to dictionary (masking sensitive values).'''
        return {
            'jira_base_url': self.jira_base_url,
            'jira_email': self.jira_email,
            'jira_api_token': '***' if self.jira_api_token else None,
            'sprint_field': self.sprint_field,
            'max_results': self.max_results,
            'request_timeout': self.request_timeout,
            'max_depth': self.max_depth,
            'table_width': self.table_width,
            'log_file': self.log_file,
            'log_level': self.log_level,
        }


# Global settings instance
_settings: Optional[Settings] = None

# Handlers attached by configure_logging()
_handlers = []


def get_settings() -> Settings:
    '''
    Get the global settings instance.

    Output:
        Settings instance (creates from environment if not exists).
    '''
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    '''Drop the cached settings so the next get_settings() re-reads the environment.'''
    global _settings
    _settings = None


def load_env_file(env_file: str = DEFAULT_ENV_FILE) -> bool:
    '''
    Load a dotenv file into the process environment.

    Values from an explicitly selected file override variables loaded earlier
    from the default .env.

    Output:
        True if the file existed and was loaded.
    '''
    if not os.path.exists(env_file):
        log.debug(f'Env file not found: {env_file}')
        return False

    load_dotenv(env_file, override=True)
    reset_settings()
    log.debug(f'Loaded env file: {env_file}')
    return True


def needs_onboarding(env_file: str = DEFAULT_ENV_FILE) -> bool:
    '''True when the credential file has not been created yet.'''
    return not os.path.exists(env_file)


def _ask(prompt: Callable[[str], str], message: str) -> str:
    '''Prompt until a non-empty answer is given.'''
    while True:
        answer = prompt(f'{message}: ').strip()
        if answer:
            return answer
        print('A value is required.')


def onboard(env_file: str = DEFAULT_ENV_FILE,
            prompt: Callable[[str], str] = input,
            secret_prompt: Callable[[str], str] = getpass.getpass) -> Settings:
    '''
    Prompt for Jira credentials and store them in a dotenv file.

    Input:
        env_file: Path of the dotenv file to create.
        prompt: Function used for visible prompts.
        secret_prompt: Function used for the API token prompt.

    Output:
        Settings re-read from the environment after the file is loaded.

    Side Effects:
        Creates env_file and loads it into the process environment.
    '''
    log.debug(f'Entering onboard(env_file={env_file})')

    values = {}
    for name, message in CREDENTIAL_PROMPTS:
        ask_with = secret_prompt if name == 'JIRA_API_TOKEN' else prompt
        values[name] = _ask(ask_with, message)

    Path(env_file).touch()
    for name, value in values.items():
        set_key(env_file, name, value, quote_mode='never')

    log.info(f'{env_file} file created successfully.')
    load_env_file(env_file)
    return get_settings()


def configure_logging(settings: Optional[Settings] = None, verbose: bool = False,
                      quiet: bool = False) -> logging.Handler:
    '''
    Configure logging based on settings.

    Input:
        settings: Optional settings instance (uses global if not provided).
        verbose: Show DEBUG messages on stdout.
        quiet: Only show ERROR messages on stdout.

    Output:
        The file handler, so user-facing output can be recorded in the log file.
    '''
    settings = settings or get_settings()

    # Reconfiguring replaces the handlers added by a previous call
    for handler in _handlers:
        log.removeHandler(handler)
        handler.close()
    _handlers.clear()

    log.setLevel(getattr(logging, settings.log_level.upper(), logging.DEBUG))
    formatter = logging.Formatter(LOG_FORMAT)

    # File handler
    fh = logging.FileHandler(settings.log_file, mode='w')
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    log.addHandler(fh)

    # Configure stdout logging based on arguments
    ch = logging.StreamHandler(sys.stdout)
    if verbose:
        ch.setLevel(logging.DEBUG)
    elif quiet:
        ch.setLevel(logging.ERROR)
    else:
        ch.setLevel(logging.INFO)
    ch.setFormatter(formatter)
    log.addHandler(ch)
    _handlers.extend([fh, ch])

    log.debug(f'Logging configured: file={settings.log_file}, level={settings.log_level}')
    return fh
