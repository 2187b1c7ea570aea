##########################################################################################
#
# Module: config
#
# Description: Configuration management for the Jira business value report.
#
# Author: Cornelis Networks
#
##########################################################################################

from config.settings import (
    Settings,
    configure_logging,
    get_settings,
    load_env_file,
    needs_onboarding,
    onboard,
    reset_settings,
)

__all__ = [
    'Settings',
    'configure_logging',
    'get_settings',
    'load_env_file',
    'needs_onboarding',
    'onboard',
    'reset_settings',
]
