"""
Shared utility functions used across the application.
"""
import os
import json
import subprocess
import re
from typing import Tuple, Dict, Optional, List
from pathlib import Path
from flask import current_app, jsonify, has_app_context
import logging
from datetime import datetime

# Get the specific logger used in other parts of the app
logger = logging.getLogger('homeserver')

DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def execute_command(command: List[str], input_data: Optional[str] = None) -> Tuple[bool, str, str]:
    """
    Execute a command with proper error handling.

    Args:
        command: List of command arguments
        input_data: Optional string to pass to stdin

    Returns:
        Tuple of (success, stdout, stderr)
    """
    try:
        logger.debug(f"Executing command: {' '.join(command)}")

        # Set up environment with proper PATH for system commands
        env = os.environ.copy()
        env['PATH'] = DEFAULT_PATH

        if input_data:
            # Use Popen for commands that need stdin input
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=env
            )
            stdout, stderr = process.communicate(input=input_data)
            return process.returncode == 0, stdout.strip(), stderr.strip()

        # Use run for commands that don't need stdin
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=False,
            env=env
        )

        return result.returncode == 0, result.stdout.strip(), result.stderr.strip()

    except Exception as e:
        logger.error(f"Error executing command: {str(e)}")
        return False, "", str(e)


def execute_systemctl_command(command: str, unit: Optional[str] = None,
                              systemctl: str = '/usr/bin/systemctl') -> Tuple[bool, str]:
    """
    Execute a systemctl command.

    Args:
        command: systemctl verb (enable, disable, daemon-reload, ...)
        unit: Unit name, omitted for unit-less verbs such as daemon-reload
        systemctl: Path to the systemctl binary

    Returns:
        Tuple of (success, output with ANSI colors stripped)
    """
    base_cmd = [systemctl, command]
    if unit:
        base_cmd.append(unit)
    logger.debug(f"Executing systemctl command: {' '.join(base_cmd)}")

    try:
        result = subprocess.run(
            base_cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
            env={"SYSTEMD_COLORS": "0", "PATH": DEFAULT_PATH}
        )
    except Exception as e:
        logger.error(f"Error in execute_systemctl_command: {str(e)}")
        return False, str(e)

    clean_stdout = re.sub(r'\x1B\[[0-?]*[ -/]*[@-~]', '', result.stdout)
    if result.returncode != 0:
        logger.warning(f"systemctl {command} {unit or ''} failed: {result.stderr.strip()}")
        return False, result.stderr.strip() or clean_stdout.strip()
    return True, clean_stdout.strip()


def load_config(path: str) -> Dict:
    """
    Load a JSON configuration file.

    Returns:
        dict: Parsed configuration, or an empty dictionary on error
    """
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f'Config file not found: {path}')
        return {}
    except json.JSONDecodeError:
        logger.error(f'Invalid JSON in config file: {path}')
        return {}
    except Exception as e:
        logger.error(f'Error reading config {path}: {str(e)}')
        return {}


def resolve_config_path(main_config: str, factory_config: Optional[str] = None) -> Optional[str]:
    """
    Pick the configuration file to read: the main file when it holds valid
    JSON, otherwise the factory file.
    """
    candidates = [main_config]
    if factory_config:
        candidates.append(factory_config)
    for candidate in candidates:
        try:
            with open(candidate) as f:
                json.load(f)  # Validate JSON
            return candidate
        except (OSError, json.JSONDecodeError):
            logger.warning(f'Config {candidate} is missing or invalid')
    return None


def get_config() -> Dict:
    """
    Load and parse the application configuration.
    Tries the main config first, then falls back to the factory config.
    """
    config_path = resolve_config_path(
        current_app.config['NASSTORE_CONFIG'],
        current_app.config.get('FACTORY_CONFIG')
    )
    if config_path is None:
        current_app.logger.error('Both main and factory configs are invalid or missing')
        return {}
    return load_config(config_path)


def write_to_log(category: str, message: str, level: str = 'info') -> bool:
    """Write a message to the centralized homeserver log file."""
    try:
        # Use concise timestamp format: YYYY-MM-DD HH:MM
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M')
        log_line = f"[{timestamp}] [{category}] [{level}] {message}\n"

        log_dir = current_app.config['HOMESERVER_LOG_DIR'] if has_app_context() else '/var/log/homeserver'
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        with open(os.path.join(log_dir, 'homeserver.log'), "a") as log_file:
            log_file.write(log_line)

        return True
    except Exception as e:
        logger.error(f'Failed to write to log: {str(e)}')
        return False


def error_response(message, status_code=400, details=None):
    """
    Create an error JSON response.

    Args:
        message (str): Error message
        status_code (int): HTTP status code
        details (dict, optional): Additional details

    Returns:
        tuple: (jsonify response, status_code)
    """
    response = {
        "status": "error",
        "message": message
    }

    if details:
        response["details"] = details

    return jsonify(response), status_code


def success_response(message, details=None):
    """
    Create a success JSON response.

    Args:
        message (str): Success message
        details (dict, optional): Additional details

    Returns:
        tuple: (jsonify response, status_code)
    """
    response = {
        "status": "success",
        "message": message
    }

    if details:
        response["details"] = details

    return jsonify(response), 200
