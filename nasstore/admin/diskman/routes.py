from flask import request, current_app
from nasstore.auth.decorators import admin_required
from nasstore.utils.utils import error_response, success_response
from nasstore.storage.errors import DeviceNotFoundError, DeviceTimeoutError
from .. import bp
from . import utils


@bp.route('/api/admin/diskman/device', methods=['GET'])
@admin_required
def get_device():
    """
    Get identity information of a block device.

    Query parameters:
        device: Device name or path, e.g. 'sda' or '/dev/disk/by-id/ata-...'

    Returns:
        JSON response with the device summary, 404 if the device is unknown
    """
    device = request.args.get('device', '').strip()
    if not device:
        return error_response("Device parameter is required", 400)

    try:
        info = utils.get_device_info(device)
        return success_response("Successfully retrieved device information", {"device": info})
    except DeviceNotFoundError as e:
        current_app.logger.warning(f"[DISKMAN] {e}")
        return error_response(str(e), 404, {"device": e.device_file})
    except Exception as e:
        current_app.logger.error(f"[DISKMAN] Error getting device information: {str(e)}")
        return error_response(str(e), 500)


@bp.route('/api/admin/diskman/device/wait', methods=['POST'])
@admin_required
def wait_for_device():
    """
    Wait for a block device to appear.

    Expected JSON payload:
    {
        "device": "/dev/disk/by-id/ata-...",
        "timeout": 10  # Seconds, optional
    }

    Returns:
        JSON response with the device summary, 408 if it did not appear in time
    """
    data = request.get_json(silent=True)
    if not data:
        return error_response("No JSON data provided", 400)

    device = str(data.get('device', '')).strip()
    if not device:
        return error_response("Device parameter is required", 400)

    try:
        timeout = int(data.get('timeout', 10))
    except (TypeError, ValueError):
        return error_response("Timeout must be an integer", 400)
    max_timeout = current_app.config.get('DEVICE_WAIT_MAX', 60)
    if timeout < 0 or timeout > max_timeout:
        return error_response(f"Timeout must be between 0 and {max_timeout} seconds", 400)

    try:
        info = utils.wait_for_device_info(device, timeout)
        return success_response("Device is available", {"device": info})
    except DeviceTimeoutError as e:
        current_app.logger.warning(f"[DISKMAN] {e}")
        return error_response(str(e), 408, {"device": e.device_file, "timeout": e.timeout})
    except DeviceNotFoundError as e:
        current_app.logger.warning(f"[DISKMAN] {e}")
        return error_response(str(e), 404, {"device": e.device_file})
    except Exception as e:
        current_app.logger.error(f"[DISKMAN] Error waiting for device: {str(e)}")
        return error_response(str(e), 500)
