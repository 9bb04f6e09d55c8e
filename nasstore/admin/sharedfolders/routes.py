from flask import current_app
from nasstore.auth.decorators import admin_required
from nasstore.utils.utils import error_response, success_response, write_to_log
from .. import bp
from . import utils


@bp.route('/api/admin/sharedfolders', methods=['GET'])
@admin_required
def get_shared_folders():
    """
    List configured shared folders.

    Returns:
        JSON response with each folder's bind source, target, unit name and mount state
    """
    try:
        folders = utils.list_shared_folders()
        return success_response(
            "Successfully retrieved shared folders",
            {
                "sharedFolders": folders,
                "count": len(folders)
            }
        )
    except Exception as e:
        current_app.logger.error(f"[SHAREDFOLDERS] Error listing shared folders: {str(e)}")
        return error_response(str(e), 500)


@bp.route('/api/admin/sharedfolders/apply', methods=['POST'])
@admin_required
def apply_shared_folders():
    """
    Regenerate and enable the systemd mount units of all shared folders.
    """
    success, output = utils.apply_mount_units()
    if not success:
        write_to_log('sharedfolders', f'Failed to regenerate mount units: {output}', 'error')
        return error_response("Failed to regenerate mount units", 500, {"output": output})

    write_to_log('sharedfolders', 'Shared folder mount units regenerated', 'info')
    return success_response("Shared folder mount units regenerated", {"output": output})
