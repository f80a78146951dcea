from flask import jsonify


def api_response(data=None, message: str = "success", status: int = 200):
    """Uniform success envelope, mirroring error_response in api.errors."""
    payload = {
        "status": status,
        "data": data if data is not None else {},
        "message": message,
        "success": status < 400,
    }
    return jsonify(payload), status
