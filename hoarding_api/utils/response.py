from typing import Any


def success_response(data: Any = None, message: str = "OK", status_code: int = 200) -> dict:
    return {"success": True, "statusCode": status_code, "message": message, "data": data}


def error_response(message: str, status_code: int = 400, error: Any = None) -> dict:
    return {"success": False, "statusCode": status_code, "message": message, "error": error}
