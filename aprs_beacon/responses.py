import json
from email.utils import formatdate

from fastapi.responses import Response


def current_date_header() -> str:
    """生成符合 GMT 要求的日期头"""
    return formatdate(timeval=None, localtime=False, usegmt=True)


def fixed_json_response(data: dict, status_code: int = 200) -> Response:
    """
    返回标准 JSON 响应，带固定长度的 Content-Length。
    """
    body = json.dumps(data, ensure_ascii=False)
    headers = {
        "date": current_date_header(),
        "content-length": str(len(body.encode("utf-8"))),
    }
    return Response(
        content=body,
        headers=headers,
        media_type="application/json",
        status_code=status_code
    )


def error_response(message: str, status_code: int = 400) -> Response:
    return fixed_json_response({"success": False, "message": message}, status_code=status_code)
