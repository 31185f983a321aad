from typing import Any


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def is_valid_station_identity(callsign: Any, passcode: Any) -> bool:
    """呼号和 passcode 去空白后都不能为空，不校验格式。"""
    if _is_blank(callsign) or _is_blank(passcode):
        return False
    return True


def _utf16_code_units(text: str):
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def derive_passcode(callsign: str) -> str:
    """
    根据呼号计算 passcode，仅用于界面自动填充，不是安全凭据。
    输入：
        callsign: 例如 "BG5XYZ"，大小写不敏感
    返回：
        十进制字符串，如 "12345"
    """
    hash_val = 0x73E2  # 初始值

    # 按 UTF-16 code unit 计算，与参考实现逐位一致
    for code in _utf16_code_units(callsign.upper()):
        hash_val ^= (code << 8) ^ code
        hash_val = ((hash_val << 1) ^ (0xFFFF if hash_val & 0x8000 else 0)) & 0xFFFF

    return str(hash_val & 0x7FFF)  # 只保留 15 位
