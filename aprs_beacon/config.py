import json
import os
from pathlib import Path

CONFIG_PATH = Path(os.getenv("APRS_BEACON_CONFIG", "data/sys_conf.json"))

# 1. 定义默认配置
DEFAULT_CONFIG = {
    "http_service_port": "2232",
    "aprs_server": "rotate.aprs.net:14580",
    "transmit_mode": "aprs-is",
    "http_relay_url": "",
    "settings_file": "data/aprs_settings.json",
    "packet_path": "TCPIP*",
}

TRANSMIT_MODES = ("aprs-is", "http")

# 环境变量名 -> 配置键
ENV_KEYS = {
    "HTTP_SERVICE_PORT": "http_service_port",
    "APRS_SERVER": "aprs_server",
    "TRANSMIT_MODE": "transmit_mode",
    "HTTP_RELAY_URL": "http_relay_url",
    "SETTINGS_FILE": "settings_file",
    "PACKET_PATH": "packet_path",
}


# 2. 加载配置文件
def load_config_file(config_path: Path = CONFIG_PATH):
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except Exception as e:
            print(f"[Config][WARNING] 配置文件加载失败，使用默认配置: {e}")
    return {}


# 3. 读取环境变量
def get_env_config(environ=None):
    environ = os.environ if environ is None else environ
    env_config = {}
    for env_name, key in ENV_KEYS.items():
        if environ.get(env_name):
            env_config[key] = environ.get(env_name)
    return env_config


# 4. 合并配置（优先级：环境变量 > 配置文件 > 默认值）
def merge_configs(env_conf, file_conf, default_conf):
    def deep_merge(target, source):
        for key, value in source.items():
            if isinstance(value, dict) and key in target and isinstance(target[key], dict):
                deep_merge(target[key], value)
            else:
                target[key] = value
        return target
    merged = deep_merge(dict(default_conf), file_conf)
    merged = deep_merge(merged, env_conf)
    if merged.get("transmit_mode") not in TRANSMIT_MODES:
        print(f"[Config][WARNING] 未知 transmit_mode '{merged.get('transmit_mode')}'，改用 aprs-is")
        merged["transmit_mode"] = "aprs-is"
    return merged


# 生成最终配置
file_config = load_config_file()
env_config = get_env_config()
GLOBAL_CONFIG = merge_configs(env_config, file_config, DEFAULT_CONFIG)
