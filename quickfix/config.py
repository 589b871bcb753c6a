import os
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

import yaml

from .errors import FatalConfigurationError

CONFIG_ENV = "QUICKFIX_CONFIG"
LOGFILE_ENV = "QUICKFIX_LOGFILE"
VERBOSE_ENV = "VERBOSE"

@dataclass(frozen=True)
class CacheDir:
    path: str
    privileged: bool = False

@dataclass(frozen=True)
class Settings:
    ping_target: str = "1.1.1.1"
    ping_count: int = 2
    dns_hostname: str = "apple.com"
    ip_interfaces: List[str] = field(default_factory=lambda: ["en0", "en1"])
    captive_portal_url: str = "http://captive.apple.com/hotspot-detect.html"
    http_timeout: float = 5.0
    wifi_toggle_delay: float = 2.0
    disk_used_percent: int = 90
    memory_free_pages: int = 50000
    cache_dirs: List[CacheDir] = field(default_factory=lambda: [
        CacheDir("/Library/Caches", privileged=True),
        CacheDir("~/Library/Caches", privileged=False),
    ])
    printer_paths: List[str] = field(default_factory=lambda: [
        "/Library/Printers/PPDs/Contents/Resources/*",
        "/Library/Printers/*",
        "/Library/Preferences/org.cups.*",
    ])
    command_timeout: Optional[float] = None
    verbose: bool = False
    log_file: Optional[str] = None

def get_app_data_dir() -> str:
    """Returns the per-user config directory, creating it if needed."""
    if sys.platform == 'win32':
        base = os.environ.get('LOCALAPPDATA', os.path.expanduser('~\\AppData\\Local'))
        path = os.path.join(base, 'QuickFix')
    else:
        path = os.path.expanduser('~/.config/quickfix')

    os.makedirs(path, exist_ok=True)
    return path

def get_default_config_path() -> str:
    """Resolves path to the packaged default_config.yaml"""
    if getattr(sys, 'frozen', False):
        return os.path.join(sys._MEIPASS, 'quickfix', 'default_config.yaml')
    return os.path.join(os.path.dirname(__file__), 'default_config.yaml')

def resolve_config_path(path: Optional[str] = None) -> str:
    if path:
        return path
    if os.environ.get(CONFIG_ENV):
        return os.environ[CONFIG_ENV]
    user_cfg = os.path.join(os.path.expanduser('~/.config/quickfix'), "config.yaml")
    if os.path.exists(user_cfg):
        return user_cfg
    return get_default_config_path()

def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise FatalConfigurationError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return value

def _number(section: Dict[str, Any], key: str, default, cast=float):
    value = section.get(key, default)
    if value is None:
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise FatalConfigurationError(f"Setting '{key}' must be numeric, got {value!r}")

def settings_from_dict(data: Dict[str, Any]) -> Settings:
    if not isinstance(data, dict):
        raise FatalConfigurationError("Configuration root must be a mapping")

    defaults = Settings()
    net = _section(data, "network")
    thresholds = _section(data, "thresholds")
    maint = _section(data, "maintenance")
    runner = _section(data, "runner")
    logging_cfg = _section(data, "logging")

    cache_dirs = defaults.cache_dirs
    if "cache_dirs" in maint:
        cache_dirs = []
        for item in maint["cache_dirs"] or []:
            if isinstance(item, str):
                cache_dirs.append(CacheDir(item))
            elif isinstance(item, dict) and item.get("path"):
                cache_dirs.append(CacheDir(str(item["path"]), bool(item.get("privileged", False))))
            else:
                raise FatalConfigurationError(f"Invalid cache_dirs entry: {item!r}")

    interfaces = net.get("ip_interfaces", defaults.ip_interfaces)
    if not isinstance(interfaces, list):
        raise FatalConfigurationError("network.ip_interfaces must be a list")

    return Settings(
        ping_target=str(net.get("ping_target", defaults.ping_target)),
        ping_count=_number(net, "ping_count", defaults.ping_count, int),
        dns_hostname=str(net.get("dns_hostname", defaults.dns_hostname)),
        ip_interfaces=[str(i) for i in interfaces],
        captive_portal_url=str(net.get("captive_portal_url", defaults.captive_portal_url)),
        http_timeout=_number(net, "http_timeout", defaults.http_timeout),
        wifi_toggle_delay=_number(net, "wifi_toggle_delay", defaults.wifi_toggle_delay),
        disk_used_percent=_number(thresholds, "disk_used_percent", defaults.disk_used_percent, int),
        memory_free_pages=_number(thresholds, "memory_free_pages", defaults.memory_free_pages, int),
        cache_dirs=cache_dirs,
        printer_paths=[str(p) for p in maint.get("printer_paths", defaults.printer_paths) or []],
        command_timeout=_number(runner, "command_timeout", defaults.command_timeout),
        verbose=bool(logging_cfg.get("verbose", defaults.verbose)),
        log_file=logging_cfg.get("log_file") or defaults.log_file,
    )

def load_settings(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    Loads YAML settings and applies environment overrides.
    Raises FatalConfigurationError when the file is unreadable or malformed.
    """
    environ = os.environ if environ is None else environ
    cfg_path = resolve_config_path(path)
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise FatalConfigurationError(f"Cannot read settings file {cfg_path}: {e}")
    except yaml.YAMLError as e:
        raise FatalConfigurationError(f"Malformed settings file {cfg_path}: {e}")

    settings = settings_from_dict(data)
    overrides: Dict[str, Any] = {}
    if environ.get(VERBOSE_ENV) == "1":
        overrides["verbose"] = True
    if environ.get(LOGFILE_ENV):
        overrides["log_file"] = environ[LOGFILE_ENV]
    if overrides:
        settings = replace(settings, **overrides)
    return settings
