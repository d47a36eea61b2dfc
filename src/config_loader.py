"""
Configuration loader for the printer discovery server
Loads and validates configuration from YAML files
"""

import yaml
import logging
import ipaddress
from typing import Dict, Any, Optional
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

KNOWN_PROBE_STRATEGIES = ('tcp', 'http')

DEFAULT_PRIORITY_OCTETS = [
    10, 11, 12, 15, 20, 21, 25, 30, 50, 100, 101, 102,
    110, 150, 200, 201, 250, 254
]

DEFAULT_PRINTER_IPS = [
    # 192.168.1.x range
    '192.168.1.10', '192.168.1.11', '192.168.1.12', '192.168.1.15',
    '192.168.1.20', '192.168.1.25', '192.168.1.30', '192.168.1.50',
    '192.168.1.100', '192.168.1.101', '192.168.1.102', '192.168.1.110',
    '192.168.1.150', '192.168.1.200', '192.168.1.201', '192.168.1.250',

    # 192.168.0.x range
    '192.168.0.10', '192.168.0.11', '192.168.0.12', '192.168.0.15',
    '192.168.0.20', '192.168.0.25', '192.168.0.30', '192.168.0.50',
    '192.168.0.100', '192.168.0.101', '192.168.0.102', '192.168.0.110',
    '192.168.0.150', '192.168.0.200', '192.168.0.201', '192.168.0.250',

    # 10.0.0.x range (common in corporate networks)
    '10.0.0.10', '10.0.0.11', '10.0.0.12', '10.0.0.15',
    '10.0.0.20', '10.0.0.25', '10.0.0.30', '10.0.0.50',
    '10.0.0.100', '10.0.0.101', '10.0.0.102', '10.0.0.110',
    '10.0.0.150', '10.0.0.200', '10.0.0.201', '10.0.0.250',

    # 10.0.1.x range
    '10.0.1.10', '10.0.1.100', '10.0.1.200'
]


def load_config(config_path: Optional[str] = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation

    Passing None skips the file and returns the defaults only.
    """
    try:
        if config_path is None:
            config = {}
        else:
            config_file = Path(config_path)
            if not config_file.exists():
                logger.error(f"Configuration file not found: {config_path}")
                raise FileNotFoundError(f"Config file not found: {config_path}")

            with open(config_file, 'r') as f:
                config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration root must be a mapping")

        # Apply defaults first so validation sees a complete tree
        config = _apply_defaults(config)
        _validate_config(config)

        logger.info(f"Configuration loaded from {config_path or 'defaults'}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


def _validate_config(config: Dict) -> None:
    """Validate discovery, favorites and api sections"""
    discovery = config['discovery']

    ports = discovery['ports']
    if not ports:
        raise ValueError("discovery.ports must not be empty")
    for port in ports:
        if not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValueError(f"Invalid port in discovery.ports: {port}")

    for octet in discovery['priority_octets']:
        if not isinstance(octet, int) or not 1 <= octet <= 254:
            raise ValueError(f"Invalid octet in discovery.priority_octets: {octet}")

    if not isinstance(discovery['batch_size'], int) or discovery['batch_size'] < 1:
        raise ValueError("discovery.batch_size must be a positive integer")

    if discovery['max_concurrent_probes'] < 1:
        raise ValueError("discovery.max_concurrent_probes must be at least 1")

    for key in ('address_timeout', 'connect_timeout', 'request_timeout'):
        if discovery[key] <= 0:
            raise ValueError(f"discovery.{key} must be greater than 0")

    if discovery['batch_delay'] < 0:
        raise ValueError("discovery.batch_delay must not be negative")

    strategies = discovery['probe_strategies']
    if not strategies:
        raise ValueError("discovery.probe_strategies must not be empty")
    for strategy in strategies:
        if strategy not in KNOWN_PROBE_STRATEGIES:
            raise ValueError(f"Unknown probe strategy: {strategy}")

    for key in ('local_address', 'default_address'):
        value = discovery.get(key)
        if value is None:
            continue
        try:
            ipaddress.IPv4Address(value)
        except ValueError:
            raise ValueError(f"discovery.{key} is not a valid IPv4 address: {value}")

    if not config['favorites'].get('directory'):
        raise ValueError("favorites.directory is required")

    api_port = config['api']['port']
    if not isinstance(api_port, int) or not 1 <= api_port <= 65535:
        raise ValueError(f"Invalid api.port: {api_port}")


def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Discovery defaults
    if not config.get('discovery'):
        config['discovery'] = {}
    discovery_defaults = {
        'local_address': None,
        'address_timeout': 3,
        'stun_servers': ['stun.l.google.com:19302', 'stun1.l.google.com:19302'],
        'default_address': '192.168.1.1',
        'ports': [80, 631, 443, 8080, 9100, 8000],
        'priority_octets': list(DEFAULT_PRIORITY_OCTETS),
        'batch_size': 10,
        'batch_delay': 0.1,
        'connect_timeout': 1.5,
        'request_timeout': 1.0,
        'probe_strategies': ['tcp', 'http'],
        'default_ip_strategy': True,
        'default_ips': list(DEFAULT_PRINTER_IPS),
        'max_concurrent_probes': 10,
        'discover_on_startup': False,
        'scan_interval_minutes': 0
    }
    for key, default_value in discovery_defaults.items():
        if key not in config['discovery']:
            config['discovery'][key] = default_value

    # Favorites defaults
    if not config.get('favorites'):
        config['favorites'] = {}
    if 'directory' not in config['favorites']:
        config['favorites']['directory'] = 'data'

    # API defaults
    if not config.get('api'):
        config['api'] = {}
    api_defaults = {
        'host': '0.0.0.0',
        'port': 8000,
        'cors_origins': ['*']
    }
    for key, default_value in api_defaults.items():
        if key not in config['api']:
            config['api'][key] = default_value

    # Logging defaults
    if not config.get('logging'):
        config['logging'] = {}
    logging_defaults = {
        'level': 'INFO',
        'file': 'logs/printer_discovery.log',
        'console_output': True,
        'timezone': 'UTC'
    }
    for key, default_value in logging_defaults.items():
        if key not in config['logging']:
            config['logging'][key] = default_value

    return config


class TimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in the configured local timezone"""

    def __init__(self, fmt=None, timezone_name: str = 'UTC'):
        super().__init__(fmt)
        try:
            self.tz = pytz.timezone(timezone_name)
        except pytz.UnknownTimeZoneError:
            self.tz = pytz.utc

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')


def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration with timezone-aware timestamps"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    timezone_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, timezone_name)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[]
    )

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logging.getLogger().addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, tz={timezone_name}, console={log_config.get('console_output', True)}, file={log_file}")


def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "discovery": {
            "local_address": None,
            "address_timeout": 3,
            "stun_servers": ["stun.l.google.com:19302", "stun1.l.google.com:19302"],
            "default_address": "192.168.1.1",
            "ports": [80, 631, 443, 8080, 9100, 8000],
            "priority_octets": list(DEFAULT_PRIORITY_OCTETS),
            "batch_size": 10,
            "batch_delay": 0.1,
            "connect_timeout": 1.5,
            "request_timeout": 1.0,
            "probe_strategies": ["tcp", "http"],
            "default_ip_strategy": True,
            "max_concurrent_probes": 10,
            "discover_on_startup": False,
            "scan_interval_minutes": 0
        },
        "favorites": {
            "directory": "data"
        },
        "api": {
            "host": "0.0.0.0",
            "port": 8000,
            "cors_origins": ["*"]
        },
        "logging": {
            "level": "INFO",
            "file": "logs/printer_discovery.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }
