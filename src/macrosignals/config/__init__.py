from .loader import DEFAULT_CONFIG_PATH, SignalConfig, load_config

__all__ = ["DEFAULT_CONFIG_PATH", "SignalConfig", "load_config"]
