"""
Live configuration holder with hot reload.

``ConfigReloader`` owns the configuration other components read. Reloads
build a complete new ``Config`` and swap it in only after it loaded cleanly;
a failed reload keeps the previous configuration live.

Usage:
    from proxyconf.reload import get_config, get_reloader

    reloader = get_reloader("/etc/proxy/proxy.yaml")
    reloader.start_polling()          # reload whenever the file changes
    config = get_config()             # current live configuration

Testing:
    reset_config()
    reloader = get_reloader(path, force_new=True)
"""
import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from .config import Config, load_config
from .errors import ConfigError

log = logging.getLogger(__name__)

Loader = Callable[[Optional[Union[str, Path]]], Config]


class ConfigReloader:
    """Publishes one live Config at a time and replaces it on change."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None,
                 loader: Loader = load_config):
        self.config_path = str(config_path) if config_path else None
        self._loader = loader
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self.last_error: Optional[ConfigError] = None
        self._config = self._initial_load()

    def _initial_load(self) -> Config:
        try:
            return self._loader(self.config_path)
        except ConfigError as e:
            self.last_error = e
            log.error("config.initial_load_failed path=%s error=%s using_defaults", self.config_path, str(e))
            return Config.defaults()

    @property
    def current(self) -> Config:
        return self._config

    def reload(self, force: bool = False) -> bool:
        """
        Reload the configuration if its source changed.

        Args:
            force: Reload even if the source does not look stale

        Returns:
            True if a new configuration was published
        """
        with self._lock:
            current = self._config
            if not force and not current.is_stale():
                return False

            log.info("config.reloading path=%s forced=%s", self.config_path, force)
            try:
                fresh = self._loader(self.config_path)
            except ConfigError as e:
                self.last_error = e
                log.error("config.reload_failed path=%s error=%s keeping_previous", self.config_path, str(e))
                return False

            self._config = fresh
            self.last_error = None
            current.resources.quit_event.set()
            log.info("config.reloaded_successfully path=%s", self.config_path)
            return True

    def start_polling(self, interval: Optional[float] = None) -> None:
        """Poll for staleness on a background thread every ``interval`` seconds."""
        if self._poll_thread is not None and self._poll_thread.is_alive():
            return
        if interval is None:
            interval = max(1.0, float(self._config.reload_config.rate_limit_secs))
        self._stop.clear()
        self._poll_thread = threading.Thread(
            target=self._poll, args=(interval,), name="proxyconf-reload-poller", daemon=True)
        self._poll_thread.start()
        log.info("config.polling_started path=%s interval=%.1f", self.config_path, interval)

    def stop_polling(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._poll_thread is not None:
            self._poll_thread.join(timeout)
            self._poll_thread = None
        log.info("config.polling_stopped path=%s", self.config_path)

    def _poll(self, interval: float) -> None:
        while not self._stop.wait(interval):
            self.reload()

    def __repr__(self) -> str:
        return f"ConfigReloader(path={self.config_path!r}, config={self._config!r})"


# Global reloader instance management
_reloader_instance: Optional[ConfigReloader] = None
_reloader_lock = threading.Lock()


def get_reloader(config_path: Optional[Union[str, Path]] = None,
                 force_new: bool = False) -> ConfigReloader:
    """
    Get the process-wide reloader, creating it on first use.

    Args:
        config_path: Configuration document path, used when creating
        force_new: Replace any existing instance (for testing)
    """
    global _reloader_instance

    with _reloader_lock:
        if force_new or _reloader_instance is None:
            _reloader_instance = ConfigReloader(config_path)
            log.info("config.instance_created path=%s", config_path)
        return _reloader_instance


def get_config() -> Config:
    """The current live configuration."""
    return get_reloader().current


def reset_config():
    """Reset the process-wide reloader (for testing)."""
    global _reloader_instance
    with _reloader_lock:
        if _reloader_instance is not None:
            _reloader_instance.stop_polling()
        _reloader_instance = None
        log.debug("config.instance_reset")
