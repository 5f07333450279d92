"""
Network reachability monitoring.

Three interface classes (Wi-Fi only, cellular only, any interface) are
observed independently from a background thread. Each observer pushes a
notification only when its status changes; the latest values are kept in
an immutable ConnectivityState snapshot that callers read without blocking.

When the pushed state says the network is unusable, probe_reachability()
gives a blocking second opinion by contacting a few well-known hosts.
"""

import ipaddress
import logging
import socket
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

import psutil
import requests

logger = logging.getLogger(__name__)


class PathStatus(Enum):
    """Reachability status of one interface class"""
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"
    REQUIRES_CONNECTION = "requires_connection"


class InterfaceClass(Enum):
    """Interface classes observed by the monitor"""
    WIFI = "wifi"
    CELLULAR = "cellular"
    ANY = "any"


@dataclass(frozen=True)
class ConnectivityState:
    """Snapshot of the latest known reachability.

    overall_status comes from the any-interface observer and is authoritative;
    it is not derived from the two typed flags.
    """
    wifi_available: bool = False
    cellular_available: bool = False
    overall_status: PathStatus = PathStatus.UNSATISFIED
    updated_at: float = 0.0

    @property
    def is_offline(self) -> bool:
        return self.overall_status != PathStatus.SATISFIED

    @property
    def has_wifi(self) -> bool:
        return self.wifi_available

    @property
    def has_cellular(self) -> bool:
        return self.cellular_available


class InterfaceScanner:
    """Reads interface state from the operating system via psutil"""

    WIFI_PREFIXES = ("wlan", "wlp", "wl", "wifi", "ath")
    CELLULAR_PREFIXES = ("wwan", "rmnet", "ppp", "pdp_ip", "ccmni")
    LOOPBACK_PREFIXES = ("lo",)

    def classify(self, name: str) -> Optional[InterfaceClass]:
        """Return the typed class for an interface name, None if untyped"""
        lowered = name.lower()
        if lowered.startswith(self.WIFI_PREFIXES):
            return InterfaceClass.WIFI
        if lowered.startswith(self.CELLULAR_PREFIXES):
            return InterfaceClass.CELLULAR
        return None

    @staticmethod
    def _is_routable(address: str) -> bool:
        try:
            ip = ipaddress.ip_address(address.split('%', 1)[0])
        except ValueError:
            return False
        return not (ip.is_loopback or ip.is_link_local or ip.is_unspecified)

    def scan(self) -> Dict[InterfaceClass, PathStatus]:
        """Compute one PathStatus per interface class"""
        stats = psutil.net_if_stats()
        addresses = psutil.net_if_addrs()

        # (up, has_address) per class
        seen: Dict[InterfaceClass, List[bool]] = {cls: [False, False] for cls in InterfaceClass}

        for name, if_stats in stats.items():
            if name.lower().startswith(self.LOOPBACK_PREFIXES) or not if_stats.isup:
                continue

            routable = any(
                addr.family in (socket.AF_INET, socket.AF_INET6) and self._is_routable(addr.address)
                for addr in addresses.get(name, [])
            )

            targets = [InterfaceClass.ANY]
            typed = self.classify(name)
            if typed is not None:
                targets.append(typed)

            for cls in targets:
                seen[cls][0] = True
                seen[cls][1] = seen[cls][1] or routable

        result = {}
        for cls, (up, routable) in seen.items():
            if up and routable:
                result[cls] = PathStatus.SATISFIED
            elif up:
                result[cls] = PathStatus.REQUIRES_CONNECTION
            else:
                result[cls] = PathStatus.UNSATISFIED
        return result


class PathObserver:
    """Watches one interface class and fires its handler on status changes"""

    def __init__(self, interface_class: InterfaceClass, handler: Callable[[PathStatus], None]):
        self.interface_class = interface_class
        self.handler = handler
        self.status: Optional[PathStatus] = None

    def update(self, status: PathStatus) -> bool:
        if status == self.status:
            return False
        self.status = status
        self.handler(status)
        return True

    def reset(self) -> None:
        self.status = None


class ConnectivityMonitor:
    """
    Near-real-time network reachability tracking.

    start() launches the observers, current_state() returns the latest
    snapshot, stop() releases everything. A monitor that was never started
    (or has been stopped) reports UNSATISFIED.
    """

    def __init__(self,
                 scanner: Optional[InterfaceScanner] = None,
                 poll_interval: float = 2.0,
                 probe_endpoints: Optional[Iterable[str]] = None,
                 probe_timeout: float = 3.0):
        self.scanner = scanner or InterfaceScanner()
        self.poll_interval = poll_interval
        self.probe_endpoints = list(probe_endpoints or [
            "https://www.apple.com",
            "https://www.google.com",
            "https://api.openai.com",
        ])
        self.probe_timeout = probe_timeout

        self._state = ConnectivityState()
        self._lock = threading.RLock()
        self._listeners: List[Callable[[ConnectivityState], None]] = []

        self._observers = {
            InterfaceClass.WIFI: PathObserver(InterfaceClass.WIFI, self._on_wifi_change),
            InterfaceClass.CELLULAR: PathObserver(InterfaceClass.CELLULAR, self._on_cellular_change),
            InterfaceClass.ANY: PathObserver(InterfaceClass.ANY, self._on_any_change),
        }

        self.stop_event = threading.Event()
        self.background_thread: Optional[threading.Thread] = None
        self.is_monitoring = False

    # Lifecycle

    def start(self) -> None:
        """Begin observing all interface classes. No-op when already running."""
        with self._lock:
            if self.is_monitoring:
                return
            self.stop_event.clear()
            self.background_thread = threading.Thread(
                target=self._monitor_loop,
                name="ConnectivityMonitor",
                daemon=True
            )
            self.is_monitoring = True
            self.background_thread.start()
        logger.info("Connectivity monitoring started")

    def stop(self) -> None:
        """Release observation handles. Safe to call repeatedly."""
        with self._lock:
            if not self.is_monitoring:
                return
            self.is_monitoring = False
            self.stop_event.set()
            thread = self.background_thread
            self.background_thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval + 1.0)

        with self._lock:
            for observer in self._observers.values():
                observer.reset()
            self._state = ConnectivityState()
        logger.info("Connectivity monitoring stopped")

    def _monitor_loop(self) -> None:
        while True:
            try:
                self.refresh()
            except Exception as e:
                # psutil can fail transiently while interfaces are being reconfigured
                logger.warning(f"Interface scan failed: {e}")
            if self.stop_event.wait(self.poll_interval):
                break

    def refresh(self) -> ConnectivityState:
        """Scan interfaces once and deliver any resulting notifications"""
        statuses = self.scanner.scan()
        changed = False
        with self._lock:
            for interface_class, observer in self._observers.items():
                status = statuses.get(interface_class, PathStatus.UNSATISFIED)
                changed = observer.update(status) or changed
            state = self._state

        if changed:
            self._notify_listeners(state)
        return state

    # Notification handlers

    def _on_wifi_change(self, status: PathStatus) -> None:
        self._state = replace(self._state, wifi_available=status == PathStatus.SATISFIED, updated_at=time.time())
        logger.debug(f"WiFi Status: {status.value}")

    def _on_cellular_change(self, status: PathStatus) -> None:
        self._state = replace(self._state, cellular_available=status == PathStatus.SATISFIED, updated_at=time.time())
        logger.debug(f"Cellular Status: {status.value}")

    def _on_any_change(self, status: PathStatus) -> None:
        self._state = replace(self._state, overall_status=status, updated_at=time.time())
        if status == PathStatus.SATISFIED:
            logger.info("Network connection is available")
        else:
            logger.warning(f"Network connection is lost - Status: {status.value}")

    def add_listener(self, callback: Callable[[ConnectivityState], None]) -> None:
        """Register a callback receiving every new ConnectivityState"""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[ConnectivityState], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, state: ConnectivityState) -> None:
        for callback in list(self._listeners):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Connectivity listener failed: {e}")

    # Queries

    def current_state(self) -> ConnectivityState:
        """Non-blocking snapshot of the latest known values"""
        with self._lock:
            return self._state

    @property
    def is_offline(self) -> bool:
        return self.current_state().is_offline

    @property
    def has_wifi(self) -> bool:
        return self.current_state().has_wifi

    @property
    def has_cellular(self) -> bool:
        return self.current_state().has_cellular

    def probe_reachability(self, timeout: Optional[float] = None) -> bool:
        """
        Blocking reachability check against well-known hosts.

        Returns True on the first endpoint answering with a non-error status
        before the shared deadline, False when every probe fails or the
        deadline passes.
        """
        timeout = self.probe_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout

        for endpoint in self.probe_endpoints:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("Reachability probe deadline exceeded")
                break
            try:
                response = requests.get(endpoint, timeout=remaining)
                if response.ok:
                    logger.info(f"Reachability probe succeeded via {endpoint}")
                    return True
                logger.debug(f"Probe to {endpoint} returned {response.status_code}")
            except requests.RequestException as e:
                logger.debug(f"Probe to {endpoint} failed: {e}")
                continue

        logger.warning("Reachability probe failed for all endpoints")
        return False

    def get_status(self) -> Dict[str, object]:
        state = self.current_state()
        return {
            "monitoring": self.is_monitoring,
            "overall_status": state.overall_status.value,
            "wifi": state.wifi_available,
            "cellular": state.cellular_available,
            "last_update": state.updated_at,
        }


def create_connectivity_monitor(config=None) -> ConnectivityMonitor:
    """Create a ConnectivityMonitor from a GenerationConfig"""
    if config is None:
        return ConnectivityMonitor()
    return ConnectivityMonitor(
        poll_interval=config.monitor_poll_interval,
        probe_endpoints=config.probe_endpoints,
        probe_timeout=config.probe_timeout
    )
