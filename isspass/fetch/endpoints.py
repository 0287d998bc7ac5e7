"""Fixed upstream endpoints used by the resolvers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

IP_ECHO_URL = "https://api.ipify.org/?format=json"
GEOLOCATION_URL = "https://ipvigilante.com/{ip}"
PASS_TIMES_URL = "http://api.open-notify.org/iss-pass.json"


@dataclass(frozen=True)
class Endpoints:
    ip_echo: str = IP_ECHO_URL
    geolocation: str = GEOLOCATION_URL
    pass_times: str = PASS_TIMES_URL

    @classmethod
    def from_config(cls, payload: Dict[str, object]) -> "Endpoints":
        return cls(
            ip_echo=str(payload.get("ip_echo", IP_ECHO_URL)),
            geolocation=str(payload.get("geolocation", GEOLOCATION_URL)),
            pass_times=str(payload.get("pass_times", PASS_TIMES_URL)),
        )

    def as_dict(self) -> Dict[str, str]:
        return {
            "ip_echo": self.ip_echo,
            "geolocation": self.geolocation,
            "pass_times": self.pass_times,
        }


DEFAULT_ENDPOINTS = Endpoints()
