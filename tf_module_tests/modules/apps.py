"""Application descriptors routed by the ALB and served by the compute module."""

from typing import Any, Dict, Iterator, List, Mapping, Tuple

from pydantic import BaseModel, Field, field_validator


class AppConfig(BaseModel):
    """One application behind the load balancer."""

    port: int = Field(..., ge=1, le=65535, description="Backend port of the target group")
    path: str = Field(..., description="Listener rule path pattern, e.g. /app1/*")
    health_check_url: str = Field(..., description="Target group health check path")
    domain: List[str] = Field(..., min_length=1, description="Host header values")
    priority: int = Field(..., ge=1, le=50000, description="Listener rule priority")

    @field_validator('path', 'health_check_url')
    @classmethod
    def validate_absolute_path(cls, v: str) -> str:
        if not v.startswith('/'):
            raise ValueError(f"must start with '/': {v}")
        return v

    @field_validator('domain', mode='before')
    @classmethod
    def validate_domain(cls, v: Any) -> Any:
        """Accept a single domain string as a one-element list."""
        if isinstance(v, str):
            return [v]
        return v


def duplicate_priorities(priorities: Mapping[str, int]) -> Dict[int, List[str]]:
    """
    Priorities claimed by more than one app.

    Args:
        priorities: App name to rule priority

    Returns:
        Priority to the sorted app names sharing it
    """
    by_priority: Dict[int, List[str]] = {}
    for name, priority in priorities.items():
        by_priority.setdefault(int(priority), []).append(name)
    return {p: sorted(names) for p, names in by_priority.items() if len(names) > 1}


class AppSet(BaseModel):
    """Apps sharing one HTTPS listener; rule priorities must be distinct."""

    apps: Dict[str, AppConfig] = Field(..., min_length=1)

    @field_validator('apps')
    @classmethod
    def validate_unique_priorities(cls, v: Dict[str, AppConfig]) -> Dict[str, AppConfig]:
        duplicates = duplicate_priorities({name: app.priority for name, app in v.items()})
        if duplicates:
            detail = ", ".join(
                f"{priority} used by {' and '.join(names)}" for priority, names in sorted(duplicates.items())
            )
            raise ValueError(f"Listener rule priorities must be unique: {detail}")
        return v

    def items(self) -> Iterator[Tuple[str, AppConfig]]:
        return iter(self.apps.items())

    def __len__(self) -> int:
        return len(self.apps)

    def __getitem__(self, name: str) -> AppConfig:
        return self.apps[name]

    def names(self) -> List[str]:
        return list(self.apps)

    def ports(self) -> List[int]:
        return [app.port for app in self.apps.values()]

    def to_vars(self) -> Dict[str, Dict[str, Any]]:
        """Render as the nested map the terraform ``apps`` variable expects."""
        return {name: app.model_dump() for name, app in self.apps.items()}

    @classmethod
    def from_vars(cls, apps: Mapping[str, Mapping[str, Any]]) -> "AppSet":
        """Build from the nested ``apps`` variable map; raises ValidationError on bad input."""
        return cls(apps={name: AppConfig(**dict(app)) for name, app in apps.items()})


def default_apps(domain: str) -> AppSet:
    """The fixed two-application configuration the ALB and compute tests deploy."""
    return AppSet.from_vars({
        "app1": {
            "port": 8085,
            "path": "/app1/*",
            "health_check_url": "/app1/status",
            "domain": [domain],
            "priority": 100,
        },
        "app2": {
            "port": 8086,
            "path": "/app2/*",
            "health_check_url": "/app2/status",
            "domain": [domain],
            "priority": 200,
        },
    })
