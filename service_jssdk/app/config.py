"""
Engine options for the JSSDK service.

Options are validated once, when an engine is built. Wire names
(``appId``, ``nonceStrLength``...) and attribute names (``app_id``,
``nonce_str_length``...) are both accepted.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from shared.config import BaseConfig
from shared.errors import ConfigurationError

NONCE_STR_DEFAULT = 16
NONCE_STR_MAX = 32


class PersistenceMode(str, Enum):
    """Where credential records are persisted."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


# Legacy labels accepted at the configuration boundary.
_MODE_ALIASES: Dict[str, PersistenceMode] = {
    "": PersistenceMode.MEMORY,
    "none": PersistenceMode.MEMORY,
    "mem": PersistenceMode.MEMORY,
    "memory": PersistenceMode.MEMORY,
    "file": PersistenceMode.FILE,
    "redis": PersistenceMode.REDIS,
}


def parse_persistence_mode(value: Any) -> PersistenceMode:
    """Normalize a persistence label to a ``PersistenceMode``."""
    if value is None:
        return PersistenceMode.MEMORY
    if isinstance(value, PersistenceMode):
        return value
    label = str(value).strip().lower()
    if label not in _MODE_ALIASES:
        raise ValueError(f"unknown persistence type '{value}', expected one of memory, file, redis")
    return _MODE_ALIASES[label]


def clamp_nonce_length(value: Any) -> int:
    """Clamp a nonce length to [1, NONCE_STR_MAX]; unset or zero means the default."""
    if not value:
        return NONCE_STR_DEFAULT
    return max(1, min(NONCE_STR_MAX, int(value)))


class JSSDKOptions(BaseModel):
    """Immutable engine configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    corp: bool = False
    app_id: str = Field(alias="appId")
    secret: str
    nonce_str_length: int = Field(default=NONCE_STR_DEFAULT, alias="nonceStrLength")
    type: PersistenceMode = PersistenceMode.MEMORY
    redis_host: Optional[str] = Field(default="127.0.0.1", alias="redisHost")
    redis_port: Optional[int] = Field(default=6379, alias="redisPort")
    redis_auth: Optional[str] = Field(default=None, alias="redisAuth")
    token_filename: Optional[str] = Field(default=None, alias="tokenFilename")
    ticket_filename: Optional[str] = Field(default=None, alias="ticketFilename")
    cache: bool = True
    debug: bool = False

    @model_validator(mode="before")
    @classmethod
    def _force_cache_for_memory(cls, data: Any) -> Any:
        # Memory persistence has nowhere else to keep records.
        if isinstance(data, Mapping):
            try:
                mode = parse_persistence_mode(data.get("type"))
            except ValueError:
                return data
            if mode is PersistenceMode.MEMORY:
                data = {**data, "cache": True}
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> PersistenceMode:
        return parse_persistence_mode(value)

    @field_validator("nonce_str_length", mode="before")
    @classmethod
    def _clamp_nonce_length(cls, value: Any) -> int:
        return clamp_nonce_length(value)

    @model_validator(mode="after")
    def _check_required(self) -> "JSSDKOptions":
        if not self.app_id or not self.secret:
            raise ValueError("appId and secret must be provided!")
        if self.type is PersistenceMode.FILE and (not self.token_filename or not self.ticket_filename):
            raise ValueError("if type = file, tokenFilename and ticketFilename must be provided!")
        if self.type is PersistenceMode.REDIS and (not self.redis_host or not self.redis_port):
            raise ValueError("if type = redis, redis config must be provided!")
        return self


OptionsInput = Union[JSSDKOptions, Mapping[str, Any], None]


def load_options(options: OptionsInput = None, **overrides: Any) -> JSSDKOptions:
    """Validate raw options, raising ``ConfigurationError`` on any violation."""
    if isinstance(options, JSSDKOptions):
        if not overrides:
            return options
        data: Dict[str, Any] = options.model_dump()
    else:
        data = dict(options or {})
    data.update(overrides)

    try:
        return JSSDKOptions.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        message = errors[0]["message"] if errors else "invalid options"
        raise ConfigurationError(message, details={"errors": errors}) from exc


def options_from_config(config: BaseConfig) -> JSSDKOptions:
    """Build engine options from environment-backed service settings."""
    return load_options(config.jssdk_settings())
