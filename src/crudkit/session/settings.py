"""
Backend settings values with a per-key client cache.

Settings are typed on the wire as ``{"type": <tag>, "data": <value>}``:

    {"key": "currency_prefix", "long_name": "Currency prefix",
     "description": null, "value": {"type": "string", "data": "$"}}
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from crudkit.core.display import CurrencyFormat
from crudkit.core.errors import SettingsFetchError
from crudkit.logging import get_settings_logger
from crudkit.session.models import AuthStatus

if TYPE_CHECKING:
    import httpx

    from crudkit.session.gateway import BackendGateway
    from crudkit.session.store import SessionSnapshot, SessionStore

logger = get_settings_logger()

GET_ONE_ENDPOINT = "settings/get_one"
GET_MULTIPLE_ENDPOINT = "settings/get_multiple"
SET_ENDPOINT = "settings/set"

CURRENCY_SETTING_KEYS = (
    "currency_prefix",
    "currency_suffix",
    "currency_decimal_places",
    "currency_decimal_separator",
    "currency_thousand_separator",
)


# =============================================================================
# Setting values
# =============================================================================


class _SettingValueBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BooleanSetting(_SettingValueBase):
    type: Literal["boolean"] = "boolean"
    data: bool


class StringSetting(_SettingValueBase):
    type: Literal["string"] = "string"
    data: str


class IntSetting(_SettingValueBase):
    type: Literal["int"] = "int"
    data: int


class FloatSetting(_SettingValueBase):
    type: Literal["float"] = "float"
    data: float


class UnsignedIntSetting(_SettingValueBase):
    type: Literal["unsigned_int"] = "unsigned_int"
    data: int = Field(ge=0)


class DecimalSetting(_SettingValueBase):
    type: Literal["decimal"] = "decimal"
    data: Decimal


class ImageSetting(_SettingValueBase):
    """Image stored as a base64 data URI."""

    type: Literal["image_base64_uri"] = "image_base64_uri"
    data: str


class StringListSetting(_SettingValueBase):
    type: Literal["string_list"] = "string_list"
    data: list[str]


SettingValue = Annotated[
    Union[
        BooleanSetting,
        StringSetting,
        IntSetting,
        FloatSetting,
        UnsignedIntSetting,
        DecimalSetting,
        ImageSetting,
        StringListSetting,
    ],
    Field(discriminator="type"),
]

_setting_value_adapter: TypeAdapter[SettingValue] = TypeAdapter(SettingValue)


def parse_setting_value(raw: Any) -> SettingValue:
    """Parse a wire-form setting value."""
    return _setting_value_adapter.validate_python(raw)


class Setting(BaseModel):
    """A named backend setting."""

    key: str
    long_name: str = ""
    description: str | None = None
    value: SettingValue

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Client
# =============================================================================


class SettingsClient:
    """
    Reads and writes backend settings, caching values per key.

    A cached value is returned as the identical object on every later call.
    When given a session store, the cache is dropped whenever the session
    becomes NOT_AUTHENTICATED.
    """

    def __init__(self, gateway: BackendGateway, store: SessionStore | None = None):
        self.gateway = gateway
        self._cache: dict[str, SettingValue] = {}
        self._pending: dict[str, asyncio.Task[SettingValue]] = {}
        # Bumped by clear(); a fetch started under an older generation does not cache
        self._generation = 0
        self._unsubscribe = store.subscribe(self._on_session_change) if store else None

    def cached(self, key: str) -> SettingValue | None:
        return self._cache.get(key)

    def clear(self) -> None:
        if self._cache:
            logger.debug("Clearing %d cached setting(s)", len(self._cache))
        self._generation += 1
        self._cache.clear()
        self._pending.clear()

    def close(self) -> None:
        """Stop listening to the session store."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def get_one(self, key: str) -> SettingValue:
        """
        Get one setting value.

        Concurrent first requests for the same key share one backend call.

        Raises:
            SettingsFetchError: Backend answered non-200 or sent a malformed value
            UnreachableServer: Transport failure
        """
        if key in self._cache:
            return self._cache[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_one(key, self._generation))
            self._pending[key] = task
            task.add_done_callback(lambda t: self._forget_pending(key, t))
        return await task

    def _forget_pending(self, key: str, task: asyncio.Task[SettingValue]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    async def _fetch_one(self, key: str, generation: int) -> SettingValue:
        response = await self.gateway.call(f"{GET_ONE_ENDPOINT}/{quote(key, safe='')}", "GET")
        if response.status_code != 200:
            logger.warning("Fetching setting %s failed with HTTP %d", key, response.status_code)
            raise SettingsFetchError(
                f"Could not fetch setting '{key}' (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        payload = _json_body(response, f"setting '{key}'")
        if not isinstance(payload, dict) or "value" not in payload:
            raise SettingsFetchError(f"Malformed response for setting '{key}'")
        try:
            value = parse_setting_value(payload["value"])
        except ValidationError as e:
            raise SettingsFetchError(f"Malformed value for setting '{key}': {e}") from e

        if generation == self._generation:
            self._cache[key] = value
        return value

    async def get_multiple(self, keys: Iterable[str]) -> dict[str, SettingValue]:
        """
        Get several settings, fetching only keys not already cached.

        Keys the backend does not return are absent from the result.
        """
        wanted = list(dict.fromkeys(keys))
        found = {key: self._cache[key] for key in wanted if key in self._cache}
        missing = [key for key in wanted if key not in found]

        if missing:
            generation = self._generation
            response = await self.gateway.call(GET_MULTIPLE_ENDPOINT, "POST", {"keys": missing})
            if response.status_code != 200:
                logger.warning("Fetching settings failed with HTTP %d", response.status_code)
                raise SettingsFetchError(
                    f"Could not fetch settings {missing} (HTTP {response.status_code})",
                    status_code=response.status_code,
                )
            payload = _json_body(response, "settings")
            try:
                settings = [Setting.model_validate(item) for item in payload]
            except (TypeError, ValidationError) as e:
                raise SettingsFetchError(f"Malformed settings response: {e}") from e
            for setting in settings:
                if generation == self._generation:
                    value = self._cache.setdefault(setting.key, setting.value)
                else:
                    value = setting.value
                found.setdefault(setting.key, value)

        return {key: found[key] for key in wanted if key in found}

    async def set(self, setting: Setting) -> None:
        """
        Store a setting on the backend and update the cache.

        Raises:
            SettingsFetchError: Backend answered non-2xx
        """
        generation = self._generation
        response = await self.gateway.call(SET_ENDPOINT, "POST", setting.model_dump(mode="json"))
        if not 200 <= response.status_code < 300:
            logger.warning(
                "Saving setting %s failed with HTTP %d", setting.key, response.status_code
            )
            raise SettingsFetchError(
                f"Could not save setting '{setting.key}' (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if generation == self._generation:
            self._cache[setting.key] = setting.value

    async def currency_format(self) -> CurrencyFormat:
        """Currency display settings, with defaults for keys the backend lacks."""
        values = await self.get_multiple(CURRENCY_SETTING_KEYS)
        return CurrencyFormat.from_settings({key: value.data for key, value in values.items()})

    def _on_session_change(self, snapshot: SessionSnapshot) -> None:
        if snapshot.status == AuthStatus.NOT_AUTHENTICATED:
            self.clear()


def _json_body(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise SettingsFetchError(f"Response for {what} is not JSON: {e}") from e
