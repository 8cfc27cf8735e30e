"""Request models decoded from the incoming envelope."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from duckquery.errors import InvalidRequestError

logger = logging.getLogger(__name__)

FORMAT_TABLE = "table"
FORMAT_TIME_SERIES = "time_series"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class QuerySpec(_WireModel):
    """One query of a batch."""

    ref_id: str = Field(default="", alias="refId")
    raw_sql: str = Field(default="", alias="rawSql")
    format: str = Field(default=FORMAT_TABLE)
    datasource_id: str = Field(default="", alias="datasourceId")
    interval_ms: int = Field(default=0, ge=0, alias="intervalMs")
    max_data_points: int = Field(default=0, ge=0, alias="maxDataPoints")
    # Set when the query model was malformed; the query then fails on its own.
    decode_error: str = Field(default="", exclude=True)

    @field_validator("format", mode="before")
    @classmethod
    def _default_format(cls, value: Any) -> Any:
        # Front ends omit the format for plain table panels.
        return value or FORMAT_TABLE

    @field_validator("datasource_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @classmethod
    def from_model_json(cls, model_json: str) -> QuerySpec:
        """Decode a per-query JSON model string."""
        try:
            return cls.model_validate_json(model_json)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid query model: {e}") from e

    def is_table(self) -> bool:
        return self.format == FORMAT_TABLE


class ConnectionParams(_WireModel):
    """Shared connection parameters for every query of a batch."""

    url: str = ""
    user: str = ""
    database: str = ""
    tls_mode: str = Field(default="none", alias="tlsmode")
    use_prepared_statements: bool = Field(default=False, alias="usePreparedStatements")
    password: SecretStr = Field(default=SecretStr(""))

    def dsn(self, scheme: str = "duckdb", *, redact: bool = True) -> str:
        """
        Connection string for logs and URL-style drivers.

        Examples:
            >>> ConnectionParams(url="db:5433", user="me", database="dw").dsn("vertica")
            'vertica://me:***@db:5433/dw'
        """
        password = "***" if redact else self.password.get_secret_value()
        return f"{scheme}://{self.user}:{password}@{self.url}/{self.database}"


class TimeRange(_WireModel):
    """Dashboard time range, in Unix epoch milliseconds."""

    from_epoch_ms: int = Field(alias="fromEpochMs")
    to_epoch_ms: int = Field(alias="toEpochMs")

    @property
    def start(self) -> datetime:
        return datetime.fromtimestamp(self.from_epoch_ms / 1000, tz=timezone.utc)

    @property
    def end(self) -> datetime:
        return datetime.fromtimestamp(self.to_epoch_ms / 1000, tz=timezone.utc)


class BatchRequest(_WireModel):
    """
    A batch of queries sharing one connection.

    The order of ``queries`` fixes the order of the response.
    """

    connection: ConnectionParams = Field(default_factory=ConnectionParams)
    queries: List[QuerySpec] = Field(default_factory=list)
    time_range: Optional[TimeRange] = Field(default=None, alias="timeRange")


def _raw_ref_id(item: Any) -> str:
    if isinstance(item, dict) and "modelJson" in item:
        try:
            item = json.loads(item["modelJson"])
        except (TypeError, ValueError):
            return ""
    if isinstance(item, dict):
        ref_id = item.get("refId", item.get("ref_id"))
        return "" if ref_id is None else str(ref_id)
    return ""


def _decode_query(item: Any) -> QuerySpec:
    """Decode one query; a malformed model becomes a query carrying its error."""
    if isinstance(item, QuerySpec):
        return item

    try:
        if isinstance(item, dict) and "modelJson" in item:
            return QuerySpec.from_model_json(item["modelJson"])
        return QuerySpec.model_validate(item)
    except (ValidationError, InvalidRequestError) as e:
        ref_id = _raw_ref_id(item)
        logger.warning("[%s] Query model could not be decoded: %s", ref_id, e)
        message = str(e) if isinstance(e, InvalidRequestError) else f"Invalid query model: {e}"
        return QuerySpec(ref_id=ref_id, decode_error=message)


def _object_field(container: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = container.get(key) or {}
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise InvalidRequestError(f"'{key}' is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise InvalidRequestError(f"'{key}' must be an object")
    return value


def decode_request(payload: Dict[str, Any]) -> BatchRequest:
    """
    Decode a request envelope into a BatchRequest.

    The envelope carries the datasource settings (``url``, ``jsonData``,
    ``decryptedSecureJsonData``), an optional ``timeRange`` and the
    ``queries``. A query is either a plain object or a ``modelJson`` string;
    ``jsonData`` may also arrive as a JSON string.

    A query that fails to decode keeps its slot and is answered with its
    decode error; the other queries still run.

    Raises:
        InvalidRequestError: If the envelope itself cannot be decoded
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request envelope must be an object")

    datasource = _object_field(payload, "datasource")
    json_data = _object_field(datasource, "jsonData")
    secure = _object_field(datasource, "decryptedSecureJsonData")

    queries = payload.get("queries") or []
    if not isinstance(queries, list):
        raise InvalidRequestError("'queries' must be a list")

    try:
        connection = ConnectionParams.model_validate(
            {**json_data, "url": datasource.get("url", ""), "password": secure.get("password", "")}
        )
        time_range = payload.get("timeRange")
        return BatchRequest(
            connection=connection,
            queries=[_decode_query(item) for item in queries],
            time_range=TimeRange.model_validate(time_range) if time_range else None,
        )
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid request: {e}") from e
