"""Response shapes understood by the dashboard's JSON-datasource renderer."""
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from stravasource.models.activity import Number


class TimeSeriesResult(BaseModel):
    """A labelled point series: datapoints are [value, epoch_ms] pairs."""

    target: str
    datapoints: List[Tuple[Optional[Number], int]] = []


class TableColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    unit: Optional[str] = None  # "lengthm", "s", "joule"


class TableResult(BaseModel):
    type: Literal["table"] = "table"
    columns: List[TableColumn]
    rows: List[List[Any]] = []


ShapedResult = Union[TimeSeriesResult, TableResult]


class HealthStatus(BaseModel):
    status: Literal["success", "error"]
    message: str
