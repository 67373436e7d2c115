"""JSON-datasource protocol routes: health check, query, search."""
from typing import List, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import AliasChoices, BaseModel, Field

from stravasource.datasource import StravaDatasource
from stravasource.models.activity import QueryTarget, TimeRange
from stravasource.models.results import HealthStatus, TableResult, TimeSeriesResult
from stravasource.strava.client import UpstreamError

router = APIRouter()


class QueryRequest(BaseModel):
    time_range: TimeRange = Field(validation_alias=AliasChoices("range", "timeRange"))
    targets: List[QueryTarget] = []


class QueryResponse(BaseModel):
    data: List[Union[TimeSeriesResult, TableResult]]


def get_datasource(request: Request) -> StravaDatasource:
    """FastAPI dependency returning the app's datasource."""
    return request.app.state.datasource


@router.get("/", response_model=HealthStatus)
async def health(datasource: StravaDatasource = Depends(get_datasource)):
    """Connection test. Always 200; the outcome is in the body."""
    return await datasource.test_datasource()


@router.post("/query", response_model=QueryResponse, response_model_exclude_none=True)
async def query(
    request: QueryRequest,
    datasource: StravaDatasource = Depends(get_datasource),
):
    """Shape the activities in the requested range once per target."""
    try:
        data = await datasource.query(request.time_range, request.targets)
    except UpstreamError:
        raise HTTPException(status_code=502, detail="Cannot fetch activities from Strava")
    return QueryResponse(data=data)


@router.post("/search", response_model=List[str])
def search(datasource: StravaDatasource = Depends(get_datasource)):
    """Statistic names available for activityStat."""
    return datasource.search()
