from pydantic import BaseModel, Field


class ChartSeries(BaseModel):
    labels: list[str] = Field(default_factory=list, description="Quarter labels, e.g. 'Q1 1999'.")
    values: list[float] = Field(default_factory=list)


class CounterResponse(BaseModel):
    id: str
    value: float
