"""Report Form Pydantic Model

The user's selection for a tab render report.
"""

from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, Field, model_validator

from portal_stats.models.aggregation_interval import AggregationInterval


class TabRenderReportForm(BaseModel):
    """Filter criteria for a tab render report.

    Attributes:
        interval: Aggregation granularity of the report rows
        start: First day included in the report
        end: Last day included in the report
        groups: Ids of the groups to report on
        tabs: Ids of the tabs to report on

    The report has one column per (group, tab) pair.
    """

    interval: AggregationInterval = Field(default=AggregationInterval.DAY, description="Row granularity")
    start: date = Field(..., description="First day of the report")
    end: date = Field(..., description="Last day of the report (inclusive)")
    groups: list[int] = Field(default_factory=list, description="Selected group ids")
    tabs: list[int] = Field(default_factory=list, description="Selected tab ids")

    @model_validator(mode='after')
    def validate_date_range(self) -> 'TabRenderReportForm':
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must not be after end ({self.end})")
        return self

    @property
    def start_date_time(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def end_date_time(self) -> datetime:
        """Last instant of the end day."""
        return datetime.combine(self.end + timedelta(days=1), time.min) - timedelta(microseconds=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "interval": "day",
                "start": "2024-03-01",
                "end": "2024-03-31",
                "groups": [1],
                "tabs": [3, 4]
            }
        }
    }
