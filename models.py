from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class ReportModel(BaseModel):
    """Base for response models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Metrics(ReportModel):
    """
    Overall growth of one follower series.

    Attributes:
        current_followers: Latest known count
        absolute_growth: Latest minus earliest known count
        growth_rate: Growth as a percentage of the earliest count, one decimal
        consistency_score: Share of non-negative steps between known counts, in percent
    """
    current_followers: Number = 0
    absolute_growth: Number = 0
    growth_rate: float = 0.0
    consistency_score: int = 0


class PeriodMetric(ReportModel):
    """Growth between two consecutive known data points, keyed by the later date."""
    period: str
    period_key: str
    growth: Number
    growth_rate: float
    start_followers: Number
    end_followers: Number


class Employee(ReportModel):
    first_name: str = ""
    last_name: str = ""
    business_line: str = "Unassigned"
    status: str = ""
    linkedin_profile: str = ""
    followers: Dict[str, Number] = Field(default_factory=dict)
    metrics: Metrics = Field(default_factory=Metrics)
    period_metrics: List[PeriodMetric] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class BusinessLine(ReportModel):
    name: str
    followers: Dict[str, Number] = Field(default_factory=dict)
    metrics: Metrics = Field(default_factory=Metrics)
    period_metrics: List[PeriodMetric] = Field(default_factory=list)
    employee_count: int = 0

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def business_line(self) -> str:
        return self.name

    @property
    def linkedin_profile(self) -> str:
        return ""


class Winner(ReportModel):
    """Top grower of one period."""
    period: str
    period_key: str
    name: str
    business_line: str
    linkedin_profile: str = ""
    metric: PeriodMetric


class WinnerGroups(ReportModel):
    employees: List[Winner] = Field(default_factory=list)
    business_lines: List[Winner] = Field(default_factory=list)


class Summary(ReportModel):
    total_employees: int = 0
    total_followers: Number = 0
    avg_growth_rate: float = 0.0
    top_grower: Optional[str] = None
    last_updated: str


class ReportResponse(ReportModel):
    """
    Payload of the employees endpoint.

    ``business_lines`` is only present, and ``monthly_winners`` only grouped,
    when business-line aggregation is enabled.
    """
    employees: List[Employee] = Field(default_factory=list)
    business_lines: Optional[List[BusinessLine]] = None
    monthly_winners: Union[WinnerGroups, List[Winner]] = Field(default_factory=list)
    summary: Summary

    def to_payload(self) -> dict:
        payload = self.model_dump(mode="json", by_alias=True)
        if self.business_lines is None:
            payload.pop("businessLines")
        return payload
