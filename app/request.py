"""
Request schema — validates the JSON body before any computation starts.

Wire names are camelCase (timeHorizon, simulationParams, ...); the Python
side uses snake_case attributes with pydantic aliases.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from behaviors.revenue_model import REVENUE_MODELS, detect_revenue_model
from core.errors import InputValidationError
from core.schema import (
    DEFAULT_INITIAL_INVESTMENT,
    DEFAULT_MONTHLY_COST,
    DEFAULT_PRICE,
    MAX_TIME_HORIZON,
    IdeaFinancialBaseline,
    SimulationParams,
    SimulationVariable,
)

ScenarioName = Literal["optimistic", "realistic", "pessimistic"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DistributionParametersModel(_WireModel):
    mean: Optional[float] = None
    std_dev: Optional[float] = Field(None, alias="stdDev")
    min: Optional[float] = None
    max: Optional[float] = None
    mode: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        return self.model_dump(by_alias=True, exclude_none=True)


class VariableModel(_WireModel):
    name: str = Field(min_length=1)
    type: str
    parameters: DistributionParametersModel = Field(default_factory=DistributionParametersModel)
    impact: str

    def to_variable(self) -> SimulationVariable:
        return SimulationVariable(
            name=self.name,
            distribution=self.type,
            parameters=self.parameters.to_dict(),
            impact=self.impact,
        )


class SimulationParamsModel(_WireModel):
    time_horizon: int = Field(alias="timeHorizon", gt=0, le=MAX_TIME_HORIZON)
    iterations: int = Field(gt=0)
    confidence_level: float = Field(0.95, alias="confidenceLevel", gt=0, le=1)
    variables: List[VariableModel] = Field(default_factory=list)
    seed: Optional[int] = Field(None, ge=0)

    @field_validator("variables", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def _unique_names(self) -> "SimulationParamsModel":
        names = [v.name for v in self.variables]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"variable names must be unique (duplicated: {', '.join(dupes)})")
        return self


class IdeaDataModel(_WireModel):
    title: str = "Untitled idea"
    description: Optional[str] = None
    monetization: Optional[str] = None
    revenue_model: Optional[str] = Field(None, alias="revenueModel")
    pricing: Optional[float] = Field(None, ge=0)
    monthly_costs: Optional[float] = Field(None, ge=0)
    initial_investment: Optional[float] = Field(None, ge=0)

    def to_baseline(self) -> IdeaFinancialBaseline:
        return IdeaFinancialBaseline(
            price=DEFAULT_PRICE if self.pricing is None else self.pricing,
            monthly_cost=DEFAULT_MONTHLY_COST if self.monthly_costs is None else self.monthly_costs,
            initial_investment=(
                DEFAULT_INITIAL_INVESTMENT if self.initial_investment is None else self.initial_investment
            ),
        )

    def detected_revenue_model(self) -> str:
        """A recognised revenue_model wins; otherwise classify monetization/description."""
        declared = (self.revenue_model or "").strip().lower()
        if declared in REVENUE_MODELS:
            return declared
        return detect_revenue_model(self.monetization, self.description)


class SimulationRequest(_WireModel):
    idea_data: IdeaDataModel = Field(alias="ideaData")
    simulation_params: SimulationParamsModel = Field(alias="simulationParams")
    scenario_types: List[ScenarioName] = Field(alias="scenarioTypes", min_length=1)

    @field_validator("scenario_types")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    def to_params(self) -> SimulationParams:
        p = self.simulation_params
        return SimulationParams(
            time_horizon=p.time_horizon,
            iterations=p.iterations,
            confidence_level=p.confidence_level,
            variables=tuple(v.to_variable() for v in p.variables),
            seed=p.seed,
        )


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_request(body: Any) -> SimulationRequest:
    """Validate a decoded JSON body; raise InputValidationError with a readable message."""
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    if not body.get("ideaData") or not body.get("simulationParams"):
        raise InputValidationError("ideaData and simulationParams are required")
    try:
        return SimulationRequest.model_validate(body)
    except ValidationError as exc:
        raise InputValidationError(_format_errors(exc)) from None
