"""
Request and response schemas for sprint analysis.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ResourceLeave(BaseModel):
    """A resource as sent for analysis."""
    name: str
    leaves: int


class AnalysisRequest(BaseModel):
    """Snapshot of a sprint plan sent to the language model."""
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(alias="startDate", description="The start date of the sprint.")
    end_date: str = Field(alias="endDate", description="The end date of the sprint.")
    public_holidays: int = Field(alias="publicHolidays", description="Number of public holidays during the sprint.")
    resources: list[ResourceLeave] = Field(description="List of resources and their planned leave days.")
    total_story_points: float = Field(alias="totalStoryPoints", description="Total story points the team can commit to.")

    def to_payload(self) -> dict:
        """Wire form with camelCase keys."""
        return self.model_dump(by_alias=True)


class AnalysisResult(BaseModel):
    """Risks and best practices returned by the language model."""
    model_config = ConfigDict(populate_by_name=True)

    risks: list[StrictStr] = Field(
        description="A list of potential risks for the sprint based on the provided data. Be specific and actionable."
    )
    best_practices: list[StrictStr] = Field(
        alias="bestPractices",
        description="A list of recommended best practices for a successful sprint, tailored to the team composition if possible."
    )

    @property
    def is_empty(self) -> bool:
        return not self.risks and not self.best_practices

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
