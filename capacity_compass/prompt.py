"""
Prompt template for sprint analysis.

Formatting only: turns an AnalysisRequest into the text sent to the model.
"""

from .schemas import AnalysisRequest


SYSTEM_MESSAGE = "You are an expert Agile project manager. Return strictly valid JSON."

ANALYSIS_TEMPLATE = """You are an expert Agile project manager. Analyze the following sprint plan and identify potential risks and recommend best practices.

Sprint Details:
- Start Date: {start_date}
- End Date: {end_date}
- Public Holidays: {public_holidays}
- Total Committable Story Points: {total_story_points}

Team Composition and Availability:
{resource_lines}

Based on this information, provide a concise list of potential risks. Consider factors like:
- High number of leave days for one or more resources creating a single point of failure.
- Overall team capacity reduction due to holidays and leave.
- The impact of a short sprint or many non-working days.

Then, provide a list of actionable best practices to mitigate these risks and ensure a successful sprint.
"""

OUTPUT_INSTRUCTIONS = """
Respond with a single JSON object of this exact shape and nothing else:
{"risks": ["<risk>", ...], "bestPractices": ["<best practice>", ...]}
Both lists must contain only strings. Use an empty list if there is nothing to report."""


def render_resource_line(name: str, leaves: int) -> str:
    return f"- {name} has {leaves} day(s) of leave."


def render_analysis_prompt(request: AnalysisRequest, include_output_schema: bool = True) -> str:
    """
    Render the analysis prompt for a request.

    Args:
        request: Sprint snapshot to describe
        include_output_schema: Append the JSON output instructions
    """
    resource_lines = "\n".join(
        render_resource_line(r.name, r.leaves) for r in request.resources
    )

    prompt = ANALYSIS_TEMPLATE.format(
        start_date=request.start_date,
        end_date=request.end_date,
        public_holidays=request.public_holidays,
        total_story_points=request.total_story_points,
        resource_lines=resource_lines
    )

    if include_output_schema:
        prompt += OUTPUT_INSTRUCTIONS
    return prompt


def build_messages(request: AnalysisRequest) -> list[dict]:
    """Chat messages for an OpenAI-compatible completion call."""
    return [
        {"role": "system", "content": SYSTEM_MESSAGE},
        {"role": "user", "content": render_analysis_prompt(request)}
    ]
