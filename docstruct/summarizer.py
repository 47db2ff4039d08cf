"""
Executive summary generation.

The remote step asks a hosted language model for a JSON summary of the
document. Any failure there (no key, network or HTTP error, unparseable or
mis-shaped reply) is logged and the deterministic local summary is returned
instead. The result is tagged with its provenance.
"""

import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from jsonschema import ValidationError, validate

from .config import SummarizerConfig
from .data_models import (
    DocumentStructure, Summary, SummaryResult, SummarySource, VisualizationSuggestion,
)
from .logging_config import SummarizerError, setup_logging

logger = setup_logging()

SUMMARY_SCHEMA_PATH = Path(__file__).parent / "schema" / "summary_schema.json"

MIN_PARAGRAPH_LENGTH = 20
SUMMARY_PARAGRAPHS = 3

DEFAULT_SUGGESTIONS = (
    VisualizationSuggestion(
        type="bar chart",
        description="Frequency of key terms",
        data_required="Word frequency data from document text",
    ),
    VisualizationSuggestion(
        type="pie chart",
        description="Distribution of entity types",
        data_required="Entity counts by type",
    ),
)

TABLE_SUGGESTION = VisualizationSuggestion(
    type="table visualization",
    description="Interactive representation of table data",
    data_required="Table content from the document",
)

NO_INSIGHTS = "No clear insights could be automatically generated."
LOCAL_DATA_GAP = "AI-based content analysis was unavailable."

PROMPT_TEMPLATE = """
I need you to analyze this PDF document content and create an executive summary.
Focus on the main points, insights, and key data.

Document content:
{text}

{tables_info}

{headings_info}

Please provide:
1. A concise executive summary (3-4 paragraphs)
2. 5-7 key insights or takeaways
3. Suggest 3-5 data visualization types that would best represent this information and why
4. Identify any gaps in the data that would benefit from additional information

Format your response in JSON like this:
{{
  "summary": "The executive summary...",
  "insights": ["Insight 1", "Insight 2", ...],
  "visualizationSuggestions": [
    {{"type": "visualization type", "description": "what it would show", "dataRequired": "what data it needs"}}
  ],
  "dataGaps": ["Gap 1", "Gap 2", ...]
}}
"""


def _load_summary_schema() -> Dict[str, Any]:
    with open(SUMMARY_SCHEMA_PATH, 'r', encoding='utf-8') as f:
        return json.load(f)


def create_summary_prompt(structure: DocumentStructure, max_chars: int = 8000) -> str:
    """
    Build the prompt sent to the remote summarizer.

    Args:
        structure: Processed document
        max_chars: Number of leading text characters to include

    Returns:
        Prompt text
    """
    if structure.tables:
        first_rows = [list(row) for row in structure.tables[0].rows[:5]]
        tables_info = (
            f"The document contains {len(structure.tables)} tables. "
            f"Here's the first one: {json.dumps(first_rows, ensure_ascii=False)}"
        )
    else:
        tables_info = "The document does not contain any tables."

    if structure.headings:
        headings_info = "The document contains these headings: " + ", ".join(h.text for h in structure.headings)
    else:
        headings_info = "No clear headings were detected."

    return PROMPT_TEMPLATE.format(
        text=structure.text[:max_chars],
        tables_info=tables_info,
        headings_info=headings_info,
    )


def parse_summary_response(response_text: str, schema: Optional[Dict[str, Any]] = None) -> Summary:
    """
    Parse the JSON object embedded in a model reply.

    The span from the first ``{`` to the last ``}`` is decoded and checked
    against the summary schema.

    Raises:
        SummarizerError: If no object is found, it is not valid JSON, or it has the wrong shape
    """
    start = response_text.find('{')
    end = response_text.rfind('}')
    if start < 0 or end < start:
        raise SummarizerError("Reply does not contain a JSON object")

    try:
        data = json.loads(response_text[start:end + 1])
    except json.JSONDecodeError as e:
        raise SummarizerError(f"Reply JSON could not be decoded: {e}") from e

    try:
        validate(instance=data, schema=schema or _load_summary_schema())
    except ValidationError as e:
        raise SummarizerError(f"Reply has unexpected shape: {e.message}") from e

    return Summary.from_json_dict(data)


def generate_local_summary(structure: DocumentStructure) -> Summary:
    """
    Build a deterministic summary from the document itself.

    Args:
        structure: Processed document

    Returns:
        Summary made of the leading paragraphs, metadata and structure counts
    """
    paragraphs = [
        p.strip() for p in structure.text.split("\n\n")
        if len(p.strip()) > MIN_PARAGRAPH_LENGTH
    ]
    summary_text = "\n\n".join(paragraphs[:SUMMARY_PARAGRAPHS])

    insights: List[str] = []
    metadata = structure.metadata or {}
    if metadata.get("Title"):
        insights.append(f'The document is titled "{metadata["Title"]}".')
    if metadata.get("Author"):
        insights.append(f"The document was created by {metadata['Author']}.")
    if structure.tables:
        insights.append(f"The document contains {len(structure.tables)} tables.")
    if structure.headings:
        insights.append(f"The document contains {len(structure.headings)} sections.")
    if structure.entities:
        # Counter keeps first-seen order of entity types.
        counts = Counter(entity.type for entity in structure.entities)
        references = ", ".join(f"{count} {entity_type} references" for entity_type, count in counts.items())
        insights.append(f"The document contains {references}.")

    suggestions = list(DEFAULT_SUGGESTIONS)
    if structure.tables:
        suggestions.append(TABLE_SUGGESTION)

    return Summary(
        summary=summary_text,
        insights=tuple(insights) if insights else (NO_INSIGHTS,),
        visualization_suggestions=tuple(suggestions),
        data_gaps=(LOCAL_DATA_GAP,),
    )


class Summarizer:
    """
    Summarizes a DocumentStructure, remotely when possible and locally otherwise.
    """

    def __init__(self, config: Optional[SummarizerConfig] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the summarizer.

        Args:
            config: Remote API settings; read from the environment when omitted
            session: Optional requests session (connection reuse, testing)
        """
        self.config = config or SummarizerConfig.from_env()
        self.session = session

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        if self.session is not None:
            return self.session.post(url, **kwargs)
        return requests.post(url, **kwargs)

    def request_remote_summary(self, structure: DocumentStructure) -> Summary:
        """
        Ask the remote model for a summary.

        Raises:
            SummarizerError: On missing key, transport failure or bad reply
        """
        if not self.config.api_key:
            raise SummarizerError("No API key configured for the remote summarizer")

        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.config.api_key,
            "anthropic-version": self.config.api_version,
        }
        payload = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [
                {"role": "user", "content": create_summary_prompt(structure, self.config.max_prompt_chars)},
            ],
        }

        try:
            response = self._post(self.config.api_url, headers=headers, json=payload,
                                  timeout=self.config.timeout)
            response.raise_for_status()
            body = response.json()
            reply_text = body["content"][0]["text"]
        except requests.exceptions.RequestException as e:
            raise SummarizerError(f"Remote summarizer request failed: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SummarizerError(f"Remote summarizer returned an unexpected body: {e}") from e

        return parse_summary_response(reply_text)

    def summarize(self, structure: DocumentStructure) -> SummaryResult:
        """
        Summarize a document, falling back to the local summary on any remote failure.

        Args:
            structure: Processed document

        Returns:
            SummaryResult tagged REMOTE or LOCAL
        """
        try:
            summary = self.request_remote_summary(structure)
            logger.info("Generated remote summary")
            return SummaryResult(summary=summary, source=SummarySource.REMOTE)
        except SummarizerError as e:
            logger.warning(f"Remote summary unavailable, using local summary: {e}")
            return SummaryResult(summary=generate_local_summary(structure), source=SummarySource.LOCAL)


def summarize_document(structure: DocumentStructure, api_key: Optional[str] = None) -> SummaryResult:
    """Convenience function summarizing with environment configuration."""
    return Summarizer(SummarizerConfig.from_env(api_key=api_key)).summarize(structure)
