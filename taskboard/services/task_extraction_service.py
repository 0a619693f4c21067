"""
Task extraction service.

Turns free text into persisted tasks:
prompt -> language model -> strip code fences -> JSON array ->
validate every draft -> insert accepted drafts one row at a time.

Drafts are validated up front, so a single bad draft fails the batch
before anything is written. Inserts are NOT wrapped in one transaction:
if an insert fails mid-batch, rows already written stay written.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.errors import (
    EmptyResponse,
    InvalidInput,
    InvalidTask,
    MalformedExtraction,
    ModelNotFound,
    UpstreamUnavailable,
)
from taskboard.models.task import Task
from taskboard.schemas.extraction import DraftCheck, RejectedDraft, TaskDraft, ValidDraft
from taskboard.services.llm_client import LLMAPIError, LLMClient, LLMConfigError
from taskboard.services.task_service import TaskService

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)

# Max chars of raw model output echoed into logs/error details
RAW_PREVIEW_CHARS = 500

PROMPT_TEMPLATE = """You are a project management assistant. Read the input below (meeting notes, a project description, requirements or similar) and break it down into a list of concrete, actionable tasks.

For each task, provide:
- title: a short, clear description of what needs to be done
- description: the relevant context and details for the task, or null
- priority: "high" (critical or urgent), "medium" (important but not urgent) or "low" (nice to have)
- assignee: the name of the person responsible if the input names one, otherwise null

Return ONLY a valid JSON array of task objects. Do not include explanatory text, markdown or code blocks. Example:
[
  {{
    "title": "Draft the release checklist",
    "description": "List every step needed before tagging the release, including sign-off owners",
    "priority": "high",
    "assignee": "Maria"
  }},
  {{
    "title": "Update onboarding docs",
    "description": null,
    "priority": "low",
    "assignee": null
  }}
]

Input:
{text}"""


@dataclass
class ExtractionResult:
    """Tasks created by one extraction call."""

    tasks: List[Task] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.tasks)


def build_prompt(text: str) -> str:
    """Embed the input verbatim in the fixed instruction prompt."""
    return PROMPT_TEMPLATE.format(text=text)


def strip_code_fences(raw: str) -> str:
    """Remove ```json / ``` markers the model may wrap around its answer."""
    return _FENCE_RE.sub("", raw).replace("```", "").strip()


def _preview(raw: str) -> str:
    if len(raw) <= RAW_PREVIEW_CHARS:
        return raw
    return raw[:RAW_PREVIEW_CHARS] + "..."


def parse_drafts(raw: str) -> List[Any]:
    """
    Parse model output into a list of raw draft objects.

    Raises MalformedExtraction when the cleaned text is not a JSON array.
    """
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse LLM response (%d chars): %s", len(raw), _preview(raw))
        raise MalformedExtraction(details=f"{exc} (raw response length {len(raw)}): {_preview(raw)}") from exc

    if not isinstance(parsed, list):
        logger.warning("LLM response is %s, expected array: %s", type(parsed).__name__, _preview(raw))
        raise MalformedExtraction(
            details=f"Expected a JSON array of tasks, got {type(parsed).__name__} (raw response length {len(raw)}): {_preview(raw)}"
        )
    return parsed


def _format_validation_error(exc: ValidationError) -> str:
    reasons = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid")
        # pydantic prefixes custom errors with "Value error, "
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        reasons.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(reasons)


def check_draft(index: int, item: Any) -> DraftCheck:
    """Validate one array element into ValidDraft or RejectedDraft."""
    if not isinstance(item, dict):
        return RejectedDraft(index=index, reason=f"expected an object, got {type(item).__name__}")
    try:
        return ValidDraft(index=index, draft=TaskDraft.model_validate(item))
    except ValidationError as exc:
        return RejectedDraft(index=index, reason=_format_validation_error(exc))


def validate_drafts(items: List[Any]) -> List[TaskDraft]:
    """Check every draft; any rejection fails the whole batch with InvalidTask."""
    checks = [check_draft(i, item) for i, item in enumerate(items)]
    rejected = [c for c in checks if isinstance(c, RejectedDraft)]
    if rejected:
        details = "; ".join(f"task {r.index}: {r.reason}" for r in rejected)
        logger.warning("Rejected %d of %d drafts: %s", len(rejected), len(items), details)
        raise InvalidTask(details=details)
    return [c.draft for c in checks if isinstance(c, ValidDraft)]


class TaskExtractionService:
    """Service for turning free text into persisted tasks."""

    def __init__(self, db: AsyncSession, llm: LLMClient, max_tokens: Optional[int] = None):
        self.tasks = TaskService(db)
        self.llm = llm
        self.max_tokens = max_tokens or settings.EXTRACTION_MAX_TOKENS

    async def _complete(self, prompt: str) -> str:
        try:
            return await self.llm.complete(prompt, max_tokens=self.max_tokens)
        except LLMConfigError as exc:
            raise UpstreamUnavailable(
                details=f"{exc}. Set {', '.join(exc.missing) or 'the LLM credentials'} and restart the server",
            ) from exc
        except LLMAPIError as exc:
            if exc.status_code == 404:
                raise ModelNotFound(
                    details=(
                        f'The model "{self.llm.model}" is not available. '
                        "Set the ANTHROPIC_MODEL environment variable to a valid model identifier"
                    ),
                ) from exc
            # Only upstream error statuses pass through; anything else is a bad gateway
            status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
            raise UpstreamUnavailable(
                details=exc.message or "Unknown API error",
                status_code=status_code,
            ) from exc

    async def extract(self, text: Any) -> ExtractionResult:
        """
        Extract tasks from free text and persist them.

        Raises InvalidInput, UpstreamUnavailable/ModelNotFound, EmptyResponse,
        MalformedExtraction or InvalidTask. Returns the created tasks.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput()

        logger.info("Extracting tasks from %d chars of input with model %s", len(text), self.llm.model)
        raw = await self._complete(build_prompt(text))

        if not raw or not raw.strip():
            logger.warning("LLM returned no text for model %s", self.llm.model)
            raise EmptyResponse()

        drafts = validate_drafts(parse_drafts(raw))
        logger.info("LLM proposed %d valid task drafts", len(drafts))

        result = ExtractionResult()
        for draft in drafts:
            try:
                task = await self.tasks.create_task(draft.to_create())
            except Exception:
                # Earlier rows are already committed; nothing is rolled back
                logger.exception(
                    "Persisting draft failed after %d of %d tasks were written",
                    result.count,
                    len(drafts),
                )
                raise
            result.tasks.append(task)

        logger.info("Persisted %d extracted tasks", result.count)
        return result
