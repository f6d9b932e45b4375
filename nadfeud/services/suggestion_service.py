"""Question suggestions from players, and their AI categorization for admins."""
import json
import logging

from openai import OpenAIError
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.auth import AuthSession, require_admin
from nadfeud.core.config import settings
from nadfeud.core.errors import ClassificationFailure, NotFound, ValidationError
from nadfeud.models.suggestion import Suggestion
from nadfeud.repositories import suggestion_repository
from nadfeud.services.llm_service import complete_json, parse_json_content

logger = logging.getLogger(__name__)

SUGGESTION_MAX_LENGTH = 500
CATEGORIES = (
    "General Knowledge",
    "Pop Culture",
    "Personal Opinions",
    "Community-Specific",
    "Game Mechanics",
    "Miscellaneous",
)
FALLBACK_CATEGORY = "Miscellaneous"


class CategorizedSuggestion(BaseModel):
    id: str
    category: str


_categorized_adapter = TypeAdapter(list[CategorizedSuggestion])


async def submit_suggestion(db: AsyncSession, session: AuthSession, text: str) -> Suggestion:
    text = (text or "").strip()
    if not text:
        raise ValidationError("suggestion must not be empty")
    if len(text) > SUGGESTION_MAX_LENGTH:
        raise ValidationError(f"suggestion is longer than {SUGGESTION_MAX_LENGTH} characters")
    return await suggestion_repository.create_suggestion(db, user_id=session.user_id, text=text)


async def list_suggestions(db: AsyncSession, session: AuthSession):
    require_admin(session)
    return await suggestion_repository.list_suggestions(db)


async def delete_suggestion(db: AsyncSession, session: AuthSession, suggestion_id: str) -> None:
    require_admin(session)
    if not await suggestion_repository.delete_suggestion_by_id(db, suggestion_id):
        raise NotFound("suggestion not found")


def categorize_by_keywords(text: str) -> str:
    lowered = text.lower()
    if "movie" in lowered or "song" in lowered:
        return "Pop Culture"
    if "what is" in lowered or "who is" in lowered:
        return "General Knowledge"
    if "your favorite" in lowered:
        return "Personal Opinions"
    return FALLBACK_CATEGORY


def _build_categorize_prompt(items: list[dict[str, str]]) -> str:
    categories = ", ".join(f'"{c}"' for c in CATEGORIES)
    return f"""You are an intelligent assistant for a game admin. Your task is to categorize user-submitted questions.
Analyze the following list of question suggestions and assign a category to each one.

Use these categories: {categories}.
If a suggestion doesn't fit well, use "{FALLBACK_CATEGORY}".

Here is the list of suggestions:
{json.dumps(items, ensure_ascii=False)}

Reply with a JSON object of the form {{"results": [{{"id": string, "category": string}}]}}, one entry per suggestion.
Do not add any extra text, markdown, or explanations."""


async def _categorize_with_llm(items: list[dict[str, str]]) -> dict[str, str]:
    try:
        raw = await complete_json(_build_categorize_prompt(items))
        data = parse_json_content(raw)
        if isinstance(data, dict):
            data = data.get("results")
        results = _categorized_adapter.validate_python(data)
    except (OpenAIError, ValueError, PydanticValidationError) as e:
        logger.warning("[categorize] model call failed: %s", e)
        raise ClassificationFailure(f"categorizing suggestions failed: {e}") from e
    known = {item["id"] for item in items}
    out: dict[str, str] = {}
    for r in results:
        if r.id in known:
            out[r.id] = r.category if r.category in CATEGORIES else FALLBACK_CATEGORY
    return out


async def categorize_suggestions(
    db: AsyncSession,
    session: AuthSession,
    suggestion_ids: list[str] | None = None,
) -> dict[str, str]:
    """
    Assign a category to the given suggestions (all of them when no ids are passed) and store it.
    Returns {suggestion_id: category}. Suggestions the model skipped keep their old category.
    """
    require_admin(session)
    if suggestion_ids:
        suggestions = await suggestion_repository.get_suggestions_by_ids(db, suggestion_ids)
    else:
        suggestions = [s for s, _ in await suggestion_repository.list_suggestions(db)]
    if not suggestions:
        return {}
    items = [{"id": s.id, "text": s.text} for s in suggestions]
    if settings.ai_backend == "mock":
        categories = {item["id"]: categorize_by_keywords(item["text"]) for item in items}
    else:
        categories = await _categorize_with_llm(items)
    await suggestion_repository.set_categories(db, categories)
    logger.info("[categorize] categorized %d of %d suggestions", len(categories), len(items))
    return categories
