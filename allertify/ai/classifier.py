"""Allergen risk classifiers.

Two strategies share one contract:

- `DeterministicClassifier`: case-insensitive substring matching plus a
  cross-contamination / ambiguous-ingredient heuristic. No network.
- `ModelClassifier`: a structured-output chat model call. Any model error or
  timeout falls back to the deterministic strategy, so a scan always gets a
  verdict.

Which one runs is decided by `ScanConfig.use_deterministic_classifier`.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

import structlog
from langchain_core.messages import HumanMessage
from langchain_core.prompts import ChatPromptTemplate

from allertify.ai.prompts import (
    CONTEXT_BLOCK_TEMPLATE,
    IMAGE_PROMPT_TEMPLATE,
    INGREDIENTS_PROMPT_TEMPLATE,
)
from allertify.config import ScanConfig
from allertify.core.exceptions import InvalidInputException
from allertify.domain.schemas.risk import ProductContext, RiskEvaluation, RiskLevel

logger = structlog.get_logger(__name__)

CROSS_CONTAMINATION_MARKERS = ("may contain", "traces of")
AMBIGUOUS_INGREDIENTS = ("natural flavors", "spices")

NO_ALLERGIES_REASONING = "No allergies specified by user, product is considered safe."
IMAGE_REQUIRES_MODEL_REASONING = (
    "Image analysis requires the AI model, which is not available. "
    "The ingredients could not be verified, so please check the label manually."
)


def _clean_allergens(user_allergens: Sequence[str]) -> list[str]:
    seen = set()
    cleaned = []
    for allergen in user_allergens or []:
        label = (allergen or "").strip()
        if label and label.lower() not in seen:
            seen.add(label.lower())
            cleaned.append(label)
    return cleaned


def _no_allergies() -> RiskEvaluation:
    return RiskEvaluation(risk_level=RiskLevel.SAFE, matched_allergens=[], reasoning=NO_ALLERGIES_REASONING)


class RiskClassifier(ABC):
    """Maps ingredients (or a label image) and a user's allergens to a risk verdict."""

    name: str = "base"

    async def classify(
        self,
        ingredients_text: str,
        user_allergens: Sequence[str],
        context: Optional[ProductContext] = None,
    ) -> RiskEvaluation:
        allergens = _clean_allergens(user_allergens)
        if not allergens:
            return _no_allergies()
        if not ingredients_text or not ingredients_text.strip():
            raise InvalidInputException("Ingredients text cannot be empty")
        return await self._classify_text(ingredients_text, allergens, context)

    async def classify_image(self, image_url: str, user_allergens: Sequence[str]) -> RiskEvaluation:
        allergens = _clean_allergens(user_allergens)
        if not allergens:
            return _no_allergies()
        if not image_url or not image_url.strip():
            raise InvalidInputException("Image URL cannot be empty")
        return await self._classify_image(image_url, allergens)

    @abstractmethod
    async def _classify_text(
        self, ingredients_text: str, allergens: list[str], context: Optional[ProductContext]
    ) -> RiskEvaluation:
        ...

    @abstractmethod
    async def _classify_image(self, image_url: str, allergens: list[str]) -> RiskEvaluation:
        ...


def find_matched_allergens(ingredients_text: str, allergens: Sequence[str]) -> list[str]:
    """Allergen labels found in the text, in the order of `allergens`.

    Each label is tried as-is and with whitespace removed ("tree nuts" also
    matches "treenuts"), case-insensitively.
    """
    haystack = ingredients_text.lower()
    matched = []
    for allergen in allergens:
        needle = allergen.strip().lower()
        compact = re.sub(r"\s+", "", needle)
        if (needle and needle in haystack) or (compact and compact in haystack):
            matched.append(allergen)
    return matched


class DeterministicClassifier(RiskClassifier):
    name = "deterministic"

    def evaluate(
        self, ingredients_text: str, allergens: list[str], context: Optional[ProductContext] = None
    ) -> RiskEvaluation:
        matched = find_matched_allergens(ingredients_text, allergens)
        if matched:
            evaluation = RiskEvaluation(
                risk_level=RiskLevel.RISKY,
                matched_allergens=matched,
                reasoning=f"Ingredients contain your allergens: {', '.join(matched)}.",
            )
        else:
            haystack = ingredients_text.lower()
            flagged = [m for m in CROSS_CONTAMINATION_MARKERS + AMBIGUOUS_INGREDIENTS if m in haystack]
            if flagged:
                evaluation = RiskEvaluation(
                    risk_level=RiskLevel.CAUTION,
                    matched_allergens=[],
                    reasoning=(
                        "None of your allergens are listed directly, but the ingredients mention "
                        f"{', '.join(repr(m) for m in flagged)}, which may indicate cross-contamination "
                        "or hidden allergens."
                    ),
                )
            else:
                evaluation = RiskEvaluation(
                    risk_level=RiskLevel.SAFE,
                    matched_allergens=[],
                    reasoning="None of your allergens were found in the ingredients.",
                )

        lines = context.lines() if context else []
        if lines:
            evaluation.reasoning = f"{evaluation.reasoning} ({'; '.join(lines)})"
        return evaluation

    async def _classify_text(
        self, ingredients_text: str, allergens: list[str], context: Optional[ProductContext]
    ) -> RiskEvaluation:
        return self.evaluate(ingredients_text, allergens, context)

    async def _classify_image(self, image_url: str, allergens: list[str]) -> RiskEvaluation:
        return RiskEvaluation(
            risk_level=RiskLevel.CAUTION,
            matched_allergens=[],
            reasoning=IMAGE_REQUIRES_MODEL_REASONING,
        )


class ModelClassifier(RiskClassifier):
    name = "model"

    def __init__(self, llm, fallback: Optional[DeterministicClassifier] = None, timeout: float = 30.0):
        self._structured_llm = llm.with_structured_output(RiskEvaluation)
        self._prompt = ChatPromptTemplate.from_template(INGREDIENTS_PROMPT_TEMPLATE)
        self.fallback = fallback or DeterministicClassifier()
        self.timeout = timeout

    async def _run(self, runnable, payload) -> RiskEvaluation:
        result = await asyncio.wait_for(runnable.ainvoke(payload), timeout=self.timeout)
        if isinstance(result, dict):
            result = RiskEvaluation.model_validate(result)
        if not isinstance(result, RiskEvaluation):
            raise ValueError(f"Unexpected model output: {type(result).__name__}")
        return result

    async def _classify_text(
        self, ingredients_text: str, allergens: list[str], context: Optional[ProductContext]
    ) -> RiskEvaluation:
        lines = context.lines() if context else []
        payload = {
            "allergies": ", ".join(allergens),
            "ingredients": ingredients_text,
            "context": CONTEXT_BLOCK_TEMPLATE.format(lines="\n".join(lines)) if lines else "",
        }
        try:
            return await self._run(self._prompt | self._structured_llm, payload)
        except Exception as e:
            logger.warning(
                "AI ingredient analysis failed, using deterministic fallback",
                error=str(e) or e.__class__.__name__,
            )
            return await self.fallback._classify_text(ingredients_text, allergens, context)

    async def _classify_image(self, image_url: str, allergens: list[str]) -> RiskEvaluation:
        messages = [
            HumanMessage(
                content=[
                    {"type": "text", "text": IMAGE_PROMPT_TEMPLATE.format(allergies=", ".join(allergens))},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ]
            )
        ]
        try:
            return await self._run(self._structured_llm, messages)
        except Exception as e:
            logger.warning(
                "AI image analysis failed, using deterministic fallback",
                error=str(e) or e.__class__.__name__,
            )
            return await self.fallback._classify_image(image_url, allergens)


def build_classifier(
    config: ScanConfig,
    llm_factory: Optional[Callable[[], object]] = None,
    timeout: float = 30.0,
) -> RiskClassifier:
    """Pick the strategy from configuration."""
    deterministic = DeterministicClassifier()
    if config.use_deterministic_classifier:
        return deterministic

    if llm_factory is None:
        from allertify.ai.llm import get_llm
        llm_factory = get_llm

    try:
        llm = llm_factory()
    except Exception as e:
        logger.error("Chat model unavailable, using deterministic classifier", error=str(e))
        return deterministic
    return ModelClassifier(llm, fallback=deterministic, timeout=timeout)
